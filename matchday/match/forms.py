"""Forms for the match blueprint."""

from flask_wtf import FlaskForm
from wtforms import DateTimeField, SelectField, StringField
from wtforms.validators import DataRequired, Optional

from matchday.core.constants import MatchStatus


class TieResolutionForm(FlaskForm):
    """Form for naming the winner of a drawn match."""

    class Meta:
        csrf = False

    winnerId = StringField("Winner", validators=[DataRequired()])


class MatchStatusForm(FlaskForm):
    """Form for rescheduling, starting or cancelling a match."""

    class Meta:
        csrf = False

    status = SelectField(
        "Status",
        choices=[(s.value, s.value) for s in MatchStatus],
        validators=[DataRequired()],
    )
    scheduledTime = DateTimeField(
        "Scheduled Time",
        format=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M:%S"],
        validators=[Optional()],
    )
    venue = StringField("Venue", validators=[Optional()])
