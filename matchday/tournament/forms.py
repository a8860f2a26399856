"""Forms for the tournament blueprint."""

import datetime

from flask_wtf import FlaskForm
from wtforms import (
    DateField,
    Field,
    IntegerField,
    SelectField,
    StringField,
    ValidationError,
)
from wtforms.validators import DataRequired, InputRequired, NumberRange, Optional
from wtforms.widgets import TextInput

from matchday.core.constants import VENUE_TYPES, Format, ParticipantsType, Sport


class StringListField(Field):
    """A field holding an ordered list of non-blank strings."""

    widget = TextInput()

    def _value(self):
        return ", ".join(self.data or [])

    def process_formdata(self, valuelist):
        self.data = [str(v).strip() for v in valuelist if v is not None and str(v).strip()]


class TournamentForm(FlaskForm):
    """Form for creating a tournament."""

    class Meta:
        csrf = False

    name = StringField("Tournament Name", validators=[DataRequired()])

    sport = SelectField(
        "Sport",
        choices=[(s.value, s.value.title()) for s in Sport],
        validators=[DataRequired()],
    )

    format = SelectField(
        "Tournament Format",
        choices=[(f.value, f.value.replace("-", " ").title()) for f in Format],
        validators=[DataRequired()],
    )

    participantsType = SelectField(
        "Participants",
        choices=[(p.value, p.value) for p in ParticipantsType],
        validators=[DataRequired()],
    )

    maxParticipants = IntegerField(
        "Max Participants", validators=[InputRequired(), NumberRange(min=2)]
    )

    playersPerTeam = IntegerField("Players Per Team")

    venueType = SelectField(
        "Venues",
        choices=[(v, v.title()) for v in VENUE_TYPES],
        default="off",
    )

    venues = StringListField("Venue Names")

    startDate = DateField("Start Date", validators=[Optional()])

    endDate = DateField("End Date", validators=[Optional()])

    def validate_playersPerTeam(self, field):
        """Team tournaments need a roster size."""
        if field.data is None:
            if self.participantsType.data == ParticipantsType.TEAM.value:
                raise ValidationError(
                    "Players per team is required for team tournaments."
                )
        elif field.data < 1:
            raise ValidationError("Players per team must be at least 1.")

    def validate_venues(self, field):
        """A single or multi venue tournament needs at least one venue."""
        if self.venueType.data != "off" and not field.data:
            raise ValidationError("At least one venue is required.")

    def validate_endDate(self, field):
        """The end date cannot precede the start date."""
        if field.data and self.startDate.data and field.data < self.startDate.data:
            raise ValidationError("End date cannot be before the start date.")

    def to_payload(self):
        """Return the validated fields, with dates as datetimes for Firestore."""

        def as_datetime(value):
            if value is None:
                return None
            return datetime.datetime.combine(value, datetime.time.min)

        return {
            "name": self.name.data.strip(),
            "sport": self.sport.data,
            "format": self.format.data,
            "participantsType": self.participantsType.data,
            "maxParticipants": self.maxParticipants.data,
            "playersPerTeam": self.playersPerTeam.data,
            "venueType": self.venueType.data,
            "venues": self.venues.data or [],
            "startDate": as_datetime(self.startDate.data),
            "endDate": as_datetime(self.endDate.data),
        }


class EndTournamentForm(FlaskForm):
    """Form for ending a tournament and naming its winner."""

    class Meta:
        csrf = False

    winner = StringField("Winner", validators=[DataRequired()])
