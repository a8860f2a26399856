"""Forms for the teams blueprint."""

from flask_wtf import FlaskForm
from wtforms import BooleanField, StringField, ValidationError
from wtforms.validators import Optional

# JSON bodies carry real booleans, not HTML checkbox strings.
FALSE_VALUES = (False, "false", "False", "0", "")


class ReadyForm(FlaskForm):
    """Form for toggling a team's ready status."""

    class Meta:
        csrf = False

    isReady = BooleanField("Ready", false_values=FALSE_VALUES)

    def validate_isReady(self, field):
        """The flag must be sent explicitly."""
        if not field.raw_data:
            raise ValidationError("isReady is required.")


class RosterPlayerForm(FlaskForm):
    """Form for adding a player to a roster."""

    class Meta:
        csrf = False

    playerId = StringField("Existing Player", validators=[Optional()])
    name = StringField("Player Name")
    contactInfo = StringField("Contact Info", validators=[Optional()])
    isCaptain = BooleanField("Captain", false_values=FALSE_VALUES)

    def validate_name(self, field):
        """Either an existing player or a new player's name is needed."""
        if not self.playerId.data and not (field.data or "").strip():
            raise ValidationError("Provide a playerId or a player name.")
