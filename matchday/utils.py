"""Utility functions for the JSON API."""

import datetime

from flask import request
from flask.json.provider import DefaultJSONProvider
from google.cloud.firestore_v1.transforms import Sentinel
from werkzeug.datastructures import ImmutableMultiDict

from .errors import ValidationError


class FirestoreJSONProvider(DefaultJSONProvider):
    """JSON provider that understands Firestore values."""

    @staticmethod
    def default(o):
        """Serialize timestamps as ISO 8601 and pending server values as null."""
        if isinstance(o, datetime.datetime):
            return o.isoformat()
        if isinstance(o, Sentinel):
            return None
        return DefaultJSONProvider.default(o)


def json_body():
    """Return the request's JSON object or raise ValidationError."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def json_formdata():
    """Wrap the JSON body for a form, dropping nulls so they read as missing."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return ImmutableMultiDict()
    return ImmutableMultiDict({k: v for k, v in payload.items() if v is not None})


def validate_form(form):
    """Validate a submitted form or raise ValidationError with its field errors."""
    if not form.validate_on_submit():
        raise ValidationError("Invalid request payload.", details=form.errors)
    return form
