# caltrail/forms/__init__.py
"""
JSON request bodies are validated with Flask-WTF forms. CSRF is off: the API
authenticates with bearer tokens, not cookies.
"""
import math
from datetime import datetime

from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import DateTimeField
from wtforms.validators import ValidationError

from caltrail.errors import InvalidInput


def _as_form_value(value):
    # JSON scalars become what an HTML form would have sent
    if isinstance(value, bool):
        return "true" if value else "false"
    return value if isinstance(value, str) else str(value)


class ApiForm(FlaskForm):
    class Meta:
        csrf = False

    @classmethod
    def from_json(cls, payload, **kwargs):
        payload = payload if isinstance(payload, dict) else {}
        data = {k: _as_form_value(v) for k, v in payload.items() if v is not None}
        return cls(formdata=ImmutableMultiDict(data), **kwargs)

    def provided(self, name: str) -> bool:
        """Whether the request body carried this field."""
        return bool(self[name].raw_data)

    def validate_or_raise(self):
        if not self.validate():
            raise InvalidInput("Invalid input", fields=self.errors)
        return self


def finite(form, field):
    if field.data is not None and not math.isfinite(field.data):
        raise ValidationError("Must be a finite number")


def positive(form, field):
    finite(form, field)
    if field.data is not None and field.data <= 0:
        raise ValidationError("Must be positive")


class IsoDateTimeField(DateTimeField):
    """
    ISO-8601 date or datetime. Offset-aware values are converted to local time
    and stored naive, like every other timestamp in the app.
    """

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        raw = (valuelist[0] or "").strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            self.data = None
            raise ValueError(self.gettext("Not a valid ISO-8601 datetime value."))
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        self.data = value
