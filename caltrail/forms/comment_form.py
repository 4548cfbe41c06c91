# caltrail/forms/comment_form.py

from wtforms import BooleanField, IntegerField, TextAreaField
from wtforms.validators import InputRequired, Length, NumberRange

from caltrail.forms import ApiForm


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class CommentForm(ApiForm):
    meal_entry_id = IntegerField(
        "Meal entry",
        validators=[InputRequired("meal_entry_id is required"), NumberRange(min=1, message="Invalid meal entry id")],
    )
    message = TextAreaField(
        "Message",
        filters=[_strip],
        validators=[InputRequired("Message is required"), Length(min=1, max=1000)],
    )
    is_private = BooleanField("Private", default=False)


class CommentUpdateForm(ApiForm):
    message = TextAreaField(
        "Message",
        filters=[_strip],
        validators=[InputRequired("Message is required"), Length(min=1, max=1000)],
    )
    is_private = BooleanField("Private")
