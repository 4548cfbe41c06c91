# caltrail/forms/meal_form.py

from wtforms import FloatField, IntegerField, StringField
from wtforms.validators import AnyOf, InputRequired, Length, NumberRange, Optional

from caltrail.forms import ApiForm, IsoDateTimeField, positive
from caltrail.models.meal import MealType

MEAL_TYPES = [m.value for m in MealType]


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


class MealEntryForm(ApiForm):
    food_id = IntegerField(
        "Food",
        validators=[InputRequired("food_id is required"), NumberRange(min=1, message="Invalid food id")],
    )
    quantity = FloatField(
        "Quantity (g)",
        validators=[InputRequired("quantity is required"), positive],
    )
    date = IsoDateTimeField("Date", validators=[Optional()])
    meal_type = StringField(
        "Meal type",
        filters=[_lower],
        validators=[Optional(), AnyOf(MEAL_TYPES, message=f"Must be one of: {', '.join(MEAL_TYPES)}")],
    )
    notes = StringField("Notes", validators=[Optional(), Length(max=500)])


class MealEntryUpdateForm(ApiForm):
    quantity = FloatField("Quantity (g)", validators=[Optional(), positive])
    date = IsoDateTimeField("Date", validators=[Optional()])
    meal_type = StringField(
        "Meal type",
        filters=[_lower],
        validators=[Optional(), AnyOf(MEAL_TYPES, message=f"Must be one of: {', '.join(MEAL_TYPES)}")],
    )
    notes = StringField("Notes", validators=[Optional(), Length(max=500)])
