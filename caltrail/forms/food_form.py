# caltrail/forms/food_form.py

from wtforms import FloatField, StringField
from wtforms.validators import InputRequired, Length, NumberRange, Optional

from caltrail.forms import ApiForm, finite


def _per_100g(label, required=False):
    first = InputRequired(f"{label} is required") if required else Optional()
    return FloatField(f"{label} (per 100g)", validators=[first, finite, NumberRange(min=0, message="Must be >= 0")])


class FoodForm(ApiForm):
    name = StringField("Name", validators=[InputRequired("Name is required"), Length(min=1, max=200)])
    brand = StringField("Brand", validators=[Optional(), Length(max=100)])
    description = StringField("Description", validators=[Optional(), Length(max=500)])

    # Values per 100 g
    calories = _per_100g("Calories", required=True)
    protein = _per_100g("Protein")
    fat = _per_100g("Fat")
    carbs = _per_100g("Carbs")
    fiber = _per_100g("Fiber")
    sugar = _per_100g("Sugar")
    sodium = _per_100g("Sodium")

    # Optional micronutrients
    vitamin_a = _per_100g("Vitamin A")
    vitamin_c = _per_100g("Vitamin C")
    calcium = _per_100g("Calcium")
    iron = _per_100g("Iron")
