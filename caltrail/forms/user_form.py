# caltrail/forms/user_form.py

from wtforms import IntegerField
from wtforms.validators import NumberRange, Optional

from caltrail.forms import ApiForm


class AssignNutritionistForm(ApiForm):
    # null / missing unassigns
    nutritionist_id = IntegerField("Nutritionist", validators=[Optional(), NumberRange(min=1)])
