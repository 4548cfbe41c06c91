# caltrail/forms/auth_forms.py

from wtforms import DateField, FloatField, PasswordField, StringField
from wtforms.validators import Email, InputRequired, Length, NumberRange, Optional

from caltrail.forms import ApiForm, finite


class RegisterForm(ApiForm):
    name = StringField("Name", validators=[InputRequired("Name is required"), Length(min=1, max=100)])
    email = StringField(
        "Email",
        validators=[InputRequired("Email is required"), Email(message="Invalid email"), Length(max=254)],
    )
    password = PasswordField(
        "Password",
        validators=[InputRequired("Password is required"), Length(min=6, max=128)],
    )


class LoginForm(ApiForm):
    email = StringField("Email", validators=[InputRequired("Email is required"), Email(message="Invalid email")])
    password = PasswordField("Password", validators=[InputRequired("Password is required")])


class ProfileForm(ApiForm):
    # role and email are not part of the profile
    name = StringField("Name", validators=[Optional(), Length(min=1, max=100)])
    date_of_birth = DateField("Date of birth", format="%Y-%m-%d", validators=[Optional()])
    height = FloatField("Height (cm)", validators=[Optional(), finite, NumberRange(min=0, max=300)])
    weight = FloatField("Weight (kg)", validators=[Optional(), finite, NumberRange(min=0, max=700)])
    gender = StringField("Gender", validators=[Optional(), Length(max=20)])
    activity_level = StringField("Activity level", validators=[Optional(), Length(max=40)])
    goals = StringField("Goals", validators=[Optional(), Length(max=40)])


class ChangePasswordForm(ApiForm):
    current_password = PasswordField("Current password", validators=[InputRequired()])
    new_password = PasswordField("New password", validators=[InputRequired(), Length(min=6, max=128)])
