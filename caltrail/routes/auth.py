# caltrail/routes/auth.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from werkzeug.security import check_password_hash, generate_password_hash

from caltrail.errors import ConflictOfState, InvalidInput
from caltrail.forms.auth_forms import ChangePasswordForm, LoginForm, ProfileForm, RegisterForm
from caltrail.models.user import Role, User
from caltrail.services.auth import issue_token
from caltrail.services.store import get_store

auth_routes = Blueprint("auth", __name__, url_prefix="/api/auth")


def _auth_response(user: User, message: str, status: int = 200):
    return jsonify(
        message=message,
        token=issue_token(user),
        user=user.to_dict(with_profile=True),
    ), status


@auth_routes.post("/register")
def register():
    form = RegisterForm.from_json(request.get_json(silent=True)).validate_or_raise()
    store = get_store()

    email = form.email.data.strip().lower()
    if store.get_user_by_email(email):
        raise ConflictOfState("User with this email already exists", error="UserExists")

    # self-registration always creates a USER
    user = User(
        name=form.name.data.strip(),
        email=email,
        password=generate_password_hash(form.password.data),
        role=Role.USER,
    )
    store.add(user)
    current_app.logger.info("[auth] registered user %s", user.id)
    return _auth_response(user, "User registered successfully", 201)


@auth_routes.post("/login")
def login():
    form = LoginForm.from_json(request.get_json(silent=True)).validate_or_raise()
    user = get_store().get_user_by_email(form.email.data)

    if not user or not check_password_hash(user.password, form.password.data):
        current_app.logger.info("[auth] failed login for %s", form.email.data.strip().lower())
        return jsonify(error="InvalidCredentials", message="Invalid email or password"), 401

    return _auth_response(user, "Login successful")


@auth_routes.get("/me")
@login_required
def me():
    return jsonify(user=current_user.to_dict(with_profile=True))


@auth_routes.put("/profile")
@login_required
def update_profile():
    form = ProfileForm.from_json(request.get_json(silent=True)).validate_or_raise()

    changed = False
    for field in User.PROFILE_FIELDS:
        if not form.provided(field):
            continue
        value = form[field].data
        if isinstance(value, str):
            value = value.strip() or None
        # empty clears a profile field, but never the name
        if field == "name" and value is None:
            continue
        setattr(current_user, field, value)
        changed = True

    if not changed:
        raise InvalidInput("No profile fields provided")

    get_store().commit()
    return jsonify(message="Profile updated successfully", user=current_user.to_dict(with_profile=True))


@auth_routes.post("/change-password")
@login_required
def change_password():
    form = ChangePasswordForm.from_json(request.get_json(silent=True)).validate_or_raise()

    if not check_password_hash(current_user.password, form.current_password.data):
        raise InvalidInput(
            "Current password is incorrect",
            fields={"current_password": ["Current password is incorrect"]},
        )

    current_user.password = generate_password_hash(form.new_password.data)
    get_store().commit()
    current_app.logger.info("[auth] password changed for user %s", current_user.id)
    return jsonify(message="Password changed successfully")
