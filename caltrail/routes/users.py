# caltrail/routes/users.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from caltrail.errors import ConflictOfState, Forbidden, InvalidInput, NotFound
from caltrail.forms.user_form import AssignNutritionistForm
from caltrail.models.user import Role
from caltrail.services import access
from caltrail.services.aggregation import summarize_by_day
from caltrail.services.store import get_store, pagination_dict
from caltrail.utils.params import page_args, parse_bound

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _get_user_or_404(user_id: int):
    user = get_store().get_user(user_id)
    if user is None:
        raise NotFound("User")
    return user


# -----------------------------------------------------------------------------#
# Listing and lookup
# -----------------------------------------------------------------------------#
@users_bp.get("/")
@login_required
def list_users():
    if not access.can_list_users(current_user):
        raise Forbidden("Only nutritionists and admins can list users")

    page, limit = page_args(request.args, default_limit=10)

    role = None
    raw_role = request.args.get("role")
    if raw_role:
        role = Role.coerce(raw_role)
        if role is None:
            raise InvalidInput("Unknown role", fields={"role": [f"Must be one of: {', '.join(r.value for r in Role)}"]})

    result = get_store().list_users(
        page,
        limit,
        role=role,
        search=(request.args.get("search") or "").strip() or None,
        nutritionist_id=access.user_listing_scope(current_user),
    )
    return jsonify(
        users=[u.to_dict() for u in result.items],
        pagination=pagination_dict(result),
    )


@users_bp.get("/<int:user_id>")
@login_required
def get_user(user_id):
    user = _get_user_or_404(user_id)
    if not access.can_access_user_data(current_user, user):
        raise Forbidden()

    data = user.to_dict(with_profile=True)
    if user.role is Role.NUTRITIONIST:
        data["assigned_users"] = [u.to_summary() for u in user.assigned_users]
    return jsonify(user=data)


# -----------------------------------------------------------------------------#
# Admin actions
# -----------------------------------------------------------------------------#
@users_bp.put("/<int:user_id>/assign-nutritionist")
@login_required
def assign_nutritionist(user_id):
    if not access.can_assign_nutritionist(current_user):
        raise Forbidden("Only admins can assign nutritionists")

    form = AssignNutritionistForm.from_json(request.get_json(silent=True)).validate_or_raise()
    store = get_store()
    user = _get_user_or_404(user_id)

    if user.role is not Role.USER:
        raise InvalidInput("Nutritionists can only be assigned to regular users")

    nutritionist_id = form.nutritionist_id.data
    if nutritionist_id is not None:
        nutritionist = store.get_user(nutritionist_id)
        if nutritionist is None or nutritionist.role is not Role.NUTRITIONIST:
            raise InvalidInput(
                "Invalid nutritionist",
                fields={"nutritionist_id": ["Must reference a user with role NUTRITIONIST"]},
            )

    user.assigned_nutritionist_id = nutritionist_id
    store.commit()
    current_app.logger.info("[users] user %s assigned to nutritionist %s", user.id, nutritionist_id)

    message = "Nutritionist assigned successfully" if nutritionist_id else "Nutritionist unassigned"
    return jsonify(message=message, user=user.to_dict())


@users_bp.delete("/<int:user_id>")
@login_required
def delete_user(user_id):
    if not access.can_delete_user(current_user):
        raise Forbidden("Only admins can delete users")

    user = _get_user_or_404(user_id)
    if user.id == current_user.id:
        raise ConflictOfState("Admins cannot delete their own account")

    store = get_store()
    # assigned users keep their accounts, without a nutritionist
    for assigned in list(user.assigned_users):
        assigned.assigned_nutritionist_id = None
    store.delete(user)
    current_app.logger.info("[users] deleted user %s", user_id)
    return jsonify(message="User deleted successfully")


# -----------------------------------------------------------------------------#
# Nutrition summary
# -----------------------------------------------------------------------------#
@users_bp.get("/<int:user_id>/nutrition-summary")
@login_required
def nutrition_summary(user_id):
    user = _get_user_or_404(user_id)
    if not access.can_access_user_data(current_user, user):
        raise Forbidden()

    start = parse_bound(request.args.get("start_date"), "start_date")
    end = parse_bound(request.args.get("end_date"), "end_date", end=True)
    if start and end and start > end:
        raise InvalidInput("start_date must be before end_date")

    entries = get_store().meal_entries_between(user.id, start, end, newest_first=True)
    result = summarize_by_day(entries)
    result["user"] = user.to_summary()
    result["period"] = {
        "start_date": start.isoformat() if start else None,
        "end_date": end.isoformat() if end else None,
    }
    return jsonify(result)
