# caltrail/routes/meals.py
from datetime import date, datetime

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from caltrail.errors import Forbidden, InvalidInput, NotFound
from caltrail.forms.meal_form import MEAL_TYPES, MealEntryForm, MealEntryUpdateForm
from caltrail.models.meal import MealEntry
from caltrail.services import access
from caltrail.services.aggregation import aggregate, aggregate_by_type, aggregate_weekly, day_bounds, week_bounds
from caltrail.services.store import get_store, pagination_dict
from caltrail.utils.params import page_args, parse_bool, parse_bound, parse_day

meals_bp = Blueprint("meals", __name__, url_prefix="/api/meals")


# -----------------------------------------------------------------------------#
# Helpers
# -----------------------------------------------------------------------------#
def _target_user(user_id: int):
    """Owner of the data being read; 404 before 403."""
    user = get_store().get_user(user_id)
    if user is None:
        raise NotFound("User")
    if not access.can_access_user_data(current_user, user):
        raise Forbidden()
    return user


def _get_entry_or_404(entry_id: int) -> MealEntry:
    entry = get_store().get_meal_entry(entry_id)
    if entry is None:
        raise NotFound("MealEntry", "Meal entry not found")
    return entry


def _resolve_food(food_id: int):
    food = get_store().get_food(food_id)
    if food is None:
        raise NotFound("Food")
    return food


# -----------------------------------------------------------------------------#
# Reads
# -----------------------------------------------------------------------------#
@meals_bp.get("/user/<int:user_id>")
@login_required
def list_user_meals(user_id):
    user = _target_user(user_id)
    page, limit = page_args(request.args)

    start = parse_bound(request.args.get("start_date"), "start_date")
    end = parse_bound(request.args.get("end_date"), "end_date", end=True)
    meal_type = (request.args.get("meal_type") or "").strip().lower() or None
    if meal_type and meal_type not in MEAL_TYPES:
        raise InvalidInput("Unknown meal type", fields={"meal_type": [f"Must be one of: {', '.join(MEAL_TYPES)}"]})
    include_food = parse_bool(request.args.get("include_food"))
    include_food = True if include_food is None else include_food

    result = get_store().list_meal_entries(user.id, page, limit, start=start, end=end, meal_type=meal_type)
    entries = list(result.items)
    return jsonify(
        meal_entries=[e.to_dict(include_food=include_food) for e in entries],
        pagination=pagination_dict(result),
        nutrition_totals=aggregate(entries),
    )


@meals_bp.get("/<int:entry_id>")
@login_required
def get_meal(entry_id):
    entry = _get_entry_or_404(entry_id)
    if not access.can_access_meal_entry(current_user, entry):
        raise Forbidden()

    data = entry.to_dict()
    data["user"] = entry.user.to_summary()
    data["comments"] = [c.to_dict() for c in entry.comments]
    return jsonify(meal_entry=data)


@meals_bp.get("/user/<int:user_id>/daily/<day>")
@login_required
def daily_meals(user_id, day):
    user = _target_user(user_id)
    target = parse_day(day)
    start, end = day_bounds(target)

    entries = get_store().meal_entries_between(user.id, start, end)
    grouped = aggregate_by_type(entries)
    return jsonify(
        date=target.isoformat(),
        meals_by_type={
            bucket: [e.to_dict() for e in items]
            for bucket, items in grouped["meals_by_type"].items()
        },
        type_totals=grouped["type_totals"],
        daily_totals=grouped["totals"],
        total_entries=grouped["total_entries"],
    )


@meals_bp.get("/user/<int:user_id>/weekly")
@login_required
def weekly_meals(user_id):
    user = _target_user(user_id)
    raw = request.args.get("start_date")
    reference = parse_day(raw, "start_date") if raw else date.today()
    start, end = week_bounds(reference)

    entries = get_store().meal_entries_between(user.id, start, end)
    return jsonify(aggregate_weekly(entries, reference))


# -----------------------------------------------------------------------------#
# Writes (owner only)
# -----------------------------------------------------------------------------#
@meals_bp.post("/")
@login_required
def create_meal():
    form = MealEntryForm.from_json(request.get_json(silent=True)).validate_or_raise()
    food = _resolve_food(form.food_id.data)

    entry = MealEntry(
        user_id=current_user.id,
        food=food,
        quantity=form.quantity.data,
        date=form.date.data or datetime.now(),
        meal_type=form.meal_type.data or None,
        notes=(form.notes.data or "").strip() or None,
    )
    get_store().add(entry)
    current_app.logger.info("[meals] user %s logged %sg of food %s", current_user.id, entry.quantity, food.id)
    return jsonify(message="Meal entry created successfully", meal_entry=entry.to_dict()), 201


@meals_bp.put("/<int:entry_id>")
@login_required
def update_meal(entry_id):
    entry = _get_entry_or_404(entry_id)
    if not access.can_mutate_record(current_user, entry, "user_id"):
        raise Forbidden("You can only update your own meal entries")

    form = MealEntryUpdateForm.from_json(request.get_json(silent=True)).validate_or_raise()
    if form.quantity.data is not None:
        entry.quantity = form.quantity.data
    if form.provided("date"):
        entry.date = form.date.data or entry.date
    if form.provided("meal_type"):
        entry.meal_type = form.meal_type.data or None
    if form.provided("notes"):
        entry.notes = (form.notes.data or "").strip() or None

    get_store().commit()
    return jsonify(message="Meal entry updated successfully", meal_entry=entry.to_dict())


@meals_bp.delete("/<int:entry_id>")
@login_required
def delete_meal(entry_id):
    entry = _get_entry_or_404(entry_id)
    if not access.can_mutate_record(current_user, entry, "user_id"):
        raise Forbidden("You can only delete your own meal entries")

    get_store().delete(entry)
    return jsonify(message="Meal entry deleted successfully")
