# caltrail/routes/foods.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from caltrail.errors import ConflictOfState, Forbidden, InvalidInput, NotFound
from caltrail.forms.food_form import FoodForm
from caltrail.models.food import CORE_NUTRIENTS, MICRO_NUTRIENTS, Food, FoodSource
from caltrail.services import access, usda
from caltrail.services.store import get_store, pagination_dict
from caltrail.utils.params import page_args

foods_bp = Blueprint("foods", __name__, url_prefix="/api/foods")

TEXT_FIELDS = ("name", "brand", "description")
USDA_MAX_RESULTS = 50


def _get_food_or_404(food_id: int) -> Food:
    food = get_store().get_food(food_id)
    if food is None:
        raise NotFound("Food")
    return food


def _apply_form(food: Food, form: FoodForm) -> None:
    """Copy validated values onto ``food``; a missing core nutrient is 0."""
    for field in TEXT_FIELDS:
        value = (form[field].data or "").strip() or None
        setattr(food, field, value)
    for field in CORE_NUTRIENTS:
        value = form[field].data
        setattr(food, field, value if value is not None else 0.0)
    for field in MICRO_NUTRIENTS:
        setattr(food, field, form[field].data)


# -----------------------------------------------------------------------------#
# Catalogue
# -----------------------------------------------------------------------------#
@foods_bp.get("/")
@login_required
def list_foods():
    page, limit = page_args(request.args)

    source = None
    raw_source = (request.args.get("source") or "").strip()
    if raw_source:
        try:
            source = FoodSource(raw_source.upper())
        except ValueError:
            raise InvalidInput("Unknown source", fields={"source": ["Must be CUSTOM or USDA"]})

    result = get_store().list_foods(
        page, limit, search=(request.args.get("search") or "").strip() or None, source=source
    )
    return jsonify(foods=[f.to_dict() for f in result.items], pagination=pagination_dict(result))


@foods_bp.get("/<int:food_id>")
@login_required
def get_food(food_id):
    return jsonify(food=_get_food_or_404(food_id).to_dict())


@foods_bp.post("/")
@login_required
def create_food():
    if not access.can_create_food(current_user):
        raise Forbidden("Only nutritionists and admins can create foods")

    form = FoodForm.from_json(request.get_json(silent=True)).validate_or_raise()
    store = get_store()
    name = form.name.data.strip()
    if store.get_food_by_name(name):
        raise ConflictOfState("Food with this name already exists", error="FoodExists")

    food = Food(source=FoodSource.CUSTOM)
    _apply_form(food, form)
    store.add(food)
    current_app.logger.info("[foods] created %s (%s) by user %s", food.id, food.name, current_user.id)
    return jsonify(message="Food created successfully", food=food.to_dict()), 201


@foods_bp.put("/<int:food_id>")
@login_required
def update_food(food_id):
    if not access.can_update_food(current_user):
        raise Forbidden("Only nutritionists and admins can update foods")

    food = _get_food_or_404(food_id)
    # body is merged over the stored record; an explicit null clears a field
    payload = {**food.to_dict(), **(request.get_json(silent=True) or {})}
    form = FoodForm.from_json(payload).validate_or_raise()

    store = get_store()
    name = form.name.data.strip()
    other = store.get_food_by_name(name)
    if other is not None and other.id != food.id:
        raise ConflictOfState("Food with this name already exists", error="FoodExists")

    _apply_form(food, form)
    store.commit()
    return jsonify(message="Food updated successfully", food=food.to_dict())


@foods_bp.delete("/<int:food_id>")
@login_required
def delete_food(food_id):
    if not access.can_delete_food(current_user):
        raise Forbidden("Only admins can delete foods")

    food = _get_food_or_404(food_id)
    store = get_store()
    in_use = store.count_meal_entries_for_food(food.id)
    if in_use:
        raise ConflictOfState(f"Cannot delete food: it is used in {in_use} meal entries")

    store.delete(food)
    current_app.logger.info("[foods] deleted %s", food_id)
    return jsonify(message="Food deleted successfully")


# -----------------------------------------------------------------------------#
# USDA FoodData Central
# -----------------------------------------------------------------------------#
@foods_bp.get("/search/usda")
@login_required
def search_usda():
    query = (request.args.get("query") or "").strip()
    if not query:
        raise InvalidInput("Search query is required", fields={"query": ["This field is required."]})
    _, limit = page_args(request.args, default_limit=10)

    foods = usda.search_foods(query, min(limit, USDA_MAX_RESULTS))
    return jsonify(foods=foods, query=query)


@foods_bp.post("/import/usda/<int:fdc_id>")
@login_required
def import_usda(fdc_id):
    store = get_store()
    existing = store.get_food_by_fdc_id(fdc_id)
    if existing is not None:
        return jsonify(message="Food already exists in database", food=existing.to_dict())

    fields = usda.food_fields(fdc_id, usda.get_food(fdc_id))
    # names are unique; a USDA item may share one with a custom food
    if store.get_food_by_name(fields["name"]):
        suffix = f" (FDC {fdc_id})"
        fields["name"] = fields["name"][: 200 - len(suffix)] + suffix

    food = Food(source=FoodSource.USDA, **fields)
    store.add(food)
    current_app.logger.info("[foods] imported USDA %s as %s", fdc_id, food.id)
    return jsonify(message="Food imported successfully", food=food.to_dict()), 201
