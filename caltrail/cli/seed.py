# caltrail/cli/seed.py
import csv
from datetime import date, datetime, time, timedelta

import click
from flask.cli import AppGroup
from werkzeug.security import generate_password_hash

from caltrail import db
from caltrail.models.food import CORE_NUTRIENTS, MICRO_NUTRIENTS, Food, FoodSource
from caltrail.models.meal import MealEntry
from caltrail.models.user import Role, User
from caltrail.services.store import get_store

seed_group = AppGroup("seed", help="Seed commands (initial data)")

# ---- Base foods, values per 100 g ----
DEFAULT_FOODS = [
    {"name": "Chicken Breast (Cooked)", "description": "Skinless, boneless chicken breast, grilled",
     "calories": 165, "protein": 31, "fat": 3.6, "carbs": 0, "fiber": 0},
    {"name": "Brown Rice (Cooked)", "description": "Long grain brown rice, cooked",
     "calories": 112, "protein": 2.6, "fat": 0.9, "carbs": 23, "fiber": 1.8},
    {"name": "Broccoli (Steamed)", "description": "Fresh broccoli, steamed",
     "calories": 35, "protein": 2.8, "fat": 0.4, "carbs": 7, "fiber": 2.6},
    {"name": "Salmon (Atlantic, Cooked)", "description": "Atlantic salmon, baked or grilled",
     "calories": 206, "protein": 22, "fat": 12, "carbs": 0, "fiber": 0},
    {"name": "Sweet Potato (Baked)", "description": "Baked sweet potato with skin",
     "calories": 103, "protein": 2.3, "fat": 0.1, "carbs": 24, "fiber": 3.9},
    {"name": "Greek Yogurt (Plain)", "description": "Non-fat Greek yogurt, plain",
     "calories": 59, "protein": 10, "fat": 0.4, "carbs": 3.6, "fiber": 0},
    {"name": "Avocado", "description": "Fresh avocado",
     "calories": 160, "protein": 2, "fat": 15, "carbs": 9, "fiber": 7},
    {"name": "Almonds (Raw)", "description": "Raw almonds, unsalted",
     "calories": 579, "protein": 21, "fat": 50, "carbs": 22, "fiber": 12},
    {"name": "Banana (Medium)", "description": "Fresh banana, medium size",
     "calories": 105, "protein": 1.3, "fat": 0.4, "carbs": 27, "fiber": 3.1},
    {"name": "Egg (Large, Cooked)", "description": "Large egg, scrambled or boiled",
     "calories": 155, "protein": 13, "fat": 11, "carbs": 1.1, "fiber": 0},
]

ACTIVITY_LEVELS = ["sedentary", "lightly_active", "moderately_active"]
GOALS = ["maintain", "lose", "gain"]

# (food name prefix, grams, hour, minute, meal type, notes)
SAMPLE_MEALS = [
    ("Egg", 100, 8, 0, "breakfast", "Scrambled with a little butter"),
    ("Banana", 120, 8, 30, "breakfast", None),
    ("Chicken", 150, 12, 30, "lunch", None),
    ("Brown Rice", 200, 12, 30, "lunch", None),
    ("Salmon", 180, 19, 0, "dinner", None),
    ("Broccoli", 150, 19, 0, "dinner", None),
    ("Greek Yogurt", 170, 16, 0, "snack", None),
]


def _to_float_or_none(v):
    if v in (None, "", "None"):
        return None
    try:
        return float(v)
    except (ValueError, TypeError):
        return None


def _upsert_foods(items):
    created, updated = 0, 0
    store = get_store()
    for f in items:
        # Normalize keys (rows may come from a CSV)
        name = (f.get("name") or "").strip()
        if not name:
            continue
        data = {
            "brand": (f.get("brand") or "").strip() or None,
            "description": (f.get("description") or "").strip() or None,
        }
        for field in CORE_NUTRIENTS:
            value = _to_float_or_none(f.get(field))
            data[field] = value if value is not None and value >= 0 else 0.0
        for field in MICRO_NUTRIENTS:
            value = _to_float_or_none(f.get(field))
            data[field] = value if value is None or value >= 0 else None

        obj = store.get_food_by_name(name)
        if obj:
            for k, v in data.items():
                setattr(obj, k, v)
            updated += 1
        else:
            db.session.add(Food(name=name, source=FoodSource.CUSTOM, **data))
            created += 1
    db.session.commit()
    return created, updated


def _upsert_user(email, **fields):
    """Create the account if the email is free; existing accounts are left alone."""
    store = get_store()
    user = store.get_user_by_email(email)
    if user is None:
        user = User(email=email, **fields)
        db.session.add(user)
        db.session.flush()
    return user


@seed_group.command("foods")
@click.option("--from-csv", "csv_path", default=None,
              help="CSV path (e.g. instance/foods.csv) to create/update foods from.")
def seed_foods(csv_path):
    """
    Create/update base foods.
    - No options: the default set (10 foods).
    - With --from-csv: rows from a CSV, idempotent by name.
    Expected headers: name, brand, description and the nutrient columns
    (calories, protein, fat, carbs, fiber, sugar, sodium, vitamin_a,
    vitamin_c, calcium, iron), all per 100 g.
    """
    items = []
    if csv_path:
        try:
            with open(csv_path, "r", encoding="utf-8-sig") as fh:
                items = list(csv.DictReader(fh))
            click.secho(f"Read {len(items)} foods from {csv_path}", fg="cyan")
        except FileNotFoundError:
            click.secho(f"CSV not found: {csv_path}", fg="red")
            return
    else:
        items = DEFAULT_FOODS

    created, updated = _upsert_foods(items)
    click.secho(f"Done. Created: {created}, Updated: {updated}", fg="green")


@seed_group.command("demo")
@click.option("--password", "user_password", default="user123", show_default=True,
              help="Password for the five demo users.")
def seed_demo(user_password):
    """
    Demo data: one admin, one nutritionist, five users assigned to the
    nutritionist, the base foods and a day of meals (today and yesterday)
    for the first user. Safe to run twice.
    """
    db.create_all()

    admin = _upsert_user(
        "admin@caltrail.com",
        name="Admin User",
        password=generate_password_hash("admin123"),
        role=Role.ADMIN,
    )
    nutritionist = _upsert_user(
        "nutritionist@caltrail.com",
        name="Dr. Sarah Johnson",
        password=generate_password_hash("nutritionist123"),
        role=Role.NUTRITIONIST,
    )
    click.secho(f"Admin: {admin.email} / Nutritionist: {nutritionist.email}", fg="cyan")

    users = []
    hashed = generate_password_hash(user_password)
    for i in range(1, 6):
        users.append(_upsert_user(
            f"user{i}@caltrail.com",
            name=f"Demo User {i}",
            password=hashed,
            role=Role.USER,
            height=160 + i * 7.5,
            weight=55 + i * 8.0,
            gender="female" if i % 2 == 0 else "male",
            activity_level=ACTIVITY_LEVELS[i % 3],
            goals=GOALS[i % 3],
            assigned_nutritionist_id=nutritionist.id,
        ))
    db.session.commit()
    click.secho(f"Demo users: {len(users)}", fg="cyan")

    created, updated = _upsert_foods(DEFAULT_FOODS)
    click.secho(f"Foods created: {created}, updated: {updated}", fg="cyan")

    first = users[0]
    store = get_store()
    if store.meal_entries_between(first.id):
        click.secho(f"{first.email} already has meals; skipping sample entries", fg="yellow")
    else:
        foods = store.all_foods()
        count = 0
        for day in (date.today() - timedelta(days=1), date.today()):
            for prefix, grams, hour, minute, meal_type, notes in SAMPLE_MEALS:
                food = next((f for f in foods if f.name.startswith(prefix)), None)
                if food is None:
                    continue
                db.session.add(MealEntry(
                    user_id=first.id,
                    food_id=food.id,
                    quantity=grams,
                    date=datetime.combine(day, time(hour, minute)),
                    meal_type=meal_type,
                    notes=notes,
                ))
                count += 1
        db.session.commit()
        click.secho(f"Sample meal entries: {count}", fg="cyan")

    click.secho("Demo data ready.", fg="green")
