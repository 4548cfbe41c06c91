# tests/test_api_meals.py

from datetime import datetime

import pytest

from caltrail import db
from caltrail.models.meal import MealEntry
from tests.conftest import auth_headers


def test_create_meal(client, user, chicken):
    resp = client.post(
        "/api/meals/",
        json={"food_id": chicken.id, "quantity": 150, "meal_type": "Lunch", "date": "2024-01-15T12:30:00"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 201
    entry = resp.get_json()["meal_entry"]
    assert entry["user_id"] == user.id
    assert entry["meal_type"] == "lunch"
    assert entry["date"] == "2024-01-15T12:30:00"
    assert entry["food"]["name"] == "Chicken Breast"


def test_create_meal_defaults_date_to_now(client, user, chicken):
    before = datetime.now().replace(microsecond=0)
    resp = client.post("/api/meals/", json={"food_id": chicken.id, "quantity": 80}, headers=auth_headers(user))
    assert resp.status_code == 201
    entry = resp.get_json()["meal_entry"]
    assert datetime.fromisoformat(entry["date"]) >= before
    assert entry["meal_type"] is None


@pytest.mark.parametrize("payload", [
    {"quantity": 100},
    {"food_id": 1, "quantity": 0},
    {"food_id": 1, "quantity": -20},
    {"food_id": 1, "quantity": 100, "meal_type": "brunch"},
    {"food_id": 1, "quantity": 100, "date": "yesterday"},
    {"food_id": 1, "quantity": "inf"},
    {"food_id": 1, "quantity": "nan"},
])
def test_create_meal_validation(client, user, chicken, payload):
    resp = client.post("/api/meals/", json=payload, headers=auth_headers(user))
    assert resp.status_code == 422
    assert resp.get_json()["error"] == "ValidationError"


def test_create_meal_unknown_food(client, user):
    resp = client.post("/api/meals/", json={"food_id": 999, "quantity": 100}, headers=auth_headers(user))
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "FoodNotFound"


def test_list_user_meals_with_totals(client, user, lunch):
    resp = client.get(f"/api/meals/user/{user.id}", headers=auth_headers(user))
    assert resp.status_code == 200
    data = resp.get_json()
    assert len(data["meal_entries"]) == 2
    assert data["pagination"]["count"] == 2
    assert data["nutrition_totals"]["calories"] == pytest.approx(471.5)
    assert data["nutrition_totals"]["protein"] == pytest.approx(51.7)


def test_list_user_meals_filters(client, user, lunch, chicken):
    db.session.add(MealEntry(user_id=user.id, food_id=chicken.id, quantity=50,
                             date=datetime(2024, 1, 16, 8), meal_type="breakfast"))
    db.session.commit()
    headers = auth_headers(user)

    resp = client.get(f"/api/meals/user/{user.id}?end_date=2024-01-15", headers=headers)
    assert len(resp.get_json()["meal_entries"]) == 2

    resp = client.get(f"/api/meals/user/{user.id}?start_date=2024-01-16", headers=headers)
    assert len(resp.get_json()["meal_entries"]) == 1

    resp = client.get(f"/api/meals/user/{user.id}?meal_type=breakfast&include_food=false", headers=headers)
    entries = resp.get_json()["meal_entries"]
    assert len(entries) == 1
    assert "food" not in entries[0]


def test_meal_list_scoping(client, user, other_user, nutritionist, other_nutritionist, admin, lunch):
    url = f"/api/meals/user/{user.id}"
    assert client.get(url, headers=auth_headers(nutritionist)).status_code == 200
    assert client.get(url, headers=auth_headers(admin)).status_code == 200
    assert client.get(url, headers=auth_headers(other_nutritionist)).status_code == 403
    assert client.get(url, headers=auth_headers(other_user)).status_code == 403
    # 404 wins over 403
    resp = client.get("/api/meals/user/9999", headers=auth_headers(other_user))
    assert resp.status_code == 404


def test_get_meal_with_comments(client, user, nutritionist, other_user, lunch):
    entry = lunch[0]
    resp = client.get(f"/api/meals/{entry.id}", headers=auth_headers(nutritionist))
    assert resp.status_code == 200
    data = resp.get_json()["meal_entry"]
    assert data["food"]["name"] == "Chicken Breast"
    assert data["comments"] == []
    assert data["user"]["id"] == user.id

    assert client.get(f"/api/meals/{entry.id}", headers=auth_headers(other_user)).status_code == 403
    assert client.get("/api/meals/9999", headers=auth_headers(user)).status_code == 404


def test_update_and_delete_are_owner_only(client, user, nutritionist, admin, lunch):
    entry_id = lunch[0].id

    for actor in (nutritionist, admin):
        resp = client.put(f"/api/meals/{entry_id}", json={"quantity": 10}, headers=auth_headers(actor))
        assert resp.status_code == 403
        resp = client.delete(f"/api/meals/{entry_id}", headers=auth_headers(actor))
        assert resp.status_code == 403

    resp = client.put(f"/api/meals/{entry_id}", json={"quantity": 200, "notes": "extra"},
                      headers=auth_headers(user))
    assert resp.status_code == 200
    data = resp.get_json()["meal_entry"]
    assert data["quantity"] == 200
    assert data["notes"] == "extra"
    assert data["meal_type"] == "lunch"

    for bad in (0, "nan", "inf"):
        resp = client.put(f"/api/meals/{entry_id}", json={"quantity": bad}, headers=auth_headers(user))
        assert resp.status_code == 422
    assert db.session.get(MealEntry, entry_id).quantity == 200

    resp = client.delete(f"/api/meals/{entry_id}", headers=auth_headers(user))
    assert resp.status_code == 200
    assert db.session.get(MealEntry, entry_id) is None


def test_daily_view(client, user, lunch, chicken):
    db.session.add(MealEntry(user_id=user.id, food_id=chicken.id, quantity=100,
                             date=datetime(2024, 1, 15, 23, 59, 59)))
    db.session.add(MealEntry(user_id=user.id, food_id=chicken.id, quantity=100,
                             date=datetime(2024, 1, 16, 0, 0), meal_type="snack"))
    db.session.commit()

    resp = client.get(f"/api/meals/user/{user.id}/daily/2024-01-15", headers=auth_headers(user))
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["date"] == "2024-01-15"
    assert data["total_entries"] == 3
    assert len(data["meals_by_type"]["lunch"]) == 2
    assert len(data["meals_by_type"]["other"]) == 1
    assert data["meals_by_type"]["snack"] == []
    assert data["type_totals"]["lunch"]["calories"] == pytest.approx(471.5)
    assert data["daily_totals"]["calories"] == pytest.approx(636.5)


@pytest.mark.parametrize("day", ["15-01-2024", "2024-01-15xyz"])
def test_daily_view_bad_date(client, user, day):
    resp = client.get(f"/api/meals/user/{user.id}/daily/{day}", headers=auth_headers(user))
    assert resp.status_code == 422


def test_list_user_meals_rejects_trailing_garbage_in_dates(client, user, lunch):
    resp = client.get(f"/api/meals/user/{user.id}?end_date=2024-01-15abc", headers=auth_headers(user))
    assert resp.status_code == 422
    assert "end_date" in resp.get_json()["fields"]


def test_weekly_view(client, user, lunch):
    # 2024-01-17 is a Wednesday; the week runs Sunday 14 to Saturday 20
    resp = client.get(f"/api/meals/user/{user.id}/weekly?start_date=2024-01-17", headers=auth_headers(user))
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["week_start"] == "2024-01-14"
    assert data["week_end"] == "2024-01-20"
    assert len(data["daily_data"]) == 7
    assert data["daily_data"][1]["entries"] == 2
    assert data["weekly_totals"]["calories"] == pytest.approx(471.5)
    assert data["weekly_averages"]["calories"] == pytest.approx(471.5 / 7)
