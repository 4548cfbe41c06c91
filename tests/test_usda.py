# tests/test_usda.py

from unittest.mock import MagicMock, patch

import pytest
import requests

from caltrail.errors import UpstreamError
from caltrail.models.food import Food
from caltrail.services import usda
from caltrail import db
from tests.conftest import auth_headers

FDC_DETAIL = {
    "fdcId": 171077,
    "description": "Chicken, broilers or fryers, breast, meat only, cooked, roasted",
    "foodNutrients": [
        {"nutrient": {"name": "Energy", "unitName": "kJ"}, "amount": 690},
        {"nutrient": {"name": "Energy", "unitName": "kcal"}, "amount": 165},
        {"nutrient": {"name": "Protein", "unitName": "g"}, "amount": 31.02},
        {"nutrient": {"name": "Total lipid (fat)", "unitName": "g"}, "amount": 3.57},
        {"nutrient": {"name": "Carbohydrate, by difference", "unitName": "g"}, "amount": 0},
        {"nutrient": {"name": "Sodium, Na", "unitName": "mg"}, "amount": 74},
        {"nutrient": {"name": "Iron, Fe", "unitName": "mg"}, "amount": 1.04},
        {"nutrient": {"name": "Calcium, Ca", "unitName": "mg"}, "amount": 15},
    ],
}

FDC_SEARCH = {
    "foods": [
        {"fdcId": 171077, "description": "Chicken breast, roasted", "brandOwner": None},
        {"fdcId": 2646170, "description": "Chicken breast fillets", "brandOwner": "ACME",
         "additionalDescriptions": ["frozen", "breaded"]},
    ]
}


def fake_response(payload, status=200):
    resp = MagicMock()
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        resp.raise_for_status.return_value = None
    return resp


def test_extract_nutrients_prefers_kcal():
    out = usda.extract_nutrients(FDC_DETAIL)
    assert out["calories"] == 165
    assert out["protein"] == pytest.approx(31.02)
    assert out["fat"] == pytest.approx(3.57)
    assert out["sodium"] == 74
    assert out["iron"] == pytest.approx(1.04)
    assert "vitamin_c" not in out


def test_food_fields_defaults_missing_core_to_zero():
    fields = usda.food_fields(171077, FDC_DETAIL)
    assert fields["usda_fdc_id"] == 171077
    assert fields["fiber"] == 0.0
    assert fields["calcium"] == 15
    assert "vitamin_a" not in fields


def test_extract_nutrients_by_number_skips_lookalike_rows():
    payload = {"foodNutrients": [
        {"nutrient": {"number": "208", "name": "Energy", "unitName": "kcal"}, "amount": 52},
        {"nutrient": {"number": "269", "name": "Sugars, total including NLEA", "unitName": "g"}, "amount": 10.4},
        {"nutrient": {"number": "539", "name": "Sugars, added", "unitName": "g"}, "amount": 0},
        {"nutrient": {"number": "318", "name": "Vitamin A, IU", "unitName": "IU"}, "amount": 54},
        {"nutrient": {"number": "320", "name": "Vitamin A, RAE", "unitName": "µg"}, "amount": 3},
        {"nutrientNumber": "401", "nutrientName": "Vitamin C, total ascorbic acid", "value": 4.6},
    ]}
    out = usda.extract_nutrients(payload)
    assert out == {"calories": 52, "sugar": pytest.approx(10.4), "vitamin_a": 3, "vitamin_c": pytest.approx(4.6)}


def test_extract_nutrients_by_name_needs_an_exact_match():
    payload = {"foodNutrients": [
        {"nutrient": {"name": "Sugars, added", "unitName": "g"}, "amount": 1},
        {"nutrient": {"name": "Total Sugars", "unitName": "g"}, "amount": 9},
        {"nutrient": {"name": "Vitamin A, IU", "unitName": "IU"}, "amount": 54},
    ]}
    assert usda.extract_nutrients(payload) == {"sugar": 9}


def test_food_fields_truncates_text_to_column_limits(client, nutritionist):
    payload = dict(FDC_DETAIL, brandOwner="B" * 150, additionalDescriptions=["x" * 400, "y" * 400])
    fields = usda.food_fields(171077, payload)
    assert len(fields["brand"]) == 100
    assert len(fields["description"]) == 500

    # the stored food can be edited with its imported text as-is
    food = Food(**fields)
    db.session.add(food)
    db.session.commit()
    resp = client.put(f"/api/foods/{food.id}", json={"calories": 170}, headers=auth_headers(nutritionist))
    assert resp.status_code == 200


def test_search_foods_sends_key_and_maps_results(app):
    with patch("caltrail.services.usda.requests.get", return_value=fake_response(FDC_SEARCH)) as get:
        results = usda.search_foods("chicken breast", limit=5)

    _, kwargs = get.call_args
    assert kwargs["params"]["api_key"] == "test-key"
    assert kwargs["params"]["pageSize"] == 5
    assert results[0]["usda_fdc_id"] == 171077
    assert results[1]["brand"] == "ACME"
    assert results[1]["description"] == "frozen, breaded"


def test_missing_api_key(app):
    app.config["USDA_API_KEY"] = ""
    with pytest.raises(UpstreamError) as exc:
        usda.search_foods("apple")
    assert exc.value.status_code == 503
    assert exc.value.error == "NotConfigured"


def test_transport_failure_is_upstream_error(app):
    with patch("caltrail.services.usda.requests.get", side_effect=requests.ConnectionError("down")):
        with pytest.raises(UpstreamError) as exc:
            usda.get_food(1)
    assert exc.value.status_code == 502


def test_search_route(client, user):
    with patch("caltrail.services.usda.requests.get", return_value=fake_response(FDC_SEARCH)):
        resp = client.get("/api/foods/search/usda?query=chicken", headers=auth_headers(user))
    assert resp.status_code == 200
    assert len(resp.get_json()["foods"]) == 2

    resp = client.get("/api/foods/search/usda", headers=auth_headers(user))
    assert resp.status_code == 422


def test_search_route_upstream_failure(client, user):
    with patch("caltrail.services.usda.requests.get", return_value=fake_response({}, status=500)):
        resp = client.get("/api/foods/search/usda?query=chicken", headers=auth_headers(user))
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "UpstreamError"


def test_import_is_idempotent(client, user):
    with patch("caltrail.services.usda.requests.get", return_value=fake_response(FDC_DETAIL)) as get:
        first = client.post("/api/foods/import/usda/171077", headers=auth_headers(user))
        second = client.post("/api/foods/import/usda/171077", headers=auth_headers(user))

    assert first.status_code == 201
    food = first.get_json()["food"]
    assert food["source"] == "USDA"
    assert food["calories"] == 165

    assert second.status_code == 200
    assert second.get_json()["food"]["id"] == food["id"]
    assert get.call_count == 1
    assert db.session.query(Food).filter_by(usda_fdc_id=171077).count() == 1
