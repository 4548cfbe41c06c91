# caltrail/services/usda.py
"""
USDA FoodData Central client.

Only maps the shape of the data FDC returns onto the Food nutrient columns
(values per 100 g); no matching or ranking logic.
API reference: https://fdc.nal.usda.gov/api-guide.html
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests
from flask import current_app

from caltrail.errors import UpstreamError
from caltrail.models.food import CORE_NUTRIENTS, MICRO_NUTRIENTS

logger = logging.getLogger(__name__)


def _config():
    api_key = current_app.config.get("USDA_API_KEY")
    if not api_key:
        raise UpstreamError("USDA API key not configured", status_code=503, error="NotConfigured")
    return api_key, current_app.config["USDA_API_URL"].rstrip("/"), current_app.config["USDA_TIMEOUT"]


def _get(path: str, params: Dict[str, Any]) -> Dict[str, Any]:
    api_key, base_url, timeout = _config()
    try:
        r = requests.get(f"{base_url}{path}", params={**params, "api_key": api_key}, timeout=timeout)
        r.raise_for_status()
        return r.json()
    except requests.RequestException as exc:
        logger.warning("USDA request %s failed: %s", path, exc)
        raise UpstreamError("Failed to reach the USDA database") from exc
    except ValueError as exc:
        logger.warning("USDA request %s returned invalid JSON", path)
        raise UpstreamError("Invalid response from the USDA database") from exc


def search_foods(query: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Search results as candidate foods (no nutrients; import fetches those)."""
    data = _get("/foods/search", {"query": query, "pageSize": limit})
    results = []
    for food in data.get("foods") or []:
        extra = food.get("additionalDescriptions")
        if isinstance(extra, list):
            extra = ", ".join(extra)
        results.append({
            "usda_fdc_id": food.get("fdcId"),
            "name": food.get("description"),
            "brand": food.get("brandOwner") or None,
            "description": extra or None,
            "source": "USDA",
        })
    return results


def get_food(fdc_id: int) -> Dict[str, Any]:
    return _get(f"/food/{int(fdc_id)}", {})


# FDC nutrient numbers (SR Legacy / Foundation / Branded detail payloads)
NUTRIENT_NUMBERS = {
    "208": "calories",   # Energy, kcal
    "203": "protein",
    "204": "fat",        # Total lipid (fat)
    "205": "carbs",      # Carbohydrate, by difference
    "291": "fiber",      # Fiber, total dietary
    "269": "sugar",      # Sugars, total including NLEA
    "307": "sodium",
    "320": "vitamin_a",  # Vitamin A, RAE (µg)
    "401": "vitamin_c",
    "301": "calcium",
    "303": "iron",
}

# Fallback for rows without a number; exact names only
NUTRIENT_NAMES = {
    "protein": "protein",
    "total lipid (fat)": "fat",
    "carbohydrate, by difference": "carbs",
    "fiber, total dietary": "fiber",
    "sugars, total including nlea": "sugar",
    "total sugars": "sugar",
    "sodium, na": "sodium",
    "vitamin a, rae": "vitamin_a",
    "vitamin c, total ascorbic acid": "vitamin_c",
    "calcium, ca": "calcium",
    "iron, fe": "iron",
}


def _column_for(number: str, name: str, unit: str):
    if number:
        return NUTRIENT_NUMBERS.get(number)
    if name == "energy":
        # FDC reports energy in both kJ and kcal
        return "calories" if unit == "kcal" else None
    return NUTRIENT_NAMES.get(name)


def extract_nutrients(payload: Dict[str, Any]) -> Dict[str, float]:
    """
    Map FDC ``foodNutrients`` onto our columns by nutrient number, or by
    exact nutrient name when the row carries no number.
    """
    out: Dict[str, float] = {}
    for row in payload.get("foodNutrients") or []:
        nutrient = row.get("nutrient") or {}
        number = str(nutrient.get("number") or row.get("nutrientNumber") or "").strip()
        name = (nutrient.get("name") or row.get("nutrientName") or "").strip().lower()
        unit = (nutrient.get("unitName") or row.get("unitName") or "").strip().lower()

        column = _column_for(number, name, unit)
        if column is None:
            continue
        out[column] = float(row.get("amount", row.get("value")) or 0)
    return out


def food_fields(fdc_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Keyword arguments for a Food built from an FDC detail payload."""
    nutrients = extract_nutrients(payload)
    extra = payload.get("additionalDescriptions")
    if isinstance(extra, list):
        extra = ", ".join(extra)
    fields = {
        "name": (payload.get("description") or f"USDA food {fdc_id}")[:200],
        "brand": (payload.get("brandOwner") or "")[:100] or None,
        "description": (extra or "")[:500] or None,
        "usda_fdc_id": int(fdc_id),
    }
    for core in CORE_NUTRIENTS:
        fields[core] = nutrients.get(core, 0.0)
    for micro in MICRO_NUTRIENTS:
        if micro in nutrients:
            fields[micro] = nutrients[micro]
    return fields
