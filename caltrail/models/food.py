# caltrail/models/food.py

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint

from caltrail import db


class FoodSource(str, enum.Enum):
    CUSTOM = "CUSTOM"
    USDA = "USDA"


# Nutrient columns, all expressed per 100 g
CORE_NUTRIENTS = ("calories", "protein", "fat", "carbs", "fiber", "sugar", "sodium")
MICRO_NUTRIENTS = ("vitamin_a", "vitamin_c", "calcium", "iron")
NUTRIENT_FIELDS = CORE_NUTRIENTS + MICRO_NUTRIENTS


class Food(db.Model):
    __tablename__ = "foods"

    id          = db.Column(db.Integer, primary_key=True)
    name        = db.Column(db.String(200), unique=True, nullable=False)
    brand       = db.Column(db.String(100), nullable=True)
    description = db.Column(db.String(500), nullable=True)

    # Values per 100 g
    calories = db.Column(db.Float, nullable=False, default=0.0)
    protein  = db.Column(db.Float, nullable=False, default=0.0)
    fat      = db.Column(db.Float, nullable=False, default=0.0)
    carbs    = db.Column(db.Float, nullable=False, default=0.0)
    fiber    = db.Column(db.Float, nullable=False, default=0.0)
    sugar    = db.Column(db.Float, nullable=False, default=0.0)
    sodium   = db.Column(db.Float, nullable=False, default=0.0)

    # Optional micronutrients
    vitamin_a = db.Column(db.Float, nullable=True)
    vitamin_c = db.Column(db.Float, nullable=True)
    calcium   = db.Column(db.Float, nullable=True)
    iron      = db.Column(db.Float, nullable=True)

    source      = db.Column(db.Enum(FoodSource, name="food_source"), nullable=False, default=FoodSource.CUSTOM)
    usda_fdc_id = db.Column(db.Integer, unique=True, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    meal_entries = db.relationship("MealEntry", back_populates="food")

    __table_args__ = tuple(
        CheckConstraint(f"{field} IS NULL OR {field} >= 0", name=f"ck_foods_{field}_non_negative")
        for field in NUTRIENT_FIELDS
    )

    def nutrients(self) -> dict:
        return {field: getattr(self, field) for field in NUTRIENT_FIELDS}

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name}

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "description": self.description,
            "source": self.source.value,
            "usda_fdc_id": self.usda_fdc_id,
        }
        data.update(self.nutrients())
        return data

    def __repr__(self):
        return f"<Food {self.name}>"
