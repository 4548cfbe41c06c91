# caltrail/models/meal.py

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint

from caltrail import db


class MealType(str, enum.Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


# Bucket for entries with no (or an unknown) meal type
OTHER_MEAL_TYPE = "other"


class MealEntry(db.Model):
    __tablename__ = "meal_entries"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    food_id = db.Column(db.Integer, db.ForeignKey("foods.id", ondelete="RESTRICT"), nullable=False, index=True)

    quantity  = db.Column(db.Float, nullable=False)  # grams
    date      = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)
    meal_type = db.Column(db.String(20), nullable=True)
    notes     = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_meal_entries_quantity_positive"),
        CheckConstraint(
            "meal_type IS NULL OR meal_type IN ('breakfast','lunch','dinner','snack')",
            name="ck_meal_entries_meal_type",
        ),
    )

    user = db.relationship("User", back_populates="meal_entries")
    food = db.relationship("Food", back_populates="meal_entries")
    comments = db.relationship(
        "Comment",
        back_populates="meal_entry",
        cascade="all, delete-orphan",
        order_by="Comment.created_at.desc()",
    )

    def to_dict(self, include_food: bool = True) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "food_id": self.food_id,
            "quantity": self.quantity,
            "date": self.date.isoformat(),
            "meal_type": self.meal_type,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_food:
            data["food"] = self.food.to_dict() if self.food else None
        return data

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "meal_type": self.meal_type,
            "food": {"name": self.food.name} if self.food else None,
        }

    def __repr__(self) -> str:
        return f"<MealEntry {self.id} u={self.user_id} f={self.food_id} q={self.quantity}>"
