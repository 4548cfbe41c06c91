# caltrail/models/user.py

import enum
from datetime import datetime

from flask_login import UserMixin

from caltrail import db


class Role(str, enum.Enum):
    """Closed set of actor roles. Stored and compared in upper case only."""
    USER = "USER"
    NUTRITIONIST = "NUTRITIONIST"
    ADMIN = "ADMIN"

    @classmethod
    def coerce(cls, value):
        """Role from an enum member or a string in any casing; None if unknown."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id       = db.Column(db.Integer, primary_key=True)
    name     = db.Column(db.String(100), nullable=False)
    email    = db.Column(db.String(254), unique=True, nullable=False, index=True)
    password = db.Column(db.String(256), nullable=False)
    role     = db.Column(db.Enum(Role, name="user_role"), nullable=False, default=Role.USER)

    assigned_nutritionist_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Profile
    date_of_birth  = db.Column(db.Date, nullable=True)
    height         = db.Column(db.Float, nullable=True)   # cm
    weight         = db.Column(db.Float, nullable=True)   # kg
    gender         = db.Column(db.String(20), nullable=True)
    activity_level = db.Column(db.String(40), nullable=True)
    goals          = db.Column(db.String(40), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    assigned_nutritionist = db.relationship(
        "User", remote_side=[id], back_populates="assigned_users"
    )
    assigned_users = db.relationship("User", back_populates="assigned_nutritionist")
    meal_entries = db.relationship(
        "MealEntry", back_populates="user", cascade="all, delete-orphan"
    )
    comments = db.relationship(
        "Comment", back_populates="author", cascade="all, delete-orphan"
    )

    PROFILE_FIELDS = ("name", "date_of_birth", "height", "weight", "gender", "activity_level", "goals")

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email}

    def to_dict(self, with_profile: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "assigned_nutritionist_id": self.assigned_nutritionist_id,
            "assigned_nutritionist": (
                self.assigned_nutritionist.to_summary() if self.assigned_nutritionist else None
            ),
        }
        if with_profile:
            data.update({
                "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
                "height": self.height,
                "weight": self.weight,
                "gender": self.gender,
                "activity_level": self.activity_level,
                "goals": self.goals,
            })
        return data

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} {self.role.value if self.role else None}>"
