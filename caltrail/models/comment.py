# caltrail/models/comment.py

from datetime import datetime

from caltrail import db


class Comment(db.Model):
    __tablename__ = "comments"

    id            = db.Column(db.Integer, primary_key=True)
    meal_entry_id = db.Column(
        db.Integer, db.ForeignKey("meal_entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id     = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message       = db.Column(db.String(1000), nullable=False)
    is_private    = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    meal_entry = db.relationship("MealEntry", back_populates="comments")
    author = db.relationship("User", back_populates="comments")

    def to_dict(self, with_meal_entry: bool = False) -> dict:
        data = {
            "id": self.id,
            "meal_entry_id": self.meal_entry_id,
            "author_id": self.author_id,
            "author": (
                {"id": self.author.id, "name": self.author.name, "role": self.author.role.value}
                if self.author else None
            ),
            "message": self.message,
            "is_private": self.is_private,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if with_meal_entry and self.meal_entry is not None:
            data["meal_entry"] = self.meal_entry.to_summary()
        return data

    def __repr__(self) -> str:
        return f"<Comment {self.id} m={self.meal_entry_id} a={self.author_id}>"
