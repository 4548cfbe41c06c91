# caltrail/services/store.py
"""Data access: every query the routes need, behind one object injected by the app factory."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from flask import current_app
from sqlalchemy import func, or_, select
from sqlalchemy.orm import joinedload

from caltrail.models.comment import Comment
from caltrail.models.food import Food
from caltrail.models.meal import MealEntry
from caltrail.models.user import Role, User


def get_store() -> "Store":
    return current_app.extensions["caltrail.store"]


def pagination_dict(page) -> dict:
    return {"current": page.page, "total": page.pages, "count": page.total}


class Store:
    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    # ---- generic ----
    def add(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def delete(self, obj) -> None:
        self.session.delete(obj)
        self.session.commit()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def _paginate(self, stmt, page: int, limit: int):
        return self.db.paginate(stmt, page=page, per_page=limit, error_out=False)

    # ---- users ----
    def get_user(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.session.execute(
            select(User).filter_by(email=email.strip().lower())
        ).scalar_one_or_none()

    def list_users(self, page: int, limit: int, role: Optional[Role] = None,
                   search: Optional[str] = None, nutritionist_id: Optional[int] = None):
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(User.name.ilike(like), User.email.ilike(like)))
        if nutritionist_id is not None:
            stmt = stmt.where(or_(User.assigned_nutritionist_id == nutritionist_id,
                                  User.id == nutritionist_id))
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
        return self._paginate(stmt, page, limit)

    # ---- foods ----
    def get_food(self, food_id: int) -> Optional[Food]:
        return self.session.get(Food, food_id)

    def get_food_by_name(self, name: str) -> Optional[Food]:
        return self.session.execute(select(Food).filter_by(name=name)).scalar_one_or_none()

    def get_food_by_fdc_id(self, fdc_id: int) -> Optional[Food]:
        return self.session.execute(select(Food).filter_by(usda_fdc_id=fdc_id)).scalar_one_or_none()

    def list_foods(self, page: int, limit: int, search: Optional[str] = None, source=None):
        stmt = select(Food)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(or_(Food.name.ilike(like), Food.brand.ilike(like),
                                  Food.description.ilike(like)))
        if source is not None:
            stmt = stmt.where(Food.source == source)
        stmt = stmt.order_by(Food.name.asc())
        return self._paginate(stmt, page, limit)

    def all_foods(self) -> List[Food]:
        return list(self.session.execute(select(Food).order_by(Food.name.asc())).scalars())

    def count_meal_entries_for_food(self, food_id: int) -> int:
        return self.session.execute(
            select(func.count(MealEntry.id)).where(MealEntry.food_id == food_id)
        ).scalar_one()

    # ---- meal entries ----
    def get_meal_entry(self, entry_id: int) -> Optional[MealEntry]:
        return self.session.get(MealEntry, entry_id)

    def _meal_entries_stmt(self, user_id: int, start: Optional[datetime] = None,
                           end: Optional[datetime] = None, meal_type: Optional[str] = None):
        stmt = select(MealEntry).where(MealEntry.user_id == user_id)
        if start is not None:
            stmt = stmt.where(MealEntry.date >= start)
        if end is not None:
            stmt = stmt.where(MealEntry.date <= end)
        if meal_type:
            stmt = stmt.where(MealEntry.meal_type == meal_type)
        return stmt.options(joinedload(MealEntry.food))

    def list_meal_entries(self, user_id: int, page: int, limit: int, start=None, end=None, meal_type=None):
        stmt = self._meal_entries_stmt(user_id, start, end, meal_type)
        return self._paginate(stmt.order_by(MealEntry.date.desc(), MealEntry.id.desc()), page, limit)

    def meal_entries_between(self, user_id: int, start: Optional[datetime] = None,
                             end: Optional[datetime] = None, newest_first: bool = False) -> List[MealEntry]:
        order = MealEntry.date.desc() if newest_first else MealEntry.date.asc()
        stmt = self._meal_entries_stmt(user_id, start, end).order_by(order, MealEntry.id.asc())
        return list(self.session.execute(stmt).unique().scalars())

    # ---- comments ----
    def get_comment(self, comment_id: int) -> Optional[Comment]:
        return self.session.get(Comment, comment_id)

    def comments_for_meal_entry(self, meal_entry_id: int) -> List[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.meal_entry_id == meal_entry_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(self.session.execute(stmt).scalars())

    def comments_for_user(self, user_id: int, page: int, limit: int, is_private: Optional[bool] = None):
        stmt = (
            select(Comment)
            .join(MealEntry, Comment.meal_entry_id == MealEntry.id)
            .where(MealEntry.user_id == user_id)
        )
        if is_private is not None:
            stmt = stmt.where(Comment.is_private == is_private)
        stmt = stmt.order_by(Comment.created_at.desc(), Comment.id.desc())
        return self._paginate(stmt, page, limit)

    def recent_comments_by_author(self, author_id: int, limit: int) -> List[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.author_id == author_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())
