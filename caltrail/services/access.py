# caltrail/services/access.py
"""
Access scoping.

Every decision about who may read or change what lives here. Functions are
pure: they receive the actor (anything with ``id`` and ``role``) and records
that the caller already fetched, and return a boolean. Resolving records, and
so answering 404 before 403, is the caller's job.

Read rules, first match wins:
  1. ADMIN reads everything.
  2. Anyone reads their own data.
  3. A NUTRITIONIST reads the data of USERs assigned to them.
  4. Everything else is denied.

Writes on meal entries are owner-only; writes on comments are author or ADMIN.
"""
from __future__ import annotations

from typing import Any, Optional

from caltrail.models.user import Role

FOOD_EDITORS = frozenset({Role.NUTRITIONIST, Role.ADMIN})
COMMENT_AUTHORS = frozenset({Role.NUTRITIONIST, Role.ADMIN})
USER_LISTERS = frozenset({Role.NUTRITIONIST, Role.ADMIN})


def role_of(actor: Any) -> Optional[Role]:
    if actor is None:
        return None
    return Role.coerce(getattr(actor, "role", None))


def _is_admin(actor: Any) -> bool:
    return role_of(actor) is Role.ADMIN


def _same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and int(a) == int(b)


def is_assigned_nutritionist(actor: Any, target_user: Any) -> bool:
    """The actor is a NUTRITIONIST and ``target_user`` is a USER assigned to them."""
    if role_of(actor) is not Role.NUTRITIONIST or target_user is None:
        return False
    # the assignment only means something on USER accounts
    if role_of(target_user) is not Role.USER:
        return False
    return _same_id(getattr(target_user, "assigned_nutritionist_id", None), actor.id)


# -------- read scoping --------
def can_access_user_data(actor: Any, target_user: Any) -> bool:
    """Profile, meal entries, summaries and comments of ``target_user``."""
    if role_of(actor) is None or target_user is None:
        return False
    if _is_admin(actor):
        return True
    if _same_id(actor.id, target_user.id):
        return True
    return is_assigned_nutritionist(actor, target_user)


def can_access_meal_entry(actor: Any, meal_entry: Any) -> bool:
    if role_of(actor) is None or meal_entry is None:
        return False
    if _is_admin(actor):
        return True
    if _same_id(actor.id, meal_entry.user_id):
        return True
    return is_assigned_nutritionist(actor, getattr(meal_entry, "user", None))


def can_author_comment(actor: Any, meal_entry: Any) -> bool:
    """Only the owner's assigned nutritionist, or an ADMIN, comments on an entry."""
    if role_of(actor) not in COMMENT_AUTHORS or meal_entry is None:
        return False
    if _is_admin(actor):
        return True
    return is_assigned_nutritionist(actor, getattr(meal_entry, "user", None))


# -------- write scoping --------
def can_mutate_record(actor: Any, record: Any, owner_field: str, allow_admin: bool = False) -> bool:
    """
    Strict ownership: ``record.<owner_field>`` must be the actor. Read access
    granted by an assignment never turns into write access. ``allow_admin``
    lets an ADMIN through as well (comments).
    """
    if role_of(actor) is None or record is None:
        return False
    if allow_admin and _is_admin(actor):
        return True
    return _same_id(getattr(record, owner_field, None), actor.id)


# -------- role gates --------
def can_create_food(actor: Any) -> bool:
    return role_of(actor) in FOOD_EDITORS


def can_update_food(actor: Any) -> bool:
    return role_of(actor) in FOOD_EDITORS


def can_delete_food(actor: Any) -> bool:
    return _is_admin(actor)


def can_delete_user(actor: Any) -> bool:
    return _is_admin(actor)


def can_assign_nutritionist(actor: Any) -> bool:
    return _is_admin(actor)


def can_list_users(actor: Any) -> bool:
    return role_of(actor) in USER_LISTERS


def user_listing_scope(actor: Any) -> Optional[int]:
    """
    None means unscoped (ADMIN). For a NUTRITIONIST, the id whose assigned
    users (plus the nutritionist themselves) are visible.
    """
    if _is_admin(actor):
        return None
    return int(actor.id)


def can_view_authored_comments(actor: Any, author_id: int) -> bool:
    if role_of(actor) is None:
        return False
    return _is_admin(actor) or _same_id(actor.id, author_id)
