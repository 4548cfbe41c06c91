# caltrail/routes/comments.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from caltrail.errors import Forbidden, NotFound
from caltrail.forms.comment_form import CommentForm, CommentUpdateForm
from caltrail.models.comment import Comment
from caltrail.services import access
from caltrail.services.store import get_store, pagination_dict
from caltrail.utils.params import page_args, parse_bool

comments_bp = Blueprint("comments", __name__, url_prefix="/api/comments")

RECENT_DEFAULT = 10


def _get_comment_or_404(comment_id: int) -> Comment:
    comment = get_store().get_comment(comment_id)
    if comment is None:
        raise NotFound("Comment")
    return comment


def _get_entry_or_404(entry_id: int):
    entry = get_store().get_meal_entry(entry_id)
    if entry is None:
        raise NotFound("MealEntry", "Meal entry not found")
    return entry


# -----------------------------------------------------------------------------#
# Reads
# -----------------------------------------------------------------------------#
@comments_bp.get("/meal/<int:meal_entry_id>")
@login_required
def meal_comments(meal_entry_id):
    entry = _get_entry_or_404(meal_entry_id)
    if not access.can_access_meal_entry(current_user, entry):
        raise Forbidden()

    comments = get_store().comments_for_meal_entry(entry.id)
    return jsonify(comments=[c.to_dict() for c in comments])


@comments_bp.get("/user/<int:user_id>")
@login_required
def user_comments(user_id):
    store = get_store()
    user = store.get_user(user_id)
    if user is None:
        raise NotFound("User")
    if not access.can_access_user_data(current_user, user):
        raise Forbidden()

    page, limit = page_args(request.args)
    result = store.comments_for_user(
        user.id, page, limit, is_private=parse_bool(request.args.get("is_private"))
    )
    return jsonify(
        comments=[c.to_dict(with_meal_entry=True) for c in result.items],
        pagination=pagination_dict(result),
    )


@comments_bp.get("/nutritionist/<int:author_id>/recent")
@login_required
def recent_comments(author_id):
    store = get_store()
    if store.get_user(author_id) is None:
        raise NotFound("User")
    if not access.can_view_authored_comments(current_user, author_id):
        raise Forbidden()

    _, limit = page_args(request.args, default_limit=RECENT_DEFAULT)
    comments = store.recent_comments_by_author(author_id, limit)
    return jsonify(comments=[c.to_dict(with_meal_entry=True) for c in comments])


# -----------------------------------------------------------------------------#
# Writes
# -----------------------------------------------------------------------------#
@comments_bp.post("/")
@login_required
def create_comment():
    if access.role_of(current_user) not in access.COMMENT_AUTHORS:
        raise Forbidden("Only nutritionists and admins can comment")

    form = CommentForm.from_json(request.get_json(silent=True)).validate_or_raise()
    entry = _get_entry_or_404(form.meal_entry_id.data)
    if not access.can_author_comment(current_user, entry):
        raise Forbidden("You can only comment on meal entries of your assigned users")

    comment = Comment(
        meal_entry=entry,
        author_id=current_user.id,
        message=form.message.data.strip(),
        is_private=bool(form.is_private.data),
    )
    get_store().add(comment)
    current_app.logger.info("[comments] %s on entry %s by user %s", comment.id, entry.id, current_user.id)
    return jsonify(message="Comment created successfully", comment=comment.to_dict()), 201


@comments_bp.put("/<int:comment_id>")
@login_required
def update_comment(comment_id):
    comment = _get_comment_or_404(comment_id)
    if not access.can_mutate_record(current_user, comment, "author_id", allow_admin=True):
        raise Forbidden("You can only update your own comments")

    form = CommentUpdateForm.from_json(request.get_json(silent=True)).validate_or_raise()
    comment.message = form.message.data.strip()
    if form.provided("is_private"):
        comment.is_private = bool(form.is_private.data)

    get_store().commit()
    return jsonify(message="Comment updated successfully", comment=comment.to_dict())


@comments_bp.delete("/<int:comment_id>")
@login_required
def delete_comment(comment_id):
    comment = _get_comment_or_404(comment_id)
    if not access.can_mutate_record(current_user, comment, "author_id", allow_admin=True):
        raise Forbidden("You can only delete your own comments")

    get_store().delete(comment)
    return jsonify(message="Comment deleted successfully")
