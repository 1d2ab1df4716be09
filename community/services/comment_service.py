import logging

from werkzeug.exceptions import BadRequest, NotFound

from community import db
from community.models import Comment, Post
from community.utils.decorators import assert_owner
from community.utils.helpers import normalize_id_list, coerce_int

logger = logging.getLogger(__name__)


def _validate_text(text):
    if not isinstance(text, str) or not text.strip():
        raise BadRequest('댓글 내용을 입력해주세요.')


def list_all():
    return Comment.query.order_by(Comment.created_at.asc(), Comment.id.asc()).all()


def list_by_post(post_id):
    return Comment.query.filter_by(post_id=post_id) \
        .order_by(Comment.created_at.asc(), Comment.id.asc()).all()


def search(keyword):
    if not keyword or not keyword.strip():
        return []
    return Comment.query.filter(Comment.text.ilike(f'%{keyword.strip()}%')) \
        .order_by(Comment.created_at.asc(), Comment.id.asc()).all()


def get_one(comment_id):
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFound(f'Comment with id {comment_id} not found')
    return comment


def create(data, acting_user_id):
    _validate_text(data.get('text'))
    post_id = coerce_int(data.get('postId'))
    if post_id is None:
        raise BadRequest('postId 값이 필요합니다.')
    if db.session.get(Post, post_id) is None:
        raise NotFound(f'Post with id {post_id} not found')

    parent_id = None
    if data.get('parentId') is not None:
        parent_id = coerce_int(data['parentId'])
        parent = db.session.get(Comment, parent_id) if parent_id is not None else None
        # Replies are one level deep and stay on the parent's post
        if parent is None or parent.post_id != post_id or parent.parent_id is not None:
            raise BadRequest('답글을 달 수 없는 댓글입니다.')

    comment = Comment(
        text=data['text'].strip(),
        post_id=post_id,
        parent_id=parent_id,
        user_id=acting_user_id,
        likes=0,
        liked_user_ids=[],
    )
    db.session.add(comment)
    db.session.commit()
    logger.info(f"Comment {comment.id} created on post {post_id} by user {acting_user_id}")
    return comment


def update(comment_id, data, acting_user_id):
    comment = get_one(comment_id)
    assert_owner(comment.user_id, acting_user_id, '본인의 댓글만 수정할 수 있습니다.')
    _validate_text(data.get('text'))
    comment.text = data['text'].strip()
    db.session.commit()
    return comment


def remove(comment_id, acting_user_id):
    comment = get_one(comment_id)
    assert_owner(comment.user_id, acting_user_id, '본인의 댓글만 삭제할 수 있습니다.')
    db.session.delete(comment)
    db.session.commit()
    logger.info(f"Comment {comment_id} deleted by user {acting_user_id}")
    return {"message": f"Comment with id {comment_id} deleted."}


def toggle_like(comment_id, user_id):
    """
    Flips the user's like on a comment.

    A user already in the liked set is removed and the counter drops (never
    below zero); otherwise the user is added and the counter rises. Calling
    it twice leaves the comment as it was.
    """
    comment = Comment.query.filter_by(id=comment_id).with_for_update().first()
    if comment is None:
        raise NotFound(f'Comment with id {comment_id} not found')

    liked = normalize_id_list(comment.liked_user_ids)
    if user_id in liked:
        liked = [uid for uid in liked if uid != user_id]
        comment.likes = max((comment.likes or 0) - 1, 0)
    else:
        liked.append(user_id)
        comment.likes = (comment.likes or 0) + 1
    comment.liked_user_ids = liked
    db.session.commit()
    return comment
