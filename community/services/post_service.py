import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import BadRequest, NotFound

from community import db
from community.models import Post
from community.utils.decorators import assert_owner
from community.utils.helpers import to_iso

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200


def _validate(data, partial=False):
    title = data.get('title')
    content = data.get('content')
    if not partial or 'title' in data:
        if not isinstance(title, str) or not title.strip():
            raise BadRequest('제목을 입력해주세요.')
        if len(title) > TITLE_MAX_LENGTH:
            raise BadRequest(f'제목은 {TITLE_MAX_LENGTH}자 이하여야 합니다.')
    if not partial or 'content' in data:
        if not isinstance(content, str) or not content.strip():
            raise BadRequest('내용을 입력해주세요.')
    if data.get('image') is not None and not isinstance(data['image'], str):
        raise BadRequest('이미지 경로가 올바르지 않습니다.')


def list_posts(user_id=None):
    query = Post.query
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    return query.order_by(Post.created_at.desc(), Post.id.desc()).all()


def list_basic_info():
    posts = Post.query.order_by(Post.created_at.desc(), Post.id.desc()).all()
    return [{
        "id": p.id,
        "title": p.title,
        "content": p.content,
        "createdAt": to_iso(p.created_at),
        "views": p.views or 0,
        "userId": p.user_id,
    } for p in posts]


def search(keyword):
    if not keyword or not keyword.strip():
        return []
    pattern = f'%{keyword.strip()}%'
    return Post.query.filter(
        or_(Post.title.ilike(pattern), Post.content.ilike(pattern))
    ).order_by(Post.created_at.desc(), Post.id.desc()).all()


def get_one(post_id):
    post = db.session.get(Post, post_id)
    if post is None:
        raise NotFound(f'Post with id {post_id} not found')
    return post


def increment_views(post_id):
    post = get_one(post_id)
    # Atomic at the SQL level so concurrent readers do not lose increments
    Post.query.filter_by(id=post.id).update({Post.views: Post.views + 1})
    db.session.commit()
    db.session.refresh(post)
    return post


def view(post_id):
    """
    Loads a post for its detail page and bumps the view counter.

    A failed increment never fails the read; it is logged and rolled back.
    """
    post = get_one(post_id)
    try:
        Post.query.filter_by(id=post.id).update({Post.views: Post.views + 1})
        db.session.commit()
        db.session.refresh(post)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning(f"Failed to increment views for post {post_id}: {e}")
    return post


def create(data, acting_user_id):
    _validate(data)
    post = Post(
        title=data['title'].strip(),
        content=data['content'],
        image=data.get('image'),
        user_id=acting_user_id,
    )
    db.session.add(post)
    db.session.commit()
    logger.info(f"Post {post.id} created by user {acting_user_id}")
    return post


def update(post_id, data, acting_user_id):
    post = get_one(post_id)
    assert_owner(post.user_id, acting_user_id, '본인의 글만 수정할 수 있습니다.')
    _validate(data, partial=True)
    if 'title' in data:
        post.title = data['title'].strip()
    if 'content' in data:
        post.content = data['content']
    if 'image' in data:
        post.image = data['image']
    db.session.commit()
    return post


def remove(post_id, acting_user_id):
    post = get_one(post_id)
    assert_owner(post.user_id, acting_user_id, '본인의 글만 삭제할 수 있습니다.')
    db.session.delete(post)
    db.session.commit()
    logger.info(f"Post {post_id} deleted by user {acting_user_id}")
    return {"message": f"Post with id {post_id} deleted."}
