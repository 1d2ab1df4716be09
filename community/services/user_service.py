import logging

from werkzeug.exceptions import BadRequest, NotFound

from community import db
from community.models import User
from community.services.auth_service import NAME_RE, HANGUL_RE, URL_RE
from community.utils.decorators import assert_owner, optional_str

logger = logging.getLogger(__name__)


def list_users():
    return User.query.order_by(User.id.asc()).all()


def list_basic_info():
    return [{
        "id": u.id,
        "name": u.name,
        "giturl": u.giturl,
        "image": u.image,
    } for u in User.query.order_by(User.id.asc()).all()]


def get_one(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound(f'User with id {user_id} not found')
    return user


def update(user_id, data, acting_user_id):
    """
    Updates a user's own profile.

    Changing the password requires `currentPassword`; a missing or wrong
    value is rejected before anything is written.
    """
    user = get_one(user_id)
    assert_owner(user.id, acting_user_id, '본인의 정보만 수정할 수 있습니다.')

    if 'name' in data:
        if not isinstance(data['name'], str) or not NAME_RE.match(data['name']):
            raise BadRequest('이름은 1~20자의 한글 또는 영문이어야 합니다.')
    if data.get('giturl'):
        if not isinstance(data['giturl'], str) or not URL_RE.match(data['giturl']):
            raise BadRequest('올바른 URL 형식이 아닙니다.')
    optional_str(data, 'image', '이미지 경로는 문자열이어야 합니다.')
    new_password = data.get('password')
    if new_password is not None:
        if not isinstance(new_password, str) or not 4 <= len(new_password) <= 100 \
                or HANGUL_RE.search(new_password):
            raise BadRequest('비밀번호는 한글을 제외한 4~100자여야 합니다.')
        current_password = optional_str(data, 'currentPassword', '현재 비밀번호가 올바르지 않습니다.')
        if not current_password:
            raise BadRequest('현재 비밀번호를 입력해주세요.')
        if not user.check_password(current_password):
            raise BadRequest('현재 비밀번호가 올바르지 않습니다.')

    if 'name' in data:
        user.name = data['name']
    if 'image' in data:
        user.image = data['image']
    if 'giturl' in data:
        user.giturl = data['giturl'] or None
    if new_password is not None:
        user.set_password(new_password)
        logger.info(f"Password changed for user {user.id}")
    db.session.commit()
    return user
