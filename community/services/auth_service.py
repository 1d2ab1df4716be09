import logging
import re
import secrets
from datetime import timedelta

from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest, Conflict, Unauthorized

from community import db
from community.models import User, RefreshToken
from community.utils.decorators import optional_str
from community.utils.helpers import get_current_utc, parse_duration

logger = logging.getLogger(__name__)

ACCESS_TOKEN_SALT = 'access-token'
DEFAULT_ACCESS_TOKEN_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TOKEN_TTL = timedelta(days=7)

LOGIN_ID_RE = re.compile(r'^[A-Za-z0-9]{3,20}$')
NAME_RE = re.compile(r'^[가-힣a-zA-Z]{1,20}$')
HANGUL_RE = re.compile(r'[\u3131-\uD79D]')
URL_RE = re.compile(r'^https?://[^\s/$.?#].[^\s]*$', re.IGNORECASE)


def _serializer():
    return URLSafeTimedSerializer(current_app.config['JWT_SECRET'], salt=ACCESS_TOKEN_SALT)


def access_token_ttl():
    return parse_duration(current_app.config.get('JWT_EXPIRES_IN'), DEFAULT_ACCESS_TOKEN_TTL)


def refresh_token_ttl():
    return parse_duration(current_app.config.get('REFRESH_TOKEN_EXPIRES_IN'), DEFAULT_REFRESH_TOKEN_TTL)


def issue_access_token(user):
    return _serializer().dumps({'userId': user.id, 'loginId': user.login_id})


def verify_access_token(token):
    """
    Verifies a signed access token.

    Returns:
        The decoded payload dict carrying `userId` and `loginId`.

    Raises:
        Unauthorized: when the token is expired, tampered with or malformed.
    """
    max_age = int(access_token_ttl().total_seconds())
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        raise Unauthorized('액세스 토큰이 만료되었습니다.')
    except BadSignature:
        raise Unauthorized('유효하지 않은 토큰입니다.')
    if not isinstance(payload, dict) or 'userId' not in payload:
        raise Unauthorized('유효하지 않은 토큰입니다.')
    return payload


def extract_bearer_token(header_value):
    if not header_value:
        return None
    parts = header_value.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        return None
    return parts[1]


def validate_registration(data):
    login_id = data.get('loginId')
    password = data.get('password')
    name = data.get('name')
    giturl = data.get('giturl')

    if not isinstance(login_id, str) or not LOGIN_ID_RE.match(login_id):
        raise BadRequest('아이디는 3~20자의 영문 또는 숫자여야 합니다.')
    if not isinstance(password, str) or not 4 <= len(password) <= 100:
        raise BadRequest('비밀번호는 4~100자여야 합니다.')
    if HANGUL_RE.search(password):
        raise BadRequest('비밀번호에 한글을 사용할 수 없습니다.')
    if not isinstance(name, str) or not NAME_RE.match(name):
        raise BadRequest('이름은 1~20자의 한글 또는 영문이어야 합니다.')
    if giturl and (not isinstance(giturl, str) or not URL_RE.match(giturl)):
        raise BadRequest('올바른 URL 형식이 아닙니다.')
    optional_str(data, 'image', '이미지 경로는 문자열이어야 합니다.')


def _issue_refresh_token(user):
    # A user holds at most one refresh token
    RefreshToken.query.filter_by(user_id=user.id).delete()
    refresh = RefreshToken(
        token=secrets.token_hex(64),
        user_id=user.id,
        expires_at=get_current_utc() + refresh_token_ttl(),
    )
    db.session.add(refresh)
    return refresh


def _token_pair(user):
    refresh = _issue_refresh_token(user)
    db.session.commit()
    return {
        'access_token': issue_access_token(user),
        'refresh_token': refresh.token,
        'user': user.to_summary(),
    }


def register(data):
    validate_registration(data)
    if User.query.filter_by(login_id=data['loginId']).first():
        raise Conflict('이미 존재하는 아이디입니다.')

    user = User(
        login_id=data['loginId'],
        name=data['name'],
        image=data.get('image') or current_app.config['DEFAULT_PROFILE_IMAGE'],
        giturl=data.get('giturl') or None,
    )
    user.set_password(data['password'])
    db.session.add(user)
    try:
        db.session.flush()
        result = _token_pair(user)
    except IntegrityError:
        # Lost a race with a concurrent registration of the same loginId
        db.session.rollback()
        raise Conflict('이미 존재하는 아이디입니다.')
    logger.info(f"User registered: {user.login_id} (id={user.id})")
    return result


def login(login_id, password):
    for value in (login_id, password):
        if value is not None and not isinstance(value, str):
            raise BadRequest('로그인 정보가 올바르지 않습니다.')
    if not login_id or not password:
        raise Unauthorized('로그인 정보가 올바르지 않습니다.')
    user = User.query.filter_by(login_id=login_id).first()
    if user is None or not user.check_password(password):
        logger.warning(f"Failed login attempt for loginId '{login_id}'")
        raise Unauthorized('로그인 정보가 올바르지 않습니다.')
    logger.info(f"User logged in: {user.login_id} (id={user.id})")
    return _token_pair(user)


def refresh(refresh_token):
    if refresh_token is not None and not isinstance(refresh_token, str):
        raise BadRequest('리프레시 토큰은 문자열이어야 합니다.')
    if not refresh_token:
        raise Unauthorized('유효하지 않은 리프레시 토큰입니다.')
    record = RefreshToken.query.filter_by(token=refresh_token).first()
    if record is None:
        raise Unauthorized('유효하지 않은 리프레시 토큰입니다.')
    if record.is_expired():
        user_id = record.user_id
        db.session.delete(record)
        db.session.commit()
        logger.info(f"Expired refresh token removed for user {user_id}")
        raise Unauthorized('리프레시 토큰이 만료되었습니다.')

    user = db.session.get(User, record.user_id)
    if user is None:
        raise Unauthorized('유효하지 않은 리프레시 토큰입니다.')
    return {
        'access_token': issue_access_token(user),
        'user': user.to_summary(),
    }


def logout(refresh_token):
    if refresh_token is not None and not isinstance(refresh_token, str):
        raise BadRequest('리프레시 토큰은 문자열이어야 합니다.')
    if refresh_token:
        deleted = RefreshToken.query.filter_by(token=refresh_token).delete()
        db.session.commit()
        if deleted:
            logger.info("Refresh token revoked on logout")
    return {'message': '로그아웃되었습니다.'}


def check_id_exists(login_id):
    if not login_id:
        raise BadRequest('loginId 값이 필요합니다.')
    return {'exists': User.query.filter_by(login_id=login_id).first() is not None}
