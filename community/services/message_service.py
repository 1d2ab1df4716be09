import logging

from sqlalchemy import or_
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from community import db
from community.models import Message, User
from community.utils.helpers import coerce_int

logger = logging.getLogger(__name__)


def _assert_participant(message, acting_user_id, action='조회'):
    if acting_user_id not in (message.sender_id, message.receiver_id):
        raise Forbidden(f'본인이 주고받은 쪽지만 {action}할 수 있습니다.')


def list_for_user(acting_user_id):
    return Message.query.filter(
        or_(Message.sender_id == acting_user_id, Message.receiver_id == acting_user_id)
    ).order_by(Message.created_at.desc(), Message.id.desc()).all()


def get_one(message_id, acting_user_id):
    message = db.session.get(Message, message_id)
    if message is None:
        raise NotFound(f'Message with id {message_id} not found')
    _assert_participant(message, acting_user_id)
    return message


def create(data, acting_user_id):
    receiver_id = coerce_int(data.get('receiverId'))
    title = data.get('title')
    content = data.get('content')
    if receiver_id is None:
        raise BadRequest('receiverId 값이 필요합니다.')
    if not isinstance(title, str) or not title.strip():
        raise BadRequest('제목을 입력해주세요.')
    if not isinstance(content, str) or not content.strip():
        raise BadRequest('내용을 입력해주세요.')
    if db.session.get(User, receiver_id) is None:
        raise NotFound(f'User with id {receiver_id} not found')

    message = Message(
        sender_id=acting_user_id,
        receiver_id=receiver_id,
        title=title.strip(),
        content=content,
        is_read=False,
    )
    db.session.add(message)
    db.session.commit()
    logger.info(f"Message {message.id} sent from user {acting_user_id} to user {receiver_id}")
    return message


def update(message_id, data, acting_user_id):
    message = db.session.get(Message, message_id)
    if message is None:
        raise NotFound(f'Message with id {message_id} not found')
    _assert_participant(message, acting_user_id, '수정')

    if 'isRead' in data:
        if not isinstance(data['isRead'], bool):
            raise BadRequest('isRead 값은 true 또는 false여야 합니다.')
        message.is_read = data['isRead']
    if 'title' in data:
        if not isinstance(data['title'], str) or not data['title'].strip():
            raise BadRequest('제목을 입력해주세요.')
        message.title = data['title'].strip()
    if 'content' in data:
        if not isinstance(data['content'], str) or not data['content'].strip():
            raise BadRequest('내용을 입력해주세요.')
        message.content = data['content']
    db.session.commit()
    return message


def remove(message_id, acting_user_id):
    message = db.session.get(Message, message_id)
    if message is None:
        raise NotFound(f'Message with id {message_id} not found')
    _assert_participant(message, acting_user_id, '삭제')
    db.session.delete(message)
    db.session.commit()
    logger.info(f"Message {message_id} deleted by user {acting_user_id}")
    return {"message": f"Message with id {message_id} deleted."}
