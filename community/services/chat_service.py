import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest

from community import db
from community.models import ChatRoom, ChatMessage, ChatRoomParticipant
from community.utils.helpers import get_current_utc, to_iso

logger = logging.getLogger(__name__)

ANONYMOUS_USER_ID = 0
ANONYMOUS_USERNAME = '익명'
PRIVATE_ROOM_PREFIX = 'private-'


class ChatSessionRegistry:
    """
    Process-local map of Socket.IO session id to chat identity.

    Entries are added on connect and dropped on disconnect; nothing here is
    persisted or shared between server processes.
    """

    def __init__(self):
        self._sessions = {}

    def register(self, sid, user_id=ANONYMOUS_USER_ID, username=ANONYMOUS_USERNAME):
        identity = {'userId': user_id, 'username': username}
        self._sessions[sid] = identity
        return identity

    def get(self, sid):
        return self._sessions.get(sid) or {'userId': ANONYMOUS_USER_ID, 'username': ANONYMOUS_USERNAME}

    def remove(self, sid):
        return self._sessions.pop(sid, None)

    def __contains__(self, sid):
        return sid in self._sessions

    def __len__(self):
        return len(self._sessions)


def is_public_room(room_id):
    return room_id in current_app.config['CHAT_PUBLIC_ROOMS']


def is_private_room(room_id):
    return room_id.startswith(PRIVATE_ROOM_PREFIX)


def validate_room_id(room_id, check_length=True):
    """Returns the stripped room id; BadRequest when empty, or too long unless check_length is off."""
    if not isinstance(room_id, str) or not room_id.strip():
        raise BadRequest('방 ID를 입력해주세요.')
    room_id = room_id.strip()
    max_length = current_app.config['CHAT_ROOM_ID_MAX_LENGTH']
    if check_length and len(room_id) > max_length:
        raise BadRequest(f'방 ID는 {max_length}자 이하여야 합니다.')
    return room_id


def validate_message(text):
    if not isinstance(text, str) or not text.strip():
        raise BadRequest('메시지를 입력해주세요.')
    max_length = current_app.config['CHAT_MESSAGE_MAX_LENGTH']
    if len(text) > max_length:
        raise BadRequest(f'메시지는 {max_length}자 이하여야 합니다.')
    return text.strip()


def get_or_create_room(room_id, user_id=None):
    room = db.session.get(ChatRoom, room_id)
    if room is not None:
        return room

    if is_private_room(room_id):
        name, description = '1:1 채팅', '1:1 채팅방'
    else:
        name, description = room_id, None
    room = ChatRoom(room_id=room_id, name=name, description=description, created_by=user_id or None)
    db.session.add(room)
    try:
        db.session.commit()
    except IntegrityError:
        # Another handler created the same room first
        db.session.rollback()
        room = db.session.get(ChatRoom, room_id)
    else:
        logger.info(f"Chat room '{room_id}' created")
    return room


def _record_participant(room_id, user_id):
    participant = ChatRoomParticipant.query.filter_by(room_id=room_id, user_id=user_id).first()
    now = get_current_utc()
    if participant is None:
        db.session.add(ChatRoomParticipant(room_id=room_id, user_id=user_id, joined_at=now, last_read_at=now))
    else:
        participant.last_read_at = now


def save_message(room_id, user_id, text):
    """
    Persists a chat message, creating the room on first use.

    Anonymous senders (user id 0) are stored with a NULL user id.
    """
    text = validate_message(text)
    room_id = validate_room_id(room_id)
    sender_id = user_id or None
    get_or_create_room(room_id, sender_id)

    message = ChatMessage(room_id=room_id, user_id=sender_id, message=text)
    db.session.add(message)
    if sender_id is not None:
        _record_participant(room_id, sender_id)
    db.session.commit()
    return message


def touch_participant(room_id, user_id):
    """Refreshes last_read_at for a user already listed in the room."""
    if not user_id:
        return
    participant = ChatRoomParticipant.query.filter_by(room_id=room_id, user_id=user_id).first()
    if participant is not None:
        participant.last_read_at = get_current_utc()
        db.session.commit()


def get_recent_messages(room_id, limit=None):
    """Returns up to `limit` latest messages of the room, oldest first."""
    limit = limit or current_app.config['CHAT_HISTORY_LIMIT']
    latest = ChatMessage.query.filter_by(room_id=room_id) \
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc()) \
        .limit(limit).all()
    return list(reversed(latest))


def message_payload(message, username=None):
    if username is None:
        username = message.user.name if message.user else ANONYMOUS_USERNAME
    return {
        'id': message.id,
        'roomId': message.room_id,
        'userId': message.user_id or ANONYMOUS_USER_ID,
        'username': username,
        'message': message.message,
        'time': to_iso(message.created_at),
    }


def create_system_message(room_id, text):
    return {
        'roomId': room_id,
        'message': text,
        'time': to_iso(get_current_utc()),
    }
