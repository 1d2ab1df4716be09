import logging

from flask import request
from flask_socketio import join_room, leave_room, emit, rooms
from werkzeug.exceptions import HTTPException, Unauthorized

from community import socketio, db
from community.models import User
from community.services import chat_service
from community.services.auth_service import extract_bearer_token, verify_access_token
from community.services.chat_service import ChatSessionRegistry

logger = logging.getLogger(__name__)

CHAT_NAMESPACE = '/chat'

chat_sessions = ChatSessionRegistry()


def _authenticate(token):
    """Maps a handshake token to a chat identity; anything invalid means anonymous."""
    if not token:
        return None
    try:
        payload = verify_access_token(token)
    except Unauthorized as e:
        logger.info(f"Chat connection falling back to anonymous: {e.description}")
        return None
    return db.session.get(User, payload['userId'])


def _payload(data):
    return data if isinstance(data, dict) else {}


def _report_error(event, e):
    if isinstance(e, HTTPException):
        emit('error', {'message': e.description})
        return
    db.session.rollback()
    logger.error(f"Unhandled error in chat event '{event}' for sid {request.sid}: {e}", exc_info=True)
    emit('error', {'message': '요청을 처리하지 못했습니다.'})


@socketio.on('connect', namespace=CHAT_NAMESPACE)
def handle_connect(auth=None):
    token = _payload(auth).get('token') or extract_bearer_token(request.headers.get('Authorization'))
    user = _authenticate(token)
    if user is not None:
        chat_sessions.register(request.sid, user.id, user.name)
        logger.info(f"Chat client connected: {request.sid} as user {user.id}")
    else:
        chat_sessions.register(request.sid)
        logger.info(f"Chat client connected: {request.sid} as anonymous")


@socketio.on('disconnect', namespace=CHAT_NAMESPACE)
def handle_disconnect(reason=None):
    identity = chat_sessions.get(request.sid)
    for room_id in rooms():
        if room_id == request.sid or chat_service.is_public_room(room_id):
            continue
        emit('systemMessage',
             chat_service.create_system_message(room_id, f"{identity['username']} 님이 나갔습니다."),
             to=room_id, include_self=False)
    chat_sessions.remove(request.sid)
    logger.info(f"Chat client disconnected: {request.sid} ({reason})")


@socketio.on('joinRoom', namespace=CHAT_NAMESPACE)
def handle_join_room(data):
    try:
        room_id = chat_service.validate_room_id(_payload(data).get('roomId'))
        identity = chat_sessions.get(request.sid)
        join_room(room_id)

        history = chat_service.get_recent_messages(room_id)
        if history:
            emit('chatHistory', [chat_service.message_payload(m) for m in history])
        chat_service.touch_participant(room_id, identity['userId'])

        if not chat_service.is_public_room(room_id):
            emit('systemMessage',
                 chat_service.create_system_message(room_id, f"{identity['username']} 님이 입장했습니다."),
                 to=room_id, include_self=False)
        emit('joinRoomSuccess', {'roomId': room_id, 'message': f'{room_id} 방에 입장했습니다.'})
        logger.info(f"User {identity['userId']} ({request.sid}) joined room '{room_id}'")
    except Exception as e:
        _report_error('joinRoom', e)


@socketio.on('leaveRoom', namespace=CHAT_NAMESPACE)
def handle_leave_room(data):
    try:
        room_id = chat_service.validate_room_id(_payload(data).get('roomId'), check_length=False)
        identity = chat_sessions.get(request.sid)
        # Others are told before this connection leaves the group
        if not chat_service.is_public_room(room_id):
            emit('systemMessage',
                 chat_service.create_system_message(room_id, f"{identity['username']} 님이 나갔습니다."),
                 to=room_id, include_self=False)
        leave_room(room_id)
        emit('leaveRoomSuccess', {'roomId': room_id, 'message': f'{room_id} 방에서 나갔습니다.'})
        logger.info(f"User {identity['userId']} ({request.sid}) left room '{room_id}'")
    except Exception as e:
        _report_error('leaveRoom', e)


@socketio.on('chatMessage', namespace=CHAT_NAMESPACE)
def handle_chat_message(data):
    try:
        data = _payload(data)
        identity = chat_sessions.get(request.sid)
        message = chat_service.save_message(data.get('roomId'), identity['userId'], data.get('message'))
        emit('chatMessage', chat_service.message_payload(message, identity['username']), to=message.room_id)
    except Exception as e:
        _report_error('chatMessage', e)
