from flask import request
from werkzeug.exceptions import BadRequest, Forbidden


def assert_owner(owner_id, acting_user_id, message='권한이 없습니다.'):
    """Raises Forbidden unless the acting user owns the resource."""
    if acting_user_id is None or owner_id != acting_user_id:
        raise Forbidden(message)


def get_json_body():
    """Returns the request JSON as a dict; BadRequest when it is missing or not an object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest('요청 본문이 올바른 JSON 객체가 아닙니다.')
    return data


def parse_int_arg(name, required=False):
    value = request.args.get(name)
    if value is None or value == '':
        if required:
            raise BadRequest(f'{name} 값이 필요합니다.')
        return None
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f'{name} 값은 숫자여야 합니다.')


def optional_str(data, field, message=None):
    """Returns data[field] when it is absent, null or a string; BadRequest for any other type."""
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise BadRequest(message or f'{field} 값은 문자열이어야 합니다.')
    return value
