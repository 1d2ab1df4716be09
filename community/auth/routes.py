from flask import Blueprint, jsonify, request, current_app

from community import limiter
from community.services import auth_service
from community.utils.decorators import get_json_body

auth_bp = Blueprint('auth', __name__)


def _auth_rate_limit():
    return current_app.config['AUTH_RATE_LIMIT']


@auth_bp.route('/register', methods=['POST'])
@limiter.limit(_auth_rate_limit)
def register():
    data = get_json_body()
    result = auth_service.register(data)
    return jsonify(result), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(_auth_rate_limit)
def login():
    data = get_json_body()
    result = auth_service.login(data.get('loginId'), data.get('password'))
    return jsonify(result), 200


@auth_bp.route('/check-id', methods=['GET'])
def check_id():
    return jsonify(auth_service.check_id_exists(request.args.get('loginId'))), 200


@auth_bp.route('/refresh', methods=['POST'])
def refresh():
    data = get_json_body()
    return jsonify(auth_service.refresh(data.get('refresh_token'))), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return jsonify(auth_service.logout(data.get('refresh_token'))), 200
