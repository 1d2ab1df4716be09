import logging
import os
import time

from flask import Flask, g, request
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_socketio import SocketIO
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import Unauthorized
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
socketio = SocketIO()
migrate = Migrate()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://"
)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Request/response lines are logged at INFO
    if not app.debug:
        app.logger.setLevel(logging.INFO)

    db.init_app(app)
    login_manager.init_app(app)
    socketio.init_app(app, cors_allowed_origins=app.config['CORS_ORIGINS'])
    migrate.init_app(app, db)
    limiter.init_app(app)
    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    from community.auth.routes import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')

    from community.api.routes import api_bp
    app.register_blueprint(api_bp)

    from community.errors import register_error_handlers
    register_error_handlers(app)

    from community import models # noqa
    from community import events # noqa

    @app.before_request
    def log_request_start():
        # g belongs to the app context, which can outlive a single request
        for key in ('_login_user', 'acting_user_id', 'auth_error'):
            g.pop(key, None)
        g.request_start_time = time.time()
        app.logger.info(f"Request START: {request.remote_addr} {request.method} {request.full_path}")

    @app.after_request
    def log_and_decorate_response(response):
        duration_ms = (time.time() - g.request_start_time) * 1000 if 'request_start_time' in g else -1
        user_info = f"User: {g.acting_user_id}" if g.get('acting_user_id') else "User: Anonymous"
        log_message = (
            f"Request END: {request.remote_addr} {request.method} {request.full_path} "
            f"Status: {response.status_code} Duration: {duration_ms:.2f}ms {user_info}"
        )
        if 400 <= response.status_code < 500:
            app.logger.warning(log_message)
        elif response.status_code >= 500:
            app.logger.error(log_message)
        else:
            app.logger.info(log_message)

        response.headers['X-Content-Type-Options'] = 'nosniff'
        return response

    return app


@login_manager.request_loader
def load_user_from_request(req):
    from community.models import User
    from community.services.auth_service import extract_bearer_token, verify_access_token

    token = extract_bearer_token(req.headers.get('Authorization'))
    if not token:
        g.auth_error = '인증 토큰이 필요합니다.'
        return None
    try:
        payload = verify_access_token(token)
    except Unauthorized as e:
        g.auth_error = e.description
        return None
    user = db.session.get(User, payload['userId'])
    if user is None:
        g.auth_error = '사용자를 찾을 수 없습니다.'
        return None
    g.acting_user_id = user.id
    return user


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthorized(g.get('auth_error') or '인증이 필요합니다.')
