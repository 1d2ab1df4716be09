import os
import tempfile

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Token settings
    JWT_SECRET = os.environ.get('JWT_SECRET') or 'your-secret-key-change-in-production'
    JWT_EXPIRES_IN = os.environ.get('JWT_EXPIRES_IN', '15m')
    REFRESH_TOKEN_EXPIRES_IN = os.environ.get('REFRESH_TOKEN_EXPIRES_IN', '7d')

    # Uploads
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'uploads')
    UPLOAD_URL_PREFIX = '/uploads'
    UPLOAD_MAX_BYTES = 5 * 1024 * 1024  # 5 MB per image
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16 MB limit
    DEFAULT_PROFILE_IMAGE = os.environ.get('DEFAULT_PROFILE_IMAGE', '/uploads/default_profile_pic.png')

    # Comma-separated list of origins allowed to call the API (SPA dev server by default)
    _cors_origins_str = os.environ.get('CORS_ORIGINS', 'http://localhost:5173')
    CORS_ORIGINS = [origin.strip() for origin in _cors_origins_str.split(',') if origin.strip()]

    # Chat
    CHAT_PUBLIC_ROOMS = ('general', 'travel', 'food')
    CHAT_HISTORY_LIMIT = 100
    CHAT_ROOM_ID_MAX_LENGTH = 50
    CHAT_MESSAGE_MAX_LENGTH = 1000

    # Rate limiting for credential endpoints
    AUTH_RATE_LIMIT = os.environ.get('AUTH_RATE_LIMIT', '30 per minute')
    RATELIMIT_ENABLED = os.environ.get('RATELIMIT_ENABLED', 'True').lower() == 'true'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # Use in-memory SQLite for tests
    RATELIMIT_ENABLED = False
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), 'community_uploads_test')
    CORS_ORIGINS = ['http://localhost:5173']
