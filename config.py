import os

class Config:
    # The secret key signs the session cookie that carries the logged-in user id.
    # In production, SECRET_KEY must be set as an environment variable.
    # Locally, a dev-only fallback is used so you don't need a .env file just to run the app.
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY and os.environ.get('FLASK_ENV') != 'development':
        import warnings
        warnings.warn('SECRET_KEY not set, using insecure default. Set SECRET_KEY env var in production!')
        SECRET_KEY = 'dev-secret-key-not-for-production'
    elif not SECRET_KEY:
        SECRET_KEY = 'dev-secret-key-not-for-production'

    # DATABASE_URL points at Postgres in production.
    # Locally, falls back to the instance/ folder next to this file.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'instance', 'tactics.db')

    # This disables a noisy tracking feature we don't need
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # The browser client runs on a different port in development
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN', 'http://localhost:5173')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Session cookie security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = os.environ.get('FLASK_ENV') == 'production'
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = 'Lax'

    # Maximum upload size. Tileset sheets are read fully into memory.
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))

    # Game rules
    INVENTORY_CAPACITY = int(os.environ.get('INVENTORY_CAPACITY', 8))
    MAX_TILES = int(os.environ.get('MAX_TILES', 4096))
