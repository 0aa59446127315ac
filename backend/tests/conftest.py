import os
import sys
import time
import pytest

# Ensure the backend root (containing the `arcade` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arcade import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LEADERBOARD_BACKEND = 'sql'
    LEADERBOARD_SIZE = 20
    RATE_LIMIT_MAX = 5
    RATE_LIMIT_WINDOW_MS = 60 * 1000
    LEADERBOARD_CACHE_TTL_MS = 5 * 1000
    STORE_RETRIES = 3
    # No real sleeping between store retries in tests
    STORE_RETRY_BACKOFF_MS = 0
    STORE_CONFLICT_RETRIES = 5


def now_ms():
    return int(time.time() * 1000)


def make_payload(score=120, difficulty='EASY', snake_length=None, game_time=None, timestamp=None):
    """A plausible /submit-score body for ``score``."""
    foods = score // 10
    return {
        'score': score,
        'timestamp': now_ms() if timestamp is None else timestamp,
        'gameData': {
            'difficulty': difficulty,
            'snakeLength': foods + 3 if snake_length is None else snake_length,
            'gameTime': foods * 500 + 1000 if game_time is None else game_time,
        },
    }


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import arcade.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def services(flask_app):
    from arcade.services.leaderboard.registry import get_services
    return get_services()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
