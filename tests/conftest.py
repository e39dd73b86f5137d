import os
import sys
import pytest

# Ensure the project root (containing the `turntimer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from turntimer import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    TICK_INTERVAL_SEC = 1
    AUTO_ADVANCE_DELAY_SEC = 1
    TURN_TIMER_STATE_KEY = 'TurnTimerOverlay'
    CHAT_SPEAKER = 'Turn Timer'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import turntimer.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


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


@pytest.fixture()
def timer(flask_app):
    from turntimer.services.timer import turn_timer
    return turn_timer


@pytest.fixture()
def chat_log(monkeypatch):
    """Capture every message the timer sends, as (speaker, content) pairs."""
    sent = []

    def _record(speaker, content):
        sent.append((speaker, content))

    monkeypatch.setattr('turntimer.services.timer.notifications.send_chat', _record)
    return sent


def make_turn_order(*names):
    """Create one token per name and store them, in order, as the turn order.

    A name prefixed with ``text:`` becomes a free-text entry instead.
    """
    from turntimer.models import Campaign, Character, Token
    from turntimer.services.timer.turn_order import TurnEntry, set_turn_order

    campaign = Campaign.current()
    entries = []
    for i, name in enumerate(names):
        if name.startswith('text:'):
            entries.append(TurnEntry(id='-1', custom=name[len('text:'):], extra={'pr': str(20 - i)}))
            continue
        character = Character(name=name)
        db.session.add(character)
        db.session.flush()
        token = Token(name=f"{name} token", represents=character.id, page_id=campaign.player_page_id)
        db.session.add(token)
        db.session.flush()
        entries.append(TurnEntry(id=token.id, extra={'pr': str(20 - i)}))
    db.session.commit()
    set_turn_order(entries, campaign)
    return entries


@pytest.fixture()
def party(flask_app):
    return make_turn_order('Alice', 'Bob', 'Cara')
