import os, sys
import tempfile
import pytest

# Ensure project root in path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import Config
from extensions import db

_fd, _DB_PATH = tempfile.mkstemp(prefix='test_db_', suffix='.sqlite')
os.close(_fd)


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = f"sqlite:///{_DB_PATH}"
    LOG_DIR = os.path.join(tempfile.gettempdir(), 'bookkeep-test-logs')
    CURRENCY = 'USD'
    CURRENCY_LOCALE = 'en_US'
    DEFAULT_TAX_PERCENTAGE = 0


@pytest.fixture(scope='session')
def test_app():
    from bookkeep import create_app

    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    try:
        yield app
    finally:
        with app.app_context():
            db.session.remove()
            db.engine.dispose()
        try:
            os.remove(_DB_PATH)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def clean_tables(request):
    # Unit tests that never touch the app skip the database entirely
    if 'test_app' not in request.fixturenames:
        yield
        return
    app = request.getfixturevalue('test_app')
    yield
    with app.app_context():
        db.session.rollback()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()


@pytest.fixture()
def app_ctx(test_app):
    with test_app.app_context():
        yield test_app


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def authed_client(test_app):
    from models import User

    with test_app.app_context():
        u = User(username='admin', email='admin@example.com', active=True)
        u.set_password('admin123')
        db.session.add(u)
        db.session.commit()
    c = test_app.test_client()
    r = c.post('/login', data={'username': 'admin', 'password': 'admin123'})
    assert r.status_code == 302
    return c


@pytest.fixture()
def csrf_client(tmp_path):
    """Client for an app with CSRF protection switched on (separate database)."""
    from bookkeep import create_app

    class CsrfConfig(TestConfig):
        WTF_CSRF_ENABLED = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'csrf.sqlite'}"

    app = create_app(CsrfConfig)
    yield app.test_client()
    with app.app_context():
        db.session.remove()
        db.engine.dispose()
