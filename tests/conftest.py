import pytest
from werkzeug.security import generate_password_hash
from sternkern import create_app, db
from sternkern.config import TestingConfig
from sternkern.errors import StoreError
from sternkern.models import *  # register models so metadata is available
from sternkern.store import Store


@pytest.fixture(scope='function')
def app():
    """A fresh app over its own in-memory database for every test."""
    app = create_app(config_class=TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture(scope='function')
def db_session(app):
    """The Flask-SQLAlchemy session inside an app context for the whole test."""
    with app.app_context():
        yield db.session


@pytest.fixture(scope='function')
def client(app):
    """A Flask test client to make HTTP requests during integration tests."""
    return app.test_client()


def make_user(username, role, password='secret', house_number=None):
    user = User(username=username, password=generate_password_hash(password), role=role,
                contact='0700000000', house_number=house_number)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def login_as(client, db_session):
    """Create a user with the given role and log the test client in as them."""
    def _login(role, username=None, house_number=None):
        username = username or role
        make_user(username, role, house_number=house_number)
        resp = client.post('/auth/login', json={'username': username, 'password': 'secret'})
        assert resp.status_code == 200
        return client
    return _login


@pytest.fixture(scope='function')
def landlord_client(login_as):
    return login_as('landlord')


class FailingStore(Store):
    """
    Store whose n-th write (1-based, counting every insert/update/delete,
    compensations included) raises StoreError instead of touching the database.
    """

    def __init__(self, fail_writes=()):
        self.fail_writes = set(fail_writes)
        self.writes = []

    def _commit(self, action, description):
        self.writes.append(description)
        if len(self.writes) in self.fail_writes:
            raise StoreError(f'injected failure: {description}')
        return super()._commit(action, description)


class RecordingStore(FailingStore):
    """Records every write and never fails."""

    def __init__(self):
        super().__init__(())


@pytest.fixture
def failing_store():
    return FailingStore


@pytest.fixture
def recording_store():
    return RecordingStore()
