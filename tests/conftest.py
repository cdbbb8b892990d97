import os
import tempfile

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SOCKETIO_ASYNC_MODE", "threading")
os.environ.setdefault("JWT_SECRET", "test-secret-with-enough-bytes-for-hs256")
os.environ.setdefault("PASSWORD_ITERATIONS", "1000")
os.environ.setdefault("PUBLIC_BASE_URL", "https://critico.example.com")
os.environ.setdefault("FILES_BASE_PATH", tempfile.mkdtemp(prefix="critico-files-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("DEBUG", "false")

import pytest  # noqa: E402

from critico.infrastructure.database.models.product_model import ProductModel  # noqa: E402
from critico.infrastructure.database.models.user_model import UserModel  # noqa: E402
from critico.infrastructure.database.session import db_session, drop_db, init_db  # noqa: E402
from critico.infrastructure.realtime.change_feed import change_feed  # noqa: E402
from critico.infrastructure.security.password_hasher import PasswordHasher  # noqa: E402
from critico.services.service_factory import build_services  # noqa: E402

DEFAULT_PASSWORD = "geheim123"


class FakeTimer:
    """Stands in for threading.Timer; tests call fire() by hand."""

    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.fn()


class TimerRecorder:
    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, delay, fn):
        timer = FakeTimer(delay, fn)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_all(self):
        for timer in list(self.live):
            timer.fire()


@pytest.fixture(autouse=True)
def fresh_db():
    drop_db()
    init_db()
    change_feed.clear()
    yield
    change_feed.clear()


@pytest.fixture
def timers():
    return TimerRecorder()


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _make(name="Anna", surname="Muster", email=None, password=DEFAULT_PASSWORD) -> int:
        counter["n"] += 1
        password_hash, salt, algo, iterations = PasswordHasher.hash_password(password)
        with db_session() as session:
            user = UserModel(
                name=name,
                surname=surname,
                email=email or f"user{counter['n']}@example.com",
                password_algo=algo,
                password_iterations=iterations,
                password_hash=password_hash,
                password_salt=salt,
                trustlevel=0,
                exp=0,
                is_deleted=False,
            )
            session.add(user)
            session.flush()
            return int(user.id)

    return _make


@pytest.fixture
def make_product():
    def _make(owner_id: int, name="Kaffeemaschine") -> int:
        with db_session() as session:
            product = ProductModel(name=name, description=None, price=None, owner_id=owner_id, stars=0)
            session.add(product)
            session.flush()
            return int(product.id)

    return _make


@pytest.fixture
def users(make_user):
    """owner, tester and a bystander."""
    return {
        "owner": make_user("Olga", "Owner"),
        "tester": make_user("Tim", "Tester"),
        "other": make_user("Otto", "Other"),
    }


@pytest.fixture
def product(users, make_product):
    return make_product(users["owner"])


@pytest.fixture
def services():
    """Runs fn(services) inside one committed db_session()."""

    def _run(fn):
        with db_session() as session:
            return fn(build_services(session))

    return _run
