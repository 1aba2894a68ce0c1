"""
Shared fixtures.

Everything runs against the in-memory stores; the clock used for reset
token expiry is a FakeClock the tests move by hand.
"""

from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ladder.api.app import create_app
from ladder.auth.gate import AuthGate
from ladder.auth.jwt import TokenCodec
from ladder.auth.password_reset import PasswordResetFlow
from ladder.auth.passwords import hash_password
from ladder.config import Settings
from ladder.connections.graph import ConnectionGraph
from ladder.core.models import Identity, Role
from ladder.core.utils import utc_now
from ladder.privacy.filter import PrivacyFilter
from ladder.storage import create_local_storage


TEST_SECRET = "test-secret-key-that-is-at-least-32-chars"
PASSWORD = "correct-horse-battery"
PASSWORD_HASH = hash_password(PASSWORD, rounds=4)

ADMIN_ID = 1
LEGACY_ADMIN_ID = 2
INACTIVE_ID = 3
ALICE_ID = 7
BOB_ID = 8
OWNER_ID = 42


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or utc_now()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingSender:
    """NotificationSender that records instead of emailing."""

    def __init__(self):
        self.sent = []

    async def send_password_reset(self, email, reset_token):
        self.sent.append((email, reset_token))


def make_identities():
    return [
        Identity(id=ADMIN_ID, email="admin@ladder.app", username="admin",
                 role=Role.ADMIN, password_hash=PASSWORD_HASH),
        Identity(id=LEGACY_ADMIN_ID, email="legacy@ladder.app", username="legacy",
                 is_admin=True, password_hash=PASSWORD_HASH),
        Identity(id=INACTIVE_ID, email="gone@ladder.app", username="gone",
                 is_active=False, password_hash=PASSWORD_HASH),
        Identity(id=ALICE_ID, email="alice@example.com", username="alice",
                 password_hash=PASSWORD_HASH),
        Identity(id=BOB_ID, email="bob@example.com", username="bob",
                 password_hash=PASSWORD_HASH),
        Identity(id=OWNER_ID, email="owner@example.com", username="owner",
                 password_hash=PASSWORD_HASH),
    ]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret_key=TEST_SECRET,
        sentry_dsn="",
    )


@pytest.fixture
def storage():
    return create_local_storage(make_identities())


@pytest.fixture
def codec(settings):
    return TokenCodec.from_settings(settings)


@pytest.fixture
def gate(codec, storage):
    return AuthGate(codec, storage.identities)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def reset_flow(storage, sender, clock):
    return PasswordResetFlow(
        identities=storage.identities,
        reset_tokens=storage.reset_tokens,
        sender=sender,
        log_reset_links=True,
        clock=clock,
    )


@pytest.fixture
def graph(storage):
    return ConnectionGraph(storage.connections)


@pytest.fixture
def privacy(graph, storage):
    return PrivacyFilter(graph, storage.settings)


@pytest.fixture
def app(settings, storage, sender):
    return create_app(settings=settings, storage=storage, sender=sender)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_header(codec):
    def make(user_id):
        return {"Authorization": f"Bearer {codec.issue(user_id)}"}
    return make
