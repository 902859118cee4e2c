# tests/conftest.py
import os
import sys
from datetime import UTC, datetime, timedelta
from typing import AsyncGenerator

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from maintenix.auth.config import AuthSettings
from maintenix.auth.models import User
from maintenix.auth.service import AccountStore
from maintenix.auth.utils import hash_password
from maintenix.config import EmailSettings, Settings
from maintenix.database import Base
from maintenix.main import create_app
from maintenix.notifications.service import DeliveryResult
from maintenix.password_reset.config import PasswordResetSettings
from maintenix.password_reset.service import PasswordResetService


class FakeClock:
    """Manually advanced clock for expiry scenarios."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 2, 9, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Captures every OTP it is asked to deliver."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.succeed = True

    async def send_otp(self, email: str, code: str, display_name: str) -> DeliveryResult:
        self.sent.append((email, code, display_name))
        return DeliveryResult(success=self.succeed, message_id=f"msg-{len(self.sent)}")

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def reset_settings() -> PasswordResetSettings:
    return PasswordResetSettings()


@pytest_asyncio.fixture
async def app(tmp_path, clock, notifier, reset_settings) -> AsyncGenerator[FastAPI, None]:
    """App wired to a throwaway SQLite file, fake clock and recording notifier."""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'maintenix.db'}"
    fastapi_app = create_app(
        Settings(DATABASE_URL=database_url, PROJECT_NAME="Maintenix"),
        email_settings=EmailSettings(COMMUNICATION_SERVICES_CONNECTION_STRING=None),
        auth_settings=AuthSettings(BCRYPT_ROUNDS=4),
        password_reset_settings=reset_settings,
        notifier=notifier,
        clock=clock,
    )

    async with fastapi_app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield fastapi_app

    await fastapi_app.state.engine.dispose()


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def create_user(app: FastAPI):
    """Helper fixture to create accounts directly in the store"""

    async def _create_user(
        email: str = "user@maintenix.com",
        name: str = "Test User",
        password: str = "OldPass123!",
    ) -> User:
        async with app.state.session_factory() as session:
            user = User(
                name=name,
                email=email,
                password=hash_password(password, rounds=4),
                company=email.rsplit("@", 1)[-1],
            )
            session.add(user)
            await session.commit()
            return user

    return _create_user


@pytest.fixture
def make_service(app: FastAPI):
    """Builds a PasswordResetService over the given session using the app's shared state."""

    def _make_service(session: AsyncSession) -> PasswordResetService:
        state = app.state
        return PasswordResetService(
            session,
            AccountStore(session),
            state.notifier,
            settings=state.password_reset_settings,
            rate_limiter=state.rate_limiter,
            locks=state.account_locks,
            clock=state.clock,
            bcrypt_rounds=4,
        )

    return _make_service
