import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Optional local overrides, then in-memory SQLite defaults.
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["SMTP_HOST"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from libs.auth.security import create_access_token  # noqa: E402
from libs.common.config import get_settings  # noqa: E402
from libs.db.base import Base  # noqa: E402
from services.marketplace_service import models as _marketplace_models  # noqa: E402,F401
from services.marketplace_service.services.approval_column import (  # noqa: E402
    reset_vendor_schema_cache,
)

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
settings = get_settings()


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test, with foreign keys enforced so
    ON DELETE CASCADE behaves like PostgreSQL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    reset_vendor_schema_cache()
    yield engine
    reset_vendor_schema_cache()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the marketplace app, sharing the test session.
    """
    from libs.db.session import get_async_db
    from services.marketplace_service.app.main import app

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _override_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers_for(user) -> dict:
    """Bearer header carrying a real signed token for ``user``."""
    token = create_access_token(
        user_id=str(user.id), email=user.email, role=user.role.value
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    return auth_headers_for


@pytest_asyncio.fixture
async def admin_user(db_session):
    from services.marketplace_service.models import UserRole
    from tests.factories import UserFactory

    user = UserFactory.create(role=UserRole.ADMIN, email="admin@lwg-market.com")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return auth_headers_for(admin_user)
