import os
import uuid
import pytest
from unittest.mock import MagicMock
from dotenv import load_dotenv

# Tests run against a local SQLite file unless told otherwise; the RQ queue
# is mocked, so no Redis server is needed either
os.environ.setdefault("DATABASE_URL", "sqlite:///./.pytest-bisn.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
load_dotenv()


@pytest.fixture(scope="function")
async def async_db_session():
    """Provides an async session on a freshly created schema."""
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import NullPool
    from src.db.session import ASYNC_DATABASE_URL, Base
    from src.models import customer, notification_log, product_variant, subscription  # noqa: F401

    async_engine = create_async_engine(ASYNC_DATABASE_URL, poolclass=NullPool)
    async with async_engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)

    TestingAsyncSessionLocal = sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestingAsyncSessionLocal() as session:
        yield session

    await async_engine.dispose()


@pytest.fixture(scope="function")
def notification_queue():
    """Stands in for the RQ queue; records enqueued jobs."""
    return MagicMock()


@pytest.fixture(scope="function")
def sender(notification_queue):
    from src.services.sender import NotificationSender
    return NotificationSender(queue=notification_queue)


@pytest.fixture(scope="function")
def lifecycle(async_db_session, sender):
    from src.repositories.subscriptions import ProductVariantRepository, SubscriptionRepository
    from src.services.lifecycle import SubscriptionLifecycle

    return SubscriptionLifecycle(
        SubscriptionRepository(async_db_session),
        ProductVariantRepository(async_db_session),
        sender,
    )


@pytest.fixture(scope="function")
def make_variant(async_db_session):
    """Factory for product variants; out of stock unless told otherwise."""
    from src.models.product_variant import ProductVariant

    async def _make(code="VAR-1", name="Blue T-Shirt M", tracked=True, on_hand=0, on_hold=0):
        variant = ProductVariant(
            code=code,
            name=name,
            tracked=tracked,
            on_hand=on_hand,
            on_hold=on_hold,
        )
        async_db_session.add(variant)
        await async_db_session.commit()
        return variant

    return _make


@pytest.fixture(scope="function")
def make_customer(async_db_session):
    from src.models.customer import Customer

    async def _make(email="customer@example.com", first_name="Ada"):
        cust = Customer(id=uuid.uuid4(), email=email, first_name=first_name)
        async_db_session.add(cust)
        await async_db_session.commit()
        return cust

    return _make


@pytest.fixture(scope="function")
async def client(async_db_session, sender):
    """Provides an async HTTP client for testing with DB dependency override."""
    import httpx
    from src.api.main import app
    from src.api.context import get_sender
    from src.db.session import get_async_db

    async def override_get_async_db():
        yield async_db_session

    app.dependency_overrides[get_async_db] = override_get_async_db
    app.dependency_overrides[get_sender] = lambda: sender

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides = {}


@pytest.fixture(scope="function")
def worker_session(async_db_session, mocker):
    """Route the notification worker's own sessions to the test session."""
    from unittest.mock import AsyncMock

    mock_session_context = AsyncMock()
    mock_session_context.__aenter__.return_value = async_db_session
    mock_session_context.__aexit__.return_value = None
    mocker.patch("src.workers.notification_worker.AsyncSessionLocal", return_value=mock_session_context)
    mocker.patch("src.workers.notification_worker.MAIL_API_URL", "http://mail-relay.local/send")
    return async_db_session


@pytest.fixture(scope="function")
def mail_relay(mocker):
    """Replace httpx.AsyncClient; answer with a status code or raise."""
    from unittest.mock import AsyncMock

    def _mock(status_code=None, side_effect=None):
        mock_client = AsyncMock()
        if side_effect is not None:
            mock_client.post.side_effect = side_effect
        else:
            mock_response = MagicMock()
            mock_response.status_code = status_code
            mock_client.post.return_value = mock_response

        mock_async_client = AsyncMock()
        mock_async_client.__aenter__.return_value = mock_client
        mock_async_client.__aexit__.return_value = None
        mocker.patch("httpx.AsyncClient", return_value=mock_async_client)
        return mock_client

    return _mock
