import pytest_asyncio
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers table metadata
from src.depends import (
    get_session,
    get_event_publisher,
    get_notification_service,
    get_payment_processor,
)
from src.adapter.services.event_publisher import InProcessEventPublisher
from src.adapter.services.notification_service import LoggingNotificationService
from src.app.services.payment_processor import (
    PaymentProcessor,
    PaymentAuthorization,
    AuthorizationStatus,
)

OWNER_ID = "owner_integration"
OWNER_HEADERS = {"X-Owner-Id": OWNER_ID}


class FakePaymentProcessor(PaymentProcessor):
    """Processor double that charges every card unless told otherwise"""

    def __init__(self):
        self.status = AuthorizationStatus.SUCCEEDED
        self.charges = {}

    async def authorize(
        self, amount: Decimal, payment_method: str, idempotency_key: str
    ) -> PaymentAuthorization:
        self.charges.setdefault(idempotency_key, amount)
        reference = f"pi_{len(self.charges)}"
        if self.status == AuthorizationStatus.DECLINED:
            return PaymentAuthorization(status=self.status, reference=reference, message="Card declined")
        return PaymentAuthorization(status=self.status, reference=reference)

    async def get_status(self, idempotency_key: str) -> PaymentAuthorization:
        if idempotency_key not in self.charges:
            return PaymentAuthorization(status=AuthorizationStatus.UNKNOWN)
        return PaymentAuthorization(status=self.status, reference=f"pi_{idempotency_key}")


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create a throwaway SQLite database per test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'documents_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
def payment_processor():
    return FakePaymentProcessor()


@pytest_asyncio.fixture
async def client(db_session, payment_processor):
    """Create test client with database session and collaborator overrides"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_event_publisher] = lambda: InProcessEventPublisher()
    app.dependency_overrides[get_notification_service] = lambda: LoggingNotificationService()
    app.dependency_overrides[get_payment_processor] = lambda: payment_processor

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=OWNER_HEADERS,
    ) as ac:
        yield ac
