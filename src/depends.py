"""Dependency wiring

Engine and session factory, plus the process-wide services handed to
routes and workers.
"""

import logging
from functools import lru_cache
from typing import Union

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.job_repository import SqlAlchemyJobRepository
from src.adapter.services.event_publisher import InProcessEventPublisher
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.payment_processor import StripePaymentProcessor
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.services.payment_processor import PaymentProcessor
from src.app.use_cases.jobs import ProjectEstimateToJob
from src.domain.events import EstimateCreated, EstimateStatusChanged

logger = logging.getLogger(__name__)

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def init_db() -> None:
    """Create all tables"""
    import src.domain  # noqa: F401  registers table metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def project_estimate_to_job(
    event: Union[EstimateCreated, EstimateStatusChanged],
) -> None:
    """Job projection handler; runs in its own session"""
    async with AsyncSessionLocal() as session:
        use_case = ProjectEstimateToJob(
            uow=SqlAlchemyUnitOfWork(session),
            job_repo=SqlAlchemyJobRepository(session),
        )
        await use_case.execute(event)


@lru_cache(maxsize=1)
def get_event_publisher() -> InProcessEventPublisher:
    publisher = InProcessEventPublisher()
    publisher.subscribe(EstimateCreated, project_estimate_to_job)
    publisher.subscribe(EstimateStatusChanged, project_estimate_to_job)
    return publisher


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    return create_notification_service(
        webhook_url=ApplicationConfig.NOTIFICATION_WEBHOOK_URL,
        timeout=ApplicationConfig.NOTIFICATION_TIMEOUT_SECONDS,
        max_retries=ApplicationConfig.NOTIFICATION_MAX_RETRIES,
    )


@lru_cache(maxsize=1)
def get_payment_processor() -> PaymentProcessor:
    if not ApplicationConfig.PAYMENT_PROCESSOR_API_KEY:
        logger.warning("PAYMENT_PROCESSOR_API_KEY is not set; card payments will be declined upstream")
    return StripePaymentProcessor(
        api_key=ApplicationConfig.PAYMENT_PROCESSOR_API_KEY,
        base_url=ApplicationConfig.PAYMENT_PROCESSOR_URL,
        currency=ApplicationConfig.PAYMENT_CURRENCY,
        timeout=ApplicationConfig.PAYMENT_TIMEOUT_SECONDS,
    )
