"""Unit tests for PaymentReconcilerWorker

Tests cover:
- Worker initialization with configuration
- run_once execution with reconciliation
- Reconciliation disabled scenario
- Error handling scenarios
- Shutdown and cleanup
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from src.worker.payment_reconciler import PaymentReconcilerWorker
from src.app.use_cases.invoices.dtos import ReconciliationResultDTO


@pytest.fixture
def mock_processor():
    return MagicMock()


@pytest.fixture
def sample_reconciliation_result():
    """Sample reconciliation result with one entry left pending"""
    return ReconciliationResultDTO(
        total_checked=3,
        recorded=1,
        failed=1,
        still_pending=1,
        reconciliation_time=datetime.now(timezone.utc),
        execution_time_ms=120,
    )


def mock_session_factory(mock_sessionmaker):
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    mock_sessionmaker.return_value = MagicMock(return_value=session)
    return session


@pytest.mark.asyncio
class TestPaymentReconcilerWorkerInit:
    """Test worker initialization"""

    @patch("src.worker.payment_reconciler.ApplicationConfig")
    @patch("src.worker.payment_reconciler.create_async_engine")
    def test_initializes_with_default_config(
        self, mock_create_engine, mock_app_config, mock_processor
    ):
        # Arrange
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"
        mock_app_config.RECONCILIATION_BATCH_SIZE = 50
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = PaymentReconcilerWorker(payment_processor=mock_processor)

        # Assert
        assert worker.db_uri == "sqlite+aiosqlite:///./default.db"
        assert worker.batch_size == 50
        assert worker.payment_processor is mock_processor
        mock_create_engine.assert_called_once()

    @patch("src.worker.payment_reconciler.ApplicationConfig")
    @patch("src.worker.payment_reconciler.create_async_engine")
    def test_initializes_with_custom_values(
        self, mock_create_engine, mock_app_config, mock_processor
    ):
        # Arrange
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = PaymentReconcilerWorker(
            db_uri="postgresql+asyncpg://custom@localhost/db",
            payment_processor=mock_processor,
            batch_size=10,
        )

        # Assert
        assert worker.db_uri == "postgresql+asyncpg://custom@localhost/db"
        assert worker.batch_size == 10


@pytest.mark.asyncio
class TestPaymentReconcilerWorkerRunOnce:
    """Test run_once execution"""

    @patch("src.worker.payment_reconciler.ApplicationConfig")
    @patch("src.worker.payment_reconciler.ReconcilePendingPayments")
    @patch("src.worker.payment_reconciler.RecordPayment")
    @patch("src.worker.payment_reconciler.SqlAlchemyUnitOfWork")
    @patch("src.worker.payment_reconciler.create_async_engine")
    @patch("src.worker.payment_reconciler.sessionmaker")
    async def test_run_once_executes_reconciliation(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_uow_class,
        mock_record_payment_class,
        mock_use_case_class,
        mock_app_config,
        mock_processor,
        sample_reconciliation_result,
    ):
        # Arrange
        mock_app_config.RECONCILIATION_ENABLED = True
        mock_session_factory(mock_sessionmaker)
        mock_create_engine.return_value = MagicMock()

        mock_use_case = MagicMock()
        mock_result = MagicMock()
        mock_result.is_err.return_value = False
        mock_result.value = sample_reconciliation_result
        mock_use_case.execute = AsyncMock(return_value=mock_result)
        mock_use_case_class.return_value = mock_use_case

        # Act
        worker = PaymentReconcilerWorker(payment_processor=mock_processor, batch_size=25)
        result = await worker.run_once()

        # Assert
        assert result.total_checked == 3
        assert result.still_pending == 1
        mock_use_case.execute.assert_called_once_with(batch_size=25)
        assert mock_use_case_class.call_args.kwargs["payment_processor"] is mock_processor

    @patch("src.worker.payment_reconciler.ApplicationConfig")
    @patch("src.worker.payment_reconciler.create_async_engine")
    async def test_run_once_skips_when_disabled(
        self, mock_create_engine, mock_app_config, mock_processor
    ):
        # Arrange
        mock_app_config.RECONCILIATION_ENABLED = False
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = PaymentReconcilerWorker(payment_processor=mock_processor)
        result = await worker.run_once()

        # Assert
        assert result.total_checked == 0
        assert result.execution_time_ms == 0

    @patch("src.worker.payment_reconciler.ApplicationConfig")
    @patch("src.worker.payment_reconciler.ReconcilePendingPayments")
    @patch("src.worker.payment_reconciler.RecordPayment")
    @patch("src.worker.payment_reconciler.SqlAlchemyUnitOfWork")
    @patch("src.worker.payment_reconciler.create_async_engine")
    @patch("src.worker.payment_reconciler.sessionmaker")
    async def test_run_once_raises_on_use_case_error(
        self,
        mock_sessionmaker,
        mock_create_engine,
        mock_uow_class,
        mock_record_payment_class,
        mock_use_case_class,
        mock_app_config,
        mock_processor,
    ):
        # Arrange
        mock_app_config.RECONCILIATION_ENABLED = True
        mock_session_factory(mock_sessionmaker)
        mock_create_engine.return_value = MagicMock()

        mock_use_case = MagicMock()
        mock_result = MagicMock()
        mock_result.is_err.return_value = True
        mock_result.error.message = "Database connection failed"
        mock_use_case.execute = AsyncMock(return_value=mock_result)
        mock_use_case_class.return_value = mock_use_case

        worker = PaymentReconcilerWorker(payment_processor=mock_processor)

        # Act & Assert
        with pytest.raises(RuntimeError, match="Database connection failed"):
            await worker.run_once()


@pytest.mark.asyncio
class TestPaymentReconcilerWorkerShutdown:
    @patch("src.worker.payment_reconciler.ApplicationConfig")
    @patch("src.worker.payment_reconciler.create_async_engine")
    async def test_shutdown_disposes_engine(
        self, mock_create_engine, mock_app_config, mock_processor
    ):
        # Arrange
        mock_engine = MagicMock()
        mock_engine.dispose = AsyncMock()
        mock_create_engine.return_value = mock_engine

        worker = PaymentReconcilerWorker(payment_processor=mock_processor)

        # Act
        await worker.shutdown()

        # Assert
        mock_engine.dispose.assert_called_once()
