"""FastAPI application factory"""

import logging
import time
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from src.api.error import ClientError, client_error_handler, validation_error_handler
from src.api.routes import estimates, invoices, clients, jobs, public
from src.depends import init_db, engine, get_event_publisher

logger = logging.getLogger(__name__)


def create_app(config) -> FastAPI:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        sentry_sdk.init(dsn=config.DSN_SENTRY, environment=config.SENTRY_ENVIRONMENT)
        logger.info("Sentry enabled for environment %s", config.SENTRY_ENVIRONMENT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db()
        logger.info("Database ready")
        yield
        # Let in-flight event handlers (job projection) finish
        await get_event_publisher().drain()
        await engine.dispose()

    app = FastAPI(
        title="Contractor Documents API",
        description="Estimates, e-signatures, invoices and payments for contractors.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            # Public paths carry bearer tokens; log the route template only
            route = request.scope.get("route")
            path = getattr(route, "path", request.url.path)
            logger.info(f"{request.method} {path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
            return response

    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    for module in (estimates, invoices, clients, jobs, public):
        app.include_router(module.router, prefix=config.API_PREFIX)

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    return app
