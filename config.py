import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./documents.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Owner identity arrives in X-Owner-Id; local development may skip it
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    DEV_OWNER_ID = data.get("DEV_OWNER_ID", "dev-owner")

    # Base URL of the client-facing site hosting /view-estimate and /view-invoice
    PUBLIC_BASE_URL = data.get("PUBLIC_BASE_URL", "http://localhost:3000")

    # Outbound email relay
    NOTIFICATION_WEBHOOK_URL = data.get("NOTIFICATION_WEBHOOK_URL", None)
    NOTIFICATION_TIMEOUT_SECONDS = data.get("NOTIFICATION_TIMEOUT_SECONDS", 10.0)
    NOTIFICATION_MAX_RETRIES = data.get("NOTIFICATION_MAX_RETRIES", 2)

    # Card payments
    PAYMENT_PROCESSOR_URL = data.get("PAYMENT_PROCESSOR_URL", "https://api.stripe.com")
    PAYMENT_PROCESSOR_API_KEY = data.get("PAYMENT_PROCESSOR_API_KEY", "")
    PAYMENT_CURRENCY = data.get("PAYMENT_CURRENCY", "usd")
    PAYMENT_TIMEOUT_SECONDS = data.get("PAYMENT_TIMEOUT_SECONDS", 15.0)
    PAYMENT_MAX_RETRIES = data.get("PAYMENT_MAX_RETRIES", 2)
    PAYMENT_RETRY_BACKOFF_SECONDS = data.get("PAYMENT_RETRY_BACKOFF_SECONDS", 1.0)

    # Pending payment reconciliation worker
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 300)
    RECONCILIATION_BATCH_SIZE = data.get("RECONCILIATION_BATCH_SIZE", 100)

    INVOICE_NUMBER_MAX_ATTEMPTS = data.get("INVOICE_NUMBER_MAX_ATTEMPTS", 5)
