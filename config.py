import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.environ.get("LEDGER_CONFIG_FILE", os.path.join(ROOT_PATH, "env.yaml"))

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./ledger.db")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))

    # Profit rates applied to discharges, keyed by giro operation type
    DEFAULT_PROFIT_RATE = str(data.get("DEFAULT_PROFIT_RATE", "0.05"))
    OPERATION_PROFIT_RATES = data.get(
        "OPERATION_PROFIT_RATES",
        {"TRANSFER": "0.05", "RECHARGE": "0", "MOBILE_PAYMENT": "0"},
    ) or {}

    # Per-account lock wait before answering CONCURRENCY_CONFLICT
    LEDGER_LOCK_TIMEOUT_SECONDS = float(data.get("LEDGER_LOCK_TIMEOUT_SECONDS", 5.0))

    # Committed mutations are POSTed here when set
    LEDGER_EVENTS_WEBHOOK = data.get("LEDGER_EVENTS_WEBHOOK", None)

    # Replay auditor worker
    AUDIT_ENABLED = bool(data.get("AUDIT_ENABLED", True))
    AUDIT_INTERVAL_SECONDS = data.get("AUDIT_INTERVAL_SECONDS", 86400)  # Daily
