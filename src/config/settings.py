import os
from dotenv import load_dotenv
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


ENV = os.getenv("ENV", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///risk_api.db")
STORE_ENABLED = _flag("STORE_ENABLED", "true")
MODEL_DIR = os.getenv("MODEL_DIR", "data_processed/models")
RISK_THRESHOLD = float(os.getenv("RISK_THRESHOLD", "0.5"))
MOCK_SEED = int(os.getenv("MOCK_SEED")) if os.getenv("MOCK_SEED") else None
MESSAGE_LOCALE = os.getenv("MESSAGE_LOCALE", "en")
EXPOSE_ERROR_DETAILS = _flag("EXPOSE_ERROR_DETAILS", "true")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", "200000"))
