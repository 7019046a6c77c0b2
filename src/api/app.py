from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from src.config.settings import (
    LOG_LEVEL,
    MODEL_DIR,
    RISK_THRESHOLD,
    MOCK_SEED,
    EXPOSE_ERROR_DETAILS,
    CORS_ORIGINS,
    MAX_BODY_BYTES,
)
from src.db.base import Base
from src.db.models import utcnow
from src.db.session import engine
from . import envelope
from .errors import ApiError
from .services.model_registry import ModelRegistry, ModelSpec
from .services.validation import describe_error

# Ensure .env is loaded before we read settings/environment-dependent behavior
load_dotenv()

logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger("risk-api")


def create_registry() -> ModelRegistry:
    model_dir = Path(MODEL_DIR)
    specs = [
        ModelSpec(
            name="diabetes",
            version="diabetes_logreg_calibrated",
            model_path=model_dir / "diabetes_model.joblib",
            feature_list_path=model_dir / "feature_list.json",
        ),
    ]
    reg = ModelRegistry(specs, threshold=RISK_THRESHOLD)
    reg.load_all()
    return reg


def init_db() -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        # Requests still get served in mock mode
        logger.warning("database_init_failed url=%s error=%s", engine.url, e)


class MaxBodySizeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        cl = request.headers.get("content-length")
        if cl is not None:
            try:
                if int(cl) > MAX_BODY_BYTES:
                    return envelope.error("Request body too large", 413)
            except ValueError:
                pass
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Diabetes Risk Prediction API", version="1.0.0", lifespan=lifespan)

# ---- CORS (must be added BEFORE include_router) ----
origins = [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]
if not origins:
    # Dev fallback so preflight never fails silently if env didn't load
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],   # enables OPTIONS preflight handling
    allow_headers=["*"],
)

app.add_middleware(MaxBodySizeMiddleware)

# Load models once at startup
registry = create_registry()

# One random source for fallback and mock data; seed it for reproducible output
rng = random.Random(MOCK_SEED)


def get_registry(request: Request) -> ModelRegistry:
    # registry is global for now; request arg makes it usable as a dependency
    return registry


def get_rng() -> random.Random:
    return rng


def get_clock() -> Callable[[], datetime]:
    return utcnow


# ---- Consistent error responses ----
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return envelope.error(exc.message, exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return envelope.error(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    err = dict(exc.errors()[0])
    if err.get("type") == "json_invalid":
        return envelope.error("Invalid JSON payload", 400)
    loc = tuple(err.get("loc") or ())
    if loc and loc[0] in ("body", "query", "path", "header"):
        err["loc"] = loc[1:]
    _, message = describe_error(err)
    return envelope.error(message, 400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error")
    message = str(exc) if EXPOSE_ERROR_DETAILS else "Internal server error"
    return envelope.error(message, 500)


# Import routes AFTER registry/get_registry exist (avoids circular import headaches)
from .v1.routes import router as v1_router  # noqa: E402

app.include_router(v1_router)


@app.get("/")
def root():
    return {"message": "Use /docs", "version": app.version}
