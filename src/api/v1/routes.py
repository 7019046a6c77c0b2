from __future__ import annotations

import random
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import APIRouter, Body, Depends, Header
from sqlalchemy.orm import Session

from src.config.settings import STORE_ENABLED, EXPOSE_ERROR_DETAILS, MESSAGE_LOCALE
from src.db.deps import get_db
from ..app import get_registry, get_rng, get_clock
from ..errors import AuthenticationError
from ..services.fallback import FallbackSynthesizer
from ..services.mock_store import MockStoreSynthesizer
from ..services.model_registry import ModelRegistry
from ..services.persistence import SqlPredictionStore, StoreHandle
from .handlers import PredictionHandlers

router = APIRouter(tags=["predictions"])


def get_current_user(x_user_id: Optional[str] = Header(default=None, alias="X-User-ID")) -> str:
    # identity is verified upstream; we only require that it was forwarded
    if x_user_id is None or not x_user_id.strip():
        raise AuthenticationError("Missing authentication credentials")
    return x_user_id.strip()


def get_store(db: Session = Depends(get_db)) -> StoreHandle:
    return SqlPredictionStore(db, enabled=STORE_ENABLED)


def get_handlers(
    registry: ModelRegistry = Depends(get_registry),
    store: StoreHandle = Depends(get_store),
    rng: random.Random = Depends(get_rng),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> PredictionHandlers:
    return PredictionHandlers(
        gateway=registry,
        store=store,
        fallback=FallbackSynthesizer(rng),
        mock=MockStoreSynthesizer(rng, clock),
        expose_error_details=EXPOSE_ERROR_DETAILS,
        locale=MESSAGE_LOCALE,
    )


@router.get("/health")
def health(
    registry: ModelRegistry = Depends(get_registry),
    store: StoreHandle = Depends(get_store),
):
    return {
        "status": "ok",
        "store_available": store.is_available(),
        "models": registry.list_models(),
    }


@router.post("/predictions", status_code=201)
def create_prediction(
    payload: Any = Body(None),
    owner: str = Depends(get_current_user),
    handlers: PredictionHandlers = Depends(get_handlers),
):
    return handlers.create(owner, payload)


@router.get("/predictions")
def list_predictions(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    owner: str = Depends(get_current_user),
    handlers: PredictionHandlers = Depends(get_handlers),
):
    """
    Prediction history for the caller, newest first.
    """
    return handlers.list(owner, page, limit)


@router.get("/predictions/{prediction_id}")
def get_prediction(
    prediction_id: str,
    owner: str = Depends(get_current_user),
    handlers: PredictionHandlers = Depends(get_handlers),
):
    return handlers.get(owner, prediction_id)


@router.delete("/predictions/{prediction_id}")
def delete_prediction(
    prediction_id: str,
    owner: str = Depends(get_current_user),
    handlers: PredictionHandlers = Depends(get_handlers),
):
    return handlers.delete(owner, prediction_id)
