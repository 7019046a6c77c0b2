from __future__ import annotations

import logging
import math
from typing import Any, Optional, Protocol

from fastapi.responses import JSONResponse

from .. import envelope
from ..errors import ApiError, NotFoundError
from ..services.fallback import FallbackSynthesizer
from ..services.mock_store import MockStoreSynthesizer
from ..services.persistence import StoreHandle
from ..services.recommendations import with_recommendations
from ..services.validation import validate_prediction_input
from .schemas import Pagination, PredictionInput, PredictionResult

logger = logging.getLogger("risk-api")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class InferenceGateway(Protocol):
    def make_prediction(self, inp: PredictionInput) -> PredictionResult: ...


class PredictionHandlers:
    """
    Per-request orchestration for the prediction endpoints.

    Inference outages are answered by the fallback and store outages by the
    mock synthesizer, so only validation, lookup and unexpected errors ever
    reach the caller as error envelopes.
    """

    def __init__(
        self,
        gateway: InferenceGateway,
        store: StoreHandle,
        fallback: FallbackSynthesizer,
        mock: MockStoreSynthesizer,
        expose_error_details: bool = True,
        locale: Optional[str] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.fallback = fallback
        self.mock = mock
        self.expose_error_details = expose_error_details
        self.locale = locale

    def _failure(self, op: str, exc: Exception) -> JSONResponse:
        if isinstance(exc, ApiError):
            logger.info("%s rejected status=%s message=%s", op, exc.status_code, exc.message)
            return envelope.error(exc.message, exc.status_code)
        logger.exception("%s failed", op)
        message = str(exc) if self.expose_error_details else "Internal server error"
        return envelope.error(message, 500)

    def _infer(self, inp: PredictionInput) -> PredictionResult:
        try:
            # plain dicts are accepted as long as they have the result shape
            result = PredictionResult.model_validate(self.gateway.make_prediction(inp))
        except Exception as e:
            logger.warning("inference_failed error=%s; using fallback", e)
            result = self.fallback.synthesize(inp)
        return with_recommendations(result)

    def create(self, owner: str, payload: Any) -> JSONResponse:
        try:
            inp = validate_prediction_input(payload, self.locale)
            result = self._infer(inp)
            input_data, result_data = inp.to_wire(), result.to_wire()

            if not self.store.is_available():
                record = self.mock.created(input_data, result_data)
                logger.info("create_prediction owner=%s id=%s mock=true", owner, record["id"])
                return envelope.success(record, "Prediction created successfully", 201, mock=True)

            stored = self.store.create(owner, input_data, result_data)
            logger.info(
                "create_prediction owner=%s id=%s pred=%s risk=%.3f",
                owner, stored["id"], result.prediction, result.risk_score,
            )
            data = {k: stored[k] for k in ("id", "inputData", "result", "createdAt")}
            return envelope.success(data, "Prediction created successfully", 201)
        except Exception as e:
            return self._failure("create_prediction", e)

    def list(self, owner: str, page: Optional[int] = None, limit: Optional[int] = None) -> JSONResponse:
        try:
            page = max(1, page or DEFAULT_PAGE)
            limit = max(1, min(limit or DEFAULT_LIMIT, MAX_LIMIT))

            if not self.store.is_available():
                items, pagination = self.mock.history(owner)
                logger.info("list_predictions owner=%s mock=true", owner)
                return envelope.success({"predictions": items, "pagination": pagination})

            items, total = self.store.find_by_owner(owner, page, limit)
            pagination = Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit))
            logger.info("list_predictions owner=%s page=%d limit=%d total=%d", owner, page, limit, total)
            return envelope.success({"predictions": items, "pagination": pagination.model_dump()})
        except Exception as e:
            return self._failure("list_predictions", e)

    def get(self, owner: str, prediction_id: str) -> JSONResponse:
        try:
            if not self.store.is_available():
                record = self.mock.lookup(prediction_id, owner)
            else:
                record = self.store.find_one(prediction_id, owner)
            if record is None:
                raise NotFoundError("Prediction not found")
            return envelope.success({"prediction": record})
        except Exception as e:
            return self._failure("get_prediction", e)

    def delete(self, owner: str, prediction_id: str) -> JSONResponse:
        try:
            if not self.store.is_available():
                if self.mock.lookup(prediction_id, owner) is None:
                    raise NotFoundError("Prediction not found")
                logger.info("delete_prediction owner=%s id=%s mock=true", owner, prediction_id)
                return envelope.success(message="Prediction deleted successfully", mock=True)

            if self.store.delete_one(prediction_id, owner) is None:
                raise NotFoundError("Prediction not found or you don't have permission to delete it")
            logger.info("delete_prediction owner=%s id=%s", owner, prediction_id)
            return envelope.success(message="Prediction deleted successfully")
        except Exception as e:
            return self._failure("delete_prediction", e)
