from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..v1.schemas import HIGH_RISK, LOW_RISK, Pagination, PredictionInput, PredictionResult
from .fallback import assess_factors
from .recommendations import with_recommendations

MOCK_ID_PREFIX = "mock-"
SENTINEL_ID = "60d21b4667d0d8992e610c85"
MOCK_HISTORY_SIZE = 5


def mock_id_accepted(prediction_id: str) -> bool:
    return prediction_id.startswith(MOCK_ID_PREFIX) or prediction_id == SENTINEL_ID


class MockStoreSynthesizer:
    """
    Builds non-persisted records shaped like stored ones, for when the
    store is unreachable. Nothing here is remembered between calls.
    """

    def __init__(self, rng: random.Random, clock: Callable[[], datetime]):
        self.rng = rng
        self.clock = clock

    def _stamp(self, now: datetime) -> int:
        return int(now.timestamp() * 1000)

    def created(self, input_data: dict, result: dict) -> dict:
        now = self.clock()
        return {
            "id": f"{MOCK_ID_PREFIX}{self._stamp(now)}",
            "inputData": input_data,
            "result": result,
            "createdAt": now,
        }

    def _random_input(self) -> PredictionInput:
        rng = self.rng
        return PredictionInput.model_validate({
            "gender": rng.choice(["Male", "Female"]),
            "age": 25 + rng.randrange(40),
            "hypertension": rng.random() > 0.7,
            "heartDisease": rng.random() > 0.9,
            "smokingHistory": rng.choice(["never", "former", "current"]),
            "bmi": round(22 + rng.random() * 10, 1),
            "hbA1cLevel": round(4.5 + rng.random() * 3.5, 1),
            "bloodGlucoseLevel": 110 + rng.randrange(70),
        })

    def history(self, owner: str) -> tuple[List[dict], dict]:
        """
        Five records one day apart, newest first. Pagination is fixed and
        does not follow the requested page/limit.
        """
        now = self.clock()
        stamp = self._stamp(now)
        items = []
        for i in range(MOCK_HISTORY_SIZE):
            inp = self._random_input()
            result = with_recommendations(PredictionResult(
                prediction=HIGH_RISK if self.rng.random() > 0.5 else LOW_RISK,
                risk_score=self.rng.random(),
                details={"factors": assess_factors(inp)},
            ))
            items.append({
                "id": f"{MOCK_ID_PREFIX}{i}-{stamp}",
                "owner": owner,
                "inputData": inp.to_wire(),
                "result": result.to_wire(),
                "createdAt": now - timedelta(days=i),
            })
        pagination = Pagination(total=len(items), page=1, limit=10, pages=1)
        return items, pagination.model_dump()

    def lookup(self, prediction_id: str, owner: str) -> Optional[dict]:
        if not mock_id_accepted(prediction_id):
            return None
        return {
            "id": prediction_id,
            "owner": owner,
            "inputData": {
                "gender": "Female",
                "age": 45,
                "hypertension": False,
                "heartDisease": False,
                "smokingHistory": "never",
                "bmi": 24.5,
                "hbA1cLevel": 6.8,
                "bloodGlucoseLevel": 140,
            },
            "result": {
                "prediction": HIGH_RISK,
                "riskScore": 0.75,
                "details": {
                    "factors": {
                        "bloodGlucoseLevel": "Normal",
                        "hbA1cLevel": "Elevated",
                        "bmi": "Normal",
                        "hypertension": "Absent",
                        "heartDisease": "Absent",
                    },
                },
            },
            "createdAt": self.clock(),
        }
