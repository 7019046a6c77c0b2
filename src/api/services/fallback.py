from __future__ import annotations

import logging
import random
from typing import Dict

from ..v1.schemas import (
    HIGH_RISK,
    LOW_RISK,
    PredictionInput,
    PredictionResult,
    Recommendations,
)

logger = logging.getLogger("risk-api")

GLUCOSE_HIGH_MG_DL = 140
HBA1C_ELEVATED_PERCENT = 6.5
BMI_OVERWEIGHT = 25


def static_recommendations() -> Recommendations:
    return Recommendations(
        lifestyle=[
            "Maintain a balanced diet rich in vegetables and fruits",
            "Regular physical activity (at least 150 minutes per week)",
        ],
        monitoring=["Regular blood glucose monitoring"],
        consultation=["Follow up with your primary care physician"],
    )


def assess_factors(inp: PredictionInput) -> Dict[str, str]:
    glucose = inp.blood_glucose_level
    hba1c = inp.hba1c_level
    return {
        "bloodGlucoseLevel": "High" if glucose is not None and glucose > GLUCOSE_HIGH_MG_DL else "Normal",
        "hbA1cLevel": "Elevated" if hba1c is not None and hba1c > HBA1C_ELEVATED_PERCENT else "Normal",
        "bmi": "Overweight" if inp.bmi > BMI_OVERWEIGHT else "Normal",
        "hypertension": "Present" if inp.hypertension else "Absent",
        "heartDisease": "Present" if inp.heart_disease else "Absent",
    }


class FallbackSynthesizer:
    """
    Stand-in for the inference engine. Label and score are drawn from the
    injected random source; factors follow fixed clinical thresholds.
    """

    def __init__(self, rng: random.Random):
        self.rng = rng

    def synthesize(self, inp: PredictionInput) -> PredictionResult:
        result = PredictionResult(
            prediction=HIGH_RISK if self.rng.random() > 0.5 else LOW_RISK,
            risk_score=self.rng.random(),
            details={"factors": assess_factors(inp)},
            recommendations=static_recommendations(),
        )
        logger.info("fallback_prediction pred=%s risk=%.3f", result.prediction, result.risk_score)
        return result
