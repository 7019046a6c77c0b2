from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, List
import json
import logging

import joblib
import pandas as pd

from ..errors import InferenceFailure
from ..v1.schemas import HIGH_RISK, LOW_RISK, PredictionInput, PredictionResult
from .fallback import assess_factors

logger = logging.getLogger("risk-api")

NUMERIC_FEATURES = ["age", "hypertension", "heartDisease", "bmi", "hbA1cLevel", "bloodGlucoseLevel"]
CATEGORICAL_FEATURES = ["gender", "smokingHistory"]

AGE_ELEVATED_YEARS = 45


@dataclass(frozen=True)
class ModelSpec:
    name: str                     # e.g., "diabetes"
    version: str                  # e.g., "diabetes_v1"
    model_path: Path              # joblib
    feature_list_path: Path       # json


class ModelBundle:
    """
    Holds loaded artifacts for one model.
    """
    def __init__(self, spec: ModelSpec):
        self.spec = spec
        self.model = joblib.load(spec.model_path)
        self.feature_list: List[str] = json.loads(spec.feature_list_path.read_text(encoding="utf-8"))

    def build_X(self, payload: dict) -> pd.DataFrame:
        # One-row feature frame with exact model columns
        row = {col: payload.get(col, None) for col in self.feature_list}
        X = pd.DataFrame([row], columns=self.feature_list)
        for col in X.columns:
            if col in NUMERIC_FEATURES:
                X[col] = X[col].astype(float)  # bools -> 0/1, missing -> NaN
        return X

    def predict_proba(self, payload: dict) -> float:
        X = self.build_X(payload)
        # positive class = diabetic
        return float(self.model.predict_proba(X)[0][1])


class ModelRegistry:
    def __init__(self, specs: List[ModelSpec], threshold: float = 0.5):
        self.specs = {s.name: s for s in specs}
        self.bundles: Dict[str, ModelBundle] = {}
        self.threshold = threshold

    def load_all(self):
        for name, spec in self.specs.items():
            try:
                self.bundles[name] = ModelBundle(spec)
            except Exception as e:
                # leave it unloaded; predictions for it go to the fallback
                logger.warning("model_load_failed name=%s path=%s error=%s", name, spec.model_path, e)

    def list_models(self) -> List[dict]:
        out = []
        for name, spec in self.specs.items():
            out.append({
                "name": name,
                "version": spec.version,
                "model_path": str(spec.model_path),
                "loaded": name in self.bundles,
                "num_features": len(self.bundles[name].feature_list) if name in self.bundles else None,
            })
        return out

    def get(self, name: str) -> ModelBundle:
        if name not in self.bundles:
            raise KeyError(f"Unknown model '{name}'. Available: {list(self.bundles.keys())}")
        return self.bundles[name]

    def make_prediction(self, inp: PredictionInput, name: str = "diabetes") -> PredictionResult:
        """
        Score one patient with the named model.

        Any failure (model not loaded, feature mismatch, estimator error) is
        raised as InferenceFailure.
        """
        try:
            bundle = self.get(name)
            p = bundle.predict_proba(inp.to_wire())
        except Exception as e:
            raise InferenceFailure(str(e)) from e

        factors = assess_factors(inp)
        factors["age"] = "Elevated" if inp.age > AGE_ELEVATED_YEARS else "Normal"
        factors["smokingHistory"] = "Present" if inp.smoking_history == "current" else "Absent"

        return PredictionResult(
            prediction=HIGH_RISK if p >= self.threshold else LOW_RISK,
            risk_score=min(max(p, 0.0), 1.0),
            details={"factors": factors, "modelVersion": bundle.spec.version},
        )
