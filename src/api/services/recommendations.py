from __future__ import annotations

from ..v1.schemas import HIGH_RISK, PredictionResult, Recommendations
from .fallback import static_recommendations


def compose_recommendations(result: PredictionResult) -> Recommendations:
    if result.recommendations is not None:
        return result.recommendations

    recs = static_recommendations()
    factors = result.details.factors

    if result.prediction == HIGH_RISK:
        recs.lifestyle.append("Limit refined sugar and sugary drinks")
        recs.consultation.append("Consider a consultation with an endocrinologist")
    if factors.get("bmi") == "Overweight":
        recs.lifestyle.append("Aim for gradual weight reduction (5-7% of body weight)")
    if factors.get("smokingHistory") == "Present":
        recs.lifestyle.append("Stop smoking; ask your clinician about cessation support")
    if factors.get("hbA1cLevel") == "Elevated":
        recs.monitoring.append("Check HbA1c every 3 months")
    if factors.get("bloodGlucoseLevel") == "High":
        recs.monitoring.append("Repeat a fasting blood glucose test")
    if factors.get("hypertension") == "Present":
        recs.monitoring.append("Monitor blood pressure regularly")
    return recs


def with_recommendations(result: PredictionResult) -> PredictionResult:
    """Return the result with a recommendations block attached. Never fails."""
    return result.model_copy(update={"recommendations": compose_recommendations(result)})
