from __future__ import annotations
from typing import Optional, Literal, Dict, List
from pydantic import BaseModel, ConfigDict, Field


Gender = Literal["Male", "Female"]
SmokingHistory = Literal["never", "former", "current"]
RiskLabel = Literal["High Risk", "Low Risk"]

HIGH_RISK: RiskLabel = "High Risk"
LOW_RISK: RiskLabel = "Low Risk"

# Allowed values per wire field, used when rendering validation messages
FIELD_CHOICES: Dict[str, List[str]] = {
    "gender": ["Male", "Female"],
    "smokingHistory": ["never", "former", "current"],
}


class PredictionInput(BaseModel):
    # non-finite numbers cannot be rendered back as JSON
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    gender: Gender
    age: float
    hypertension: bool = False
    heart_disease: bool = Field(..., alias="heartDisease")
    smoking_history: SmokingHistory = Field(..., alias="smokingHistory")
    bmi: float

    # Optional labs; the model imputes them when absent
    hba1c_level: Optional[float] = Field(None, alias="hbA1cLevel")
    blood_glucose_level: Optional[float] = Field(None, alias="bloodGlucoseLevel")

    def to_wire(self) -> Dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Recommendations(BaseModel):
    lifestyle: List[str]
    monitoring: List[str]
    consultation: List[str]


class ResultDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    factors: Dict[str, str] = Field(default_factory=dict)


class PredictionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prediction: RiskLabel
    risk_score: float = Field(..., alias="riskScore", ge=0.0, le=1.0)
    details: ResultDetails = Field(default_factory=ResultDetails)
    recommendations: Optional[Recommendations] = None

    def to_wire(self) -> Dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
