from __future__ import annotations

from typing import Any, Optional

import pydantic

from src.config.messages import message
from ..errors import ValidationError
from ..v1.schemas import FIELD_CHOICES, PredictionInput

# Fields the caller may leave out; the model estimates from the rest
OPTIONAL_FIELDS = frozenset({"hypertension", "hbA1cLevel", "bloodGlucoseLevel"})

NUMBER_ERRORS = frozenset({
    "float_type", "float_parsing", "finite_number", "int_type", "int_parsing", "int_from_float",
})
BOOLEAN_ERRORS = frozenset({"bool_type", "bool_parsing"})
OBJECT_ERRORS = frozenset({"model_type", "model_attributes_type", "dict_type"})


def describe_error(err: dict, locale: Optional[str] = None) -> tuple[str, str]:
    """Render one pydantic error as ('field', '"field" reason')."""
    loc = err.get("loc") or ()
    field = str(loc[0]) if loc else "value"
    kind = err.get("type", "")

    if kind == "missing":
        reason = message("required", locale)
    elif kind == "literal_error":
        reason = message("choice", locale, choices=", ".join(FIELD_CHOICES.get(field, [])))
    elif kind in NUMBER_ERRORS:
        reason = message("number", locale)
    elif kind in BOOLEAN_ERRORS:
        reason = message("boolean", locale)
    elif kind == "extra_forbidden":
        reason = message("unknown", locale)
    elif kind in OBJECT_ERRORS:
        field = "value"
        reason = message("object", locale)
    else:
        reason = message("invalid", locale)
    return field, f'"{field}" {reason}'


def validate_prediction_input(raw: Any, locale: Optional[str] = None) -> PredictionInput:
    """
    Validate a raw request body. Only the first violation is reported.
    """
    try:
        return PredictionInput.model_validate(raw)
    except pydantic.ValidationError as e:
        field, text = describe_error(e.errors()[0], locale)
        if field in OPTIONAL_FIELDS:
            text += message("optional_hint", locale)
        raise ValidationError(text) from e
