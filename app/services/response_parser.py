from __future__ import annotations

import json
import logging
import math

from app.core.errors import ResponseShapeError
from app.models.finance import ModelResponse

logger = logging.getLogger(__name__)

INVALID_JSON_FALLBACK = "Failed to generate a valid response. Please try again."
INVALID_STRUCTURE_FALLBACK = "The response structure was invalid. Please try again."

REQUIRED_KEYS = ("explanation", "chartData")


def _reject_constant(name: str) -> float:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(literal: str) -> float | None:
    # Out-of-range literals such as 1e400 overflow to inf; they serialize as null.
    value = float(literal)
    return value if math.isfinite(value) else None


def _load(text: str) -> dict:
    try:
        parsed = json.loads(
            text, parse_constant=_reject_constant, parse_float=_finite_float
        )
    except (TypeError, ValueError) as e:
        raise ResponseShapeError(
            f"Failed to parse JSON: {e}", fallback=INVALID_JSON_FALLBACK
        ) from e

    if not isinstance(parsed, dict):
        raise ResponseShapeError(
            f"Expected a JSON object, got {type(parsed).__name__}",
            fallback=INVALID_STRUCTURE_FALLBACK,
        )

    missing = [key for key in REQUIRED_KEYS if key not in parsed]
    if missing:
        raise ResponseShapeError(
            f"Missing keys: {', '.join(missing)}",
            fallback=INVALID_STRUCTURE_FALLBACK,
        )
    return parsed


def parse_model_response(text: str | None) -> ModelResponse:
    """Turn the raw completion text into an explanation and chart payload.

    Only the presence of the two top-level keys is checked. Whatever the
    model put inside ``chartData`` is handed back untouched. Unusable output
    never raises: it is replaced by one of the fixed fallback explanations
    with ``chartData`` set to ``None``.
    """
    try:
        parsed = _load(text or "")
    except ResponseShapeError as e:
        logger.error("Unusable model response: %s", e.message)
        return ModelResponse(explanation=e.fallback, chart_data=None)

    return ModelResponse(
        explanation=parsed["explanation"],
        chart_data=parsed["chartData"],
    )
