"""Ordered validation of /predict payloads.

The checks run in a fixed order and the first failure wins:

1. features present (not null, "", 0 or false)
2. meta present and an object
3. meta.featureCount equals D
4. features is a list of exactly D finite numbers

Checks 3 and 4 are deliberately independent: a caller that reports the
right count but sends the wrong vector still fails on 4.
"""

from __future__ import annotations

import math
from typing import Any

from src.core.exceptions import ValidationError
from src.models.requests import PredictionMeta, PredictionRequest


MSG_MISSING_FEATURES = "Missing features"
MSG_MISSING_META = "Missing meta object"


def is_number(value: Any) -> bool:
    """JSON number check; bools and non-finite floats are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Integers beyond float range
        return False


def validate_prediction_payload(payload: Any, input_dim: int) -> PredictionRequest:
    """Validate a decoded JSON body against the model input dimension.

    Args:
        payload: Decoded request body; anything but a dict counts as empty.
        input_dim: Model input dimension D.

    Returns:
        An immutable PredictionRequest.

    Raises:
        ValidationError: On the first failed check.
    """
    body = payload if isinstance(payload, dict) else {}

    features = body.get("features")
    # Empty strings, zero and false count as missing; empty arrays do not
    if features is None or (not isinstance(features, (list, dict)) and not features):
        raise ValidationError(MSG_MISSING_FEATURES, field="features")

    meta = body.get("meta")
    if not isinstance(meta, dict):
        raise ValidationError(MSG_MISSING_META, field="meta")

    feature_count = meta.get("featureCount")
    if not is_number(feature_count) or feature_count != input_dim:
        raise ValidationError(
            f"featureCount must be {input_dim}, received {feature_count}",
            field="meta.featureCount",
            expected=input_dim,
            received=feature_count,
        )

    if (
        not isinstance(features, list)
        or len(features) != input_dim
        or not all(is_number(value) for value in features)
    ):
        raise ValidationError(
            f"features must be an array of {input_dim} numbers",
            field="features",
            expected=input_dim,
            received=len(features) if isinstance(features, list) else None,
        )

    source = meta.get("source")
    return PredictionRequest(
        features=tuple(float(value) for value in features),
        meta=PredictionMeta(
            featureCount=input_dim,
            dataId=meta.get("dataId"),
            source=None if source is None else str(source),
            correlationId=meta.get("correlationId"),
        ),
    )
