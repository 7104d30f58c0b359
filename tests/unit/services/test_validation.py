"""Tests for ordered /predict payload validation.

The first failing check wins:
features present -> meta object -> featureCount == D -> features array of D numbers
"""

from typing import Any

import pytest

from src.core.exceptions import ValidationError
from src.services.validation import (
    MSG_MISSING_FEATURES,
    MSG_MISSING_META,
    is_number,
    validate_prediction_payload,
)


# =============================================================================
# Constants (S1192: Avoid duplicated string literals)
# =============================================================================

D = 7
VECTOR = [0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5]


def _payload(features: Any = VECTOR, **meta: Any) -> dict[str, Any]:
    meta.setdefault("featureCount", D)
    return {"features": features, "meta": meta}


class TestIsNumber:
    """Test the JSON number predicate."""

    @pytest.mark.parametrize("value", [0, 1, -3, 2.5, 1e10])
    def test_numbers_accepted(self, value: Any) -> None:
        assert is_number(value)

    @pytest.mark.parametrize(
        "value", [True, False, None, "1", [1], float("nan"), float("inf")]
    )
    def test_non_numbers_rejected(self, value: Any) -> None:
        assert not is_number(value)

    @pytest.mark.parametrize("value", [10**400, -(10**400)])
    def test_integers_beyond_float_range_rejected(self, value: int) -> None:
        assert not is_number(value)


class TestValidationOrder:
    """Test that checks run in a fixed order."""

    def test_missing_features_wins_over_missing_meta(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_prediction_payload({}, D)

        assert exc_info.value.message == MSG_MISSING_FEATURES

    @pytest.mark.parametrize("payload", [None, [], "text", 42])
    def test_non_object_body_treated_as_empty(self, payload: Any) -> None:
        with pytest.raises(ValidationError, match=MSG_MISSING_FEATURES):
            validate_prediction_payload(payload, D)

    def test_null_features_counts_as_missing(self) -> None:
        with pytest.raises(ValidationError, match=MSG_MISSING_FEATURES):
            validate_prediction_payload({"features": None, "meta": {"featureCount": D}}, D)

    @pytest.mark.parametrize("features", ["", 0, 0.0, False])
    def test_falsy_scalar_features_count_as_missing(self, features: Any) -> None:
        with pytest.raises(ValidationError, match=MSG_MISSING_FEATURES):
            validate_prediction_payload(_payload(features=features), D)

    def test_empty_array_is_not_missing(self) -> None:
        with pytest.raises(ValidationError, match="array of 7 numbers"):
            validate_prediction_payload(_payload(features=[]), D)

    @pytest.mark.parametrize("meta", [None, "meta", [D], 7])
    def test_meta_must_be_object(self, meta: Any) -> None:
        body: dict[str, Any] = {"features": VECTOR}
        if meta is not None:
            body["meta"] = meta

        with pytest.raises(ValidationError) as exc_info:
            validate_prediction_payload(body, D)

        assert exc_info.value.message == MSG_MISSING_META
        assert exc_info.value.field == "meta"

    def test_meta_checked_before_feature_shape(self) -> None:
        with pytest.raises(ValidationError, match=MSG_MISSING_META):
            validate_prediction_payload({"features": "not-an-array"}, D)

    def test_feature_count_checked_before_feature_shape(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_prediction_payload(_payload(features=[1.0], featureCount=6), D)

        assert exc_info.value.field == "meta.featureCount"


class TestFeatureCount:
    """Test the declared featureCount check."""

    def test_mismatch_names_expected_and_received(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_prediction_payload(_payload(featureCount=6), D)

        error = exc_info.value
        assert error.message == "featureCount must be 7, received 6"
        assert error.expected == 7
        assert error.received == 6

    @pytest.mark.parametrize("count", [None, "7", True, 7.5])
    def test_non_matching_types_rejected(self, count: Any) -> None:
        with pytest.raises(ValidationError, match="featureCount must be 7"):
            validate_prediction_payload(_payload(featureCount=count), D)

    def test_missing_feature_count_rejected(self) -> None:
        with pytest.raises(ValidationError, match="received None"):
            validate_prediction_payload({"features": VECTOR, "meta": {}}, D)

    def test_integral_float_accepted(self) -> None:
        request = validate_prediction_payload(_payload(featureCount=7.0), D)

        assert request.meta.feature_count == D


class TestFeatureArray:
    """Test the features array check, independent of featureCount."""

    @pytest.mark.parametrize("features", [VECTOR[:6], VECTOR + [4.0], []])
    def test_wrong_length_rejected_even_with_correct_count(self, features: list[float]) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_prediction_payload(_payload(features=features), D)

        assert exc_info.value.message == "features must be an array of 7 numbers"
        assert exc_info.value.received == len(features)

    @pytest.mark.parametrize(
        "bad", ["1.0", None, True, [1.0], {"v": 1}]
    )
    def test_non_numeric_element_rejected(self, bad: Any) -> None:
        features = list(VECTOR)
        features[3] = bad

        with pytest.raises(ValidationError, match="array of 7 numbers"):
            validate_prediction_payload(_payload(features=features), D)

    def test_oversized_integer_element_rejected(self) -> None:
        features: list[Any] = list(VECTOR)
        features[0] = 10**400

        with pytest.raises(ValidationError, match="array of 7 numbers"):
            validate_prediction_payload(_payload(features=features), D)

    def test_oversized_feature_count_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_prediction_payload(_payload(featureCount=10**400), D)

        assert exc_info.value.field == "meta.featureCount"

    def test_non_array_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_prediction_payload(_payload(features={"0": 1.0}), D)

        assert exc_info.value.received is None


class TestValidPayload:
    """Test the request produced by a valid payload."""

    def test_returns_immutable_request(self) -> None:
        request = validate_prediction_payload(
            _payload(features=[1, 2, 3, 4, 5, 6, 7], dataId="abc", source="acquire"),
            D,
        )

        assert request.features == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0)
        assert request.meta.data_id == "abc"
        assert request.meta.source == "acquire"
        with pytest.raises(Exception):  # noqa: B017
            request.features = ()  # type: ignore[misc]

    def test_optional_meta_fields_default_to_none(self) -> None:
        request = validate_prediction_payload(_payload(), D)

        assert request.meta.data_id is None
        assert request.meta.source is None
        assert request.meta.correlation_id is None

    def test_correlation_id_passed_through(self) -> None:
        request = validate_prediction_payload(_payload(correlationId="corr-1"), D)

        assert request.meta.correlation_id == "corr-1"

    def test_unknown_fields_ignored(self) -> None:
        body = _payload(extra="ignored")
        body["other"] = {"nested": True}

        request = validate_prediction_payload(body, D)

        assert request.meta.feature_count == D
