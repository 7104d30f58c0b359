"""Tests for the linear JSON scoring backend."""

import json

import pytest

from src.core.exceptions import ModelSignatureError
from src.providers.linear import LinearBackend


# =============================================================================
# Constants (S1192: Avoid duplicated string literals)
# =============================================================================

WEIGHTS = [0.5, 0.25, 0.1, 0.05, 0.0, 0.0, 0.0]
FEATURES = [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0]


def _artifact(**overrides: object) -> bytes:
    document = {
        "inputName": "features",
        "outputName": "demand",
        "weights": WEIGHTS,
        "bias": 1.0,
    }
    document.update(overrides)
    return json.dumps(document).encode()


class TestLinearBackendLoad:
    """Test signature resolution from the JSON artifact."""

    def test_signature_from_artifact(self) -> None:
        signature = LinearBackend().load(_artifact())

        assert signature.input_name == "features"
        assert signature.output_name == "demand"
        assert signature.input_dim == len(WEIGHTS)

    def test_names_default_when_omitted(self) -> None:
        signature = LinearBackend().load(json.dumps({"weights": [1.0, 2.0]}).encode())

        assert signature.input_name == "input"
        assert signature.output_name == "output"
        assert signature.input_dim == 2

    def test_empty_weights_rejected(self) -> None:
        with pytest.raises(ModelSignatureError):
            LinearBackend().load(_artifact(weights=[]))

    def test_non_json_rejected(self) -> None:
        with pytest.raises(ModelSignatureError):
            LinearBackend().load(b"\x08\x01not-json")


class TestLinearBackendScoring:
    """Test allocate / execute / extract."""

    def test_scores_dot_product_plus_bias(self) -> None:
        backend = LinearBackend()
        signature = backend.load(_artifact())

        inputs = backend.allocate(FEATURES, signature)
        outputs = backend.execute(inputs, signature)

        assert inputs.shape == (1, 7)
        assert backend.extract(outputs[0]) == pytest.approx(1.6, rel=1e-5)

    def test_negative_result_is_returned_unclamped(self) -> None:
        backend = LinearBackend()
        signature = backend.load(_artifact(bias=-10.0))

        outputs = backend.execute(backend.allocate(FEATURES, signature), signature)

        assert backend.extract(outputs[0]) == pytest.approx(-9.4, rel=1e-5)

    def test_execute_before_load_raises(self) -> None:
        from src.providers.base import ModelSignature

        backend = LinearBackend()
        signature = ModelSignature(input_name="x", input_dim=7, output_name="y")

        with pytest.raises(RuntimeError, match="not loaded"):
            backend.execute(backend.allocate(FEATURES, signature), signature)
