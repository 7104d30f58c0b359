"""energy-forecast-service: Energy demand inference gateway and run saga.

This package provides the predict service (ONNX Runtime model host behind a
validating HTTP gateway) and the orchestrator that chains the acquisition
service into predict.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
