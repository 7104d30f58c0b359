"""Request and response models for the forecast services.

Modules:
- requests: PredictionRequest, PredictionMeta, FeatureRecord
- responses: PredictionResult, readiness/health bodies, SagaResult
"""

__all__: list[str] = []
