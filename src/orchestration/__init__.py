"""Run orchestration for the orchestrator service.

Modules:
- clients: AcquireClient, PredictClient and the tagged HopResult
- saga: RunSaga sequencing the acquire and predict hops
"""

__all__: list[str] = []
