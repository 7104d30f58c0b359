"""Services for the predict process.

Services:
- model_host: ModelState machine, TensorScope, ModelHost
- artifacts: model artifact retrieval (HTTP or filesystem)
- validation: ordered /predict payload checks
"""

__all__: list[str] = []
