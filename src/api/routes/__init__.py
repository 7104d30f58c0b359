"""API route handlers for the forecast services.

Routes:
- health: /health, /ready
- predict: /predict
- run: /run (orchestrator)
"""

__all__: list[str] = []
