"""
Name: LisaDocs ASGI Entrypoint (app.main)

Responsibilities:
  - Re-export the FastAPI app built in app.api.main
  - Give uvicorn a stable target: `uvicorn app.main:app`

Notes/Constraints:
  - No configuration or IO here; wiring lives in app.api.main and app.container
"""

from app.api.main import app

__all__ = ["app"]
