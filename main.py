"""
Maker Biweekly Update -- Application Entry Point.

Starts the FastAPI server via uvicorn.

Usage:
    python main.py              # Development (reload enabled)
    uvicorn main:app --host 0.0.0.0 --port 8000  # Production
"""

from __future__ import annotations

import os

import uvicorn

from src.api import create_app
from src.config.settings import Settings
from src.lib.logging import setup_logging

settings = Settings.from_env()
setup_logging(dev_mode=settings.dev_mode, log_level=settings.log_level)

app = create_app(settings)


if __name__ == "__main__":
    port = int(os.getenv("MAKER_PORT", "8000"))
    host = os.getenv("MAKER_HOST", "0.0.0.0")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=settings.dev_mode,
        log_level=settings.log_level.lower(),
    )
