from __future__ import annotations

import logging
import os

from pydantic import BaseModel


class Settings(BaseModel):
    API_BASE: str = os.getenv("ORDERWATCH_API_BASE", "http://localhost:8080/api")
    POLL_INTERVAL_MS: int = int(os.getenv("ORDERWATCH_POLL_INTERVAL_MS", "3000"))
    REQUEST_TIMEOUT_S: float = float(os.getenv("ORDERWATCH_REQUEST_TIMEOUT_S", "10.0"))
    LOG_LEVEL: str = os.getenv("ORDERWATCH_LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install a basic stderr handler. The library itself never calls this."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
