"""
Service configuration.

Every setting is read from a ``PQ_*`` environment variable and falls back to
a default, so the service starts with no configuration at all.
"""

import os
import sys
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field, field_validator

from algorithms.priority_queue import PriorityQueue

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ServiceConfig(BaseModel):
    service_name: str = "priority-scheduler"
    initial_capacity: int = Field(default=PriorityQueue.INITIAL_CAPACITY, ge=1)
    aging_threshold: float = Field(default=5.0, ge=0)
    aging_step: float = Field(default=1.0, gt=0)
    aging_floor: Optional[float] = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        values = {
            "service_name": os.getenv("PQ_SERVICE_NAME"),
            "initial_capacity": os.getenv("PQ_INITIAL_CAPACITY"),
            "aging_threshold": os.getenv("PQ_AGING_THRESHOLD"),
            "aging_step": os.getenv("PQ_AGING_STEP"),
            "aging_floor": os.getenv("PQ_AGING_FLOOR"),
            "log_level": os.getenv("PQ_LOG_LEVEL"),
        }
        # Unset (or blank) variables keep the model defaults
        return cls(**{k: v for k, v in values.items() if v not in (None, "")})


def configure_logging(level: str = "INFO"):
    """Replace loguru's default sink with a stderr sink at ``level``."""
    logger.remove()
    logger.configure(extra={"name": "-"})
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]} | {message}",
    )
