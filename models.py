"""
Pydantic Models

Settings and result models shared by the lazy views and the collection helpers.
"""

import logging
import os
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class ExhaustionPolicy(str, Enum):
    """What an adaptor iterator does when advanced after it is exhausted"""
    STOP = "stop"      # raise StopIteration again
    RAISE = "raise"    # raise IteratorExhaustedError


class LazySettings(BaseModel):
    """Process-wide settings for lazy views"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    exhaustion_policy: ExhaustionPolicy = Field(
        ExhaustionPolicy.STOP,
        description="Behaviour of next() on an exhausted adaptor iterator"
    )
    log_level: str = Field(
        "INFO",
        description="Logging level name used by the demo entry point"
    )
    log_traversals: bool = Field(
        False,
        description="Log element counts whenever an adaptor iterator is exhausted"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate the level is one logging understands"""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "LazySettings":
        """Build settings from LAZYVIEWS_* environment variables, falling back to defaults"""
        values = {}
        policy = os.environ.get("LAZYVIEWS_EXHAUSTION_POLICY")
        if policy:
            values["exhaustion_policy"] = policy.strip().lower()
        level = os.environ.get("LAZYVIEWS_LOG_LEVEL")
        if level:
            values["log_level"] = level
        traversals = os.environ.get("LAZYVIEWS_LOG_TRAVERSALS")
        if traversals:
            values["log_traversals"] = traversals.strip().lower() in ("1", "true", "yes", "on")
        return cls(**values)


class PerformanceReport(BaseModel):
    """Time and memory measured for a single operation"""
    operation: str = Field(..., description="Name of the measured operation")
    execution_time_ms: float = Field(..., description="Wall time in milliseconds", ge=0)
    memory_usage_mb: float = Field(..., description="Peak traced memory in megabytes", ge=0)
    success: bool = Field(..., description="Whether the operation completed")
    result_size: Optional[int] = Field(
        None,
        description="len() of the result when it has one",
        ge=0
    )


class ChecksumResult(BaseModel):
    """Outcome of a Luhn checksum over a digit string"""
    text: str = Field(..., description="Input as given")
    digits: List[int] = Field(default_factory=list, description="Digits extracted from the input")
    total: int = Field(0, description="Luhn sum after doubling every second digit from the right", ge=0)
    valid: bool = Field(..., description="Whether the total is a non-empty multiple of ten")


_settings: Optional[LazySettings] = None


def get_settings() -> LazySettings:
    """Return the active settings, loading them from the environment on first use"""
    global _settings
    if _settings is None:
        _settings = LazySettings.from_env()
    return _settings


def configure(**overrides) -> LazySettings:
    """Validate and install new settings on top of the current ones"""
    global _settings
    current = get_settings()
    _settings = LazySettings(**{**current.model_dump(), **overrides})
    logger.info(f"Lazy view settings updated: {_settings.model_dump(mode='json')}")
    return _settings


def reset_settings() -> LazySettings:
    """Drop any configured overrides and reload from the environment"""
    global _settings
    _settings = None
    return get_settings()
