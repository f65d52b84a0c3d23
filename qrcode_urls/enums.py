"""Shared enums for the QR code URL generator.

This module defines the status values and menu choices used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["HealthStatus", "MenuChoice", "OperationStatus"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class OperationStatus(StrEnum):
    """Outcome labels for preview/insert metrics."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    EXHAUSTED = "exhausted"
    ERROR = "error"


class MenuChoice(StrEnum):
    """Options offered by the interactive console menu."""

    PREVIEW = "1"
    INSERT = "2"
    EXIT = "3"

    @classmethod
    def parse(cls, value: str) -> "MenuChoice | None":
        """Parse raw console input, returning None for unknown choices."""
        try:
            return cls(value.strip())
        except ValueError:
            return None
