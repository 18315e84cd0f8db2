"""Exception hierarchy shared by the engine, datasets and sessions."""

from __future__ import annotations


class PolicyNetError(Exception):
    """Base class for every error raised by policynet."""


class DimensionMismatch(PolicyNetError, ValueError):
    """Operand shapes of a vector/matrix operation disagree."""

    def __init__(self, message: str, *, expected=None, actual=None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ConfigurationError(PolicyNetError, ValueError):
    """Architecture, training configuration or dataset cannot be used."""


__all__ = ["PolicyNetError", "DimensionMismatch", "ConfigurationError"]
