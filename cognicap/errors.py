"""
Error types raised by the measurement core.

The HTTP layer maps InvalidArgument to 422 and NotFound to 404; everything
else propagates unchanged.
"""

from __future__ import annotations


class CognicapError(Exception):
    """Base class for every error the engine raises on purpose."""


class InvalidArgument(CognicapError, ValueError):
    pass


class NotFound(CognicapError, KeyError):
    def __str__(self) -> str:
        # KeyError repr-quotes its message
        return str(self.args[0]) if self.args else ""


class ExperimentCancelled(CognicapError):
    """Raised at a sample boundary once the run's cancel token is set."""
