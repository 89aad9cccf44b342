"""Exception hierarchy for record handling."""
from __future__ import annotations


class RelayError(Exception):
    """Base class for every error a single record can produce."""


class InvalidLine(RelayError):
    """Raised for an empty record."""


class DecodeError(RelayError):
    """Raised when a record does not match either wire grammar."""

    def __init__(self, message: str, fragment: str = "") -> None:
        super().__init__(f"{message} ({fragment})" if fragment else message)
        self.fragment = fragment


class DecompressionError(RelayError):
    """Raised when a gzip-framed record cannot be inflated."""


class DeclarationConflict(RelayError):
    """Raised when a declaration disagrees with an existing family."""


class UnknownMetric(RelayError):
    """Raised when a value arrives for a name that was never declared."""
