"""Domain-specific exceptions for the POS KPI engine.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from PosKPIError for easy catching.
"""

from __future__ import annotations


class PosKPIError(Exception):
    """Base exception for all POS KPI engine errors.

    Users can catch this exception to handle any error raised by the engine.
    """

    pass


class ConfigError(PosKPIError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - The employee roster does not contain exactly two distinct names
    - Rounding or tolerance settings are out of range
    """

    pass


class ClassificationError(PosKPIError):
    """Raised when a raw record matches none of the known sale event variants.

    This exception is raised when:
    - The ``tipo`` discriminator holds an unknown value
    - A record without discriminator lacks the legacy total fields
    - The id, employee or date of a record is missing or invalid
    - A numeric field cannot be converted to a number
    - The same id arrives in two different versions

    The offending record is excluded from aggregation, and the error is
    surfaced to the caller so malformed data stays visible.

    Attributes:
        record_id: Id of the offending record, if it had one.
    """

    def __init__(self, message: str, record_id: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id


class ValidationError(PosKPIError):
    """Raised when strict ratio computation receives a non-positive denominator.

    Only the manual full-day entry path computes ratios strictly; the caller
    must correct the input and resubmit.
    """

    pass
