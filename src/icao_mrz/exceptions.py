"""
Custom exceptions for MRZ processing.
"""

from __future__ import annotations

from icao_mrz.models.mrz_types import MRZFormat, MRZRange


class MRZException(Exception):
    """Base exception class for MRZ handling."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MRZParseException(MRZException):
    """Raised when the MRZ text is structurally malformed.

    Carries the range of the offending span so callers can highlight it in
    the original text. Check-digit failures are never reported this way.
    """

    def __init__(
        self,
        message: str,
        mrz: str,
        mrz_range: MRZRange,
        mrz_format: MRZFormat | None = None,
    ) -> None:
        super().__init__(f"{message} at {mrz_range}")
        self.mrz = mrz
        self.range = mrz_range
        self.mrz_format = mrz_format

    def log_context(self) -> dict[str, str | None]:
        """Fields for ``extra=`` when logging this error."""
        return {
            "mrz_format": self.mrz_format.value if self.mrz_format else None,
            "mrz_range": str(self.range),
        }


class MRZSerializationError(MRZException):
    """Raised when a record cannot be rendered back into MRZ text."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"MRZ serialization failed: {reason}")
