"""Custom exceptions for scanning logic."""

from __future__ import annotations

from typing import TypeVar

_ScanErrorT = TypeVar("_ScanErrorT", bound="ScanError")


class ScanError(Exception):
    """Base class for every failure raised while compiling or scanning."""

    code = "SCAN_ERROR"

    def __init__(self, message: str, *, target_index: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.target_index = target_index

    def with_context(self: _ScanErrorT, context: str) -> _ScanErrorT:
        """Return a copy of this error whose message is prefixed with ``context``.

        Callers raise the copy ``from`` the original so the causal chain survives.
        """

        return type(self)(f"{context}: {self.message}", target_index=self.target_index)


class BadArgumentError(ScanError):
    """Raised for invalid formats, inputs or target lists."""

    code = "BAD_ARGUMENT"


class NoMatchError(ScanError):
    """Raised when the input does not match the format."""

    code = "NO_MATCH"

    def __init__(
        self,
        message: str = "input does not match format",
        *,
        target_index: int | None = None,
    ) -> None:
        super().__init__(message, target_index=target_index)


class MultipleMatchesError(ScanError):
    """Raised when the input matches the format in more than one way."""

    code = "MULTIPLE_MATCHES"


class EmptyCaptureError(ScanError):
    """Raised when a leading or trailing verb has nothing to capture."""

    code = "EMPTY_CAPTURE"


class ConversionError(ScanError):
    """Raised when captured text cannot be stored in its target."""

    code = "CONVERSION_ERROR"


class InternalInconsistencyError(ScanError):
    """Raised when matcher bookkeeping breaks an invariant it should guarantee.

    Messages start with ``bug:`` so they are never mistaken for bad input.
    """

    code = "BUG"
