from __future__ import annotations


class AutofillError(Exception):
    """Base class for autofill specific exceptions."""


class NoLoginFormFound(AutofillError):
    """Raised when no classification bucket holds a candidate form."""

    def __init__(self, message: str = "Couldn't find anything that looks like a login form") -> None:
        super().__init__(message)


class NoFocusedField(AutofillError):
    """Raised when a fill_field request arrives before any input was focused."""

    def __init__(self, message: str = "No focused inputs in history") -> None:
        super().__init__(message)


class UnrecognizedRequestType(AutofillError):
    """Raised when a request carries a type tag outside the supported kinds."""

    def __init__(self, request_type: object) -> None:
        super().__init__(f"Invalid message type: {request_type!r}")
        self.request_type = request_type


class ParsingError(AutofillError):
    """Raised when a request payload cannot be parsed into a valid schema."""


class DomError(AutofillError):
    """Raised when a DOM backend call fails."""


class BrowserError(AutofillError):
    """Raised for Playwright session failures."""


class SandboxViolation(AutofillError):
    """Raised when navigation leaves the configured host allow-list."""
