"""Custom exception hierarchy for adminconsole."""

from __future__ import annotations


class AdminConsoleError(Exception):
    """Base class for all custom errors raised by adminconsole."""


# --- 3-layer hierarchy ---

class DomainError(AdminConsoleError):
    """Base class for domain-level errors."""


class InfrastructureError(AdminConsoleError):
    """Base class for infrastructure-level errors."""


class ApplicationError(AdminConsoleError):
    """Base class for application-level errors."""


# --- Domain errors ---

class FilterValidationError(DomainError):
    """Raised when a draft filter value is rejected at commit time.

    ``errors`` maps each offending filter key to a human readable reason.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        detail = "; ".join(f"{key}: {reason}" for key, reason in sorted(self.errors.items()))
        super().__init__(f"Invalid filters ({detail})")


class UnknownResourceError(DomainError):
    """Raised when a resource preset name is not registered."""


# --- Infrastructure errors ---

class TransportError(InfrastructureError):
    """Raised when the backend is unreachable or answers with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PayloadError(TransportError):
    """Raised when a list payload lacks the fields a page requires."""


# --- Application errors ---

class ExportError(ApplicationError):
    """Raised when an export cannot be produced; no partial file exists."""


class ControllerDisposedError(ApplicationError):
    """Raised when an operation is requested on a disposed controller."""


class SettingsError(AdminConsoleError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
