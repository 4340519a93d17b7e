"""Exception hierarchy for ECS cluster discovery."""

from __future__ import annotations


class EcsClusterError(Exception):
    """Base exception for all ECS cluster discovery errors."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


# ── Fatal Errors ──────────────────────────────────────────────────

class ConfigError(EcsClusterError):
    """Raised when a structurally required configuration key is missing.

    This signals a caller bug and is never converted into a soft
    failure result.
    """

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Required configuration key '{field}' is missing.")


# ── Soft (per-poll) Errors ────────────────────────────────────────

class DiscoveryError(EcsClusterError):
    """Base class for errors that fail a single poll."""


class ConfigValidationError(DiscoveryError):
    """Raised when a configuration key is present but ill-formed."""

    def __init__(self, field: str, reason: str = "") -> None:
        self.field = field
        msg = f"Configuration key '{field}' is not configured correctly."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)


class DirectoryError(DiscoveryError):
    """Raised when the directory service fails or returns an unknown shape."""

    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason
        msg = f"Directory call {operation} failed."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)


class PatternError(DiscoveryError):
    """Raised when a configured service name is not a valid regex."""

    def __init__(self, pattern: str, reason: str = "") -> None:
        self.pattern = pattern
        msg = f"Service name '{pattern}' is not a valid pattern."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)


class ResolutionError(DiscoveryError):
    """Raised when a configured service name matches no service."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"No service matching '{pattern}' found.")


class ExtractionError(DiscoveryError):
    """Raised when described tasks cannot be walked for addresses."""

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        msg = "Can't extract addresses from described tasks."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)
