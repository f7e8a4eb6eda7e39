"""
Exception hierarchy for update-bin.

Every failure that should stop an update derives from UpdateBinError and is
reported by the CLI as a single "Error: <message>" line. Version lookup
failures derive from VersionError and are never fatal.
"""

from __future__ import annotations


class UpdateBinError(Exception):
    """
    Base exception for update-bin errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


class NotFoundError(UpdateBinError):
    """Binary is not on the search path."""


class UndetectedManagerError(UpdateBinError):
    """No supported package manager matches the binary's location."""


class UnsupportedManagerError(UpdateBinError):
    """Package manager identifier is not one of the supported managers."""


class UpdateLaunchError(UpdateBinError):
    """Update command could not be started."""


class UpdateFailedError(UpdateBinError):
    """
    Update command exited with a non-zero status.

    Attributes:
        exit_code: Exit status of the update process
    """
    def __init__(self, message: str, exit_code: int, remediation: str | None = None):
        self.exit_code = exit_code
        super().__init__(message, remediation)


class ConfigError(UpdateBinError):
    """Explicitly requested configuration could not be loaded."""


class VersionError(UpdateBinError):
    """Base for version lookup failures (callers substitute "unknown")."""


class PackageNotFoundError(VersionError):
    """Package manager does not know the package."""


class VersionUnknownError(VersionError):
    """Binary did not answer any of the version flags."""
