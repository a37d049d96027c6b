"""
Errors module for Nest-Guard.

This module defines the exception hierarchy raised by the configuration layer,
the Nest API client and the recovery sequencer.
"""

from typing import Optional


class NestGuardError(Exception):
    """Base class for all Nest-Guard errors."""


class ConfigError(NestGuardError):
    """Raised when required settings are missing or invalid."""


class TransportError(NestGuardError):
    """Raised when the Nest API cannot be reached."""


class ProtocolError(NestGuardError):
    """Raised when the Nest API answers with a non-200 status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(ProtocolError):
    """Raised when the Nest API rejects the auth token."""


class SchemaError(NestGuardError):
    """Raised when a Nest API response does not have the expected shape."""


class RecoveryError(NestGuardError):
    """Raised when a bounded recovery step runs out of attempts."""
