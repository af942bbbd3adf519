"""Exception hierarchy shared by the CLI, the connection and the commands."""

from __future__ import annotations

import argparse
from typing import Optional


class HkctlError(Exception):
    """Raised when the CLI encounters an expected error condition."""


class UsageError(HkctlError):
    """Malformed, missing or invalid command line input."""

    def __init__(self, message: str, parser: Optional[argparse.ArgumentParser] = None) -> None:
        super().__init__(message)
        self.parser = parser


class ConfigError(HkctlError):
    """Invalid configuration file or environment value."""


class ServiceConnectionError(HkctlError):
    """The automation service endpoint could not be reached."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"Unable to connect to {endpoint}: {reason}")
        self.endpoint = endpoint
        self.reason = reason


class RemoteError(HkctlError):
    """Structured status returned by the automation service."""

    def __init__(self, code: str, message: str, http_status: Optional[int] = None) -> None:
        super().__init__(f"status: {code}, message: {message!r}")
        self.code = code
        self.message = message
        self.http_status = http_status


class InternalInvariantError(RuntimeError):
    """A parsed command name has no registered handler."""
