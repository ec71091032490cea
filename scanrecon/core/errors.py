#!/usr/bin/env python3
"""
ScanRecon - Error taxonomy

Each pipeline stage raises its own error kind so callers can tell a bad
configuration from a tool that failed to run or produced corrupt output.
"""

from __future__ import annotations

from typing import Optional


class ScanReconError(Exception):
    """Base class for all ScanRecon errors."""


class ConfigurationError(ScanReconError):
    """Malformed configuration (e.g. a port specification token)."""

    def __init__(self, message: str, *, token: Optional[str] = None):
        super().__init__(message)
        self.token = token


class ExecutionError(ScanReconError):
    """The scan process could not be started or exited without usable output."""

    def __init__(
        self,
        message: str,
        *,
        reason: str = "",
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr


class ScanTimeoutError(ScanReconError, TimeoutError):
    """The scan exceeded its deadline and the process was killed."""

    def __init__(self, message: str, *, timeout_s: Optional[float] = None):
        super().__init__(message)
        self.timeout_s = timeout_s


class ParseError(ScanReconError):
    """Captured scan output is not a valid nmap XML document."""
