"""
Request-level failures.

Only these propagate to the caller; per-field and per-row parse failures are
recovered locally (skipped) and never raised.
"""
from __future__ import annotations

from typing import Any


class CallscopeError(Exception):
    status_code: int = 500

    def __init__(self, message: str, *, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class InputError(CallscopeError):
    """Missing or empty ticker (user-correctable)."""

    status_code = 400


class ConfigError(CallscopeError):
    """Missing credential configuration (operator-correctable)."""

    status_code = 500


class UpstreamError(CallscopeError):
    """Non-success response (or transport failure) from the market-data provider."""

    status_code = 502

    def __init__(self, message: str, *, upstream_status: int | None = None, details: str | None = None):
        super().__init__(message, details=details)
        self.upstream_status = upstream_status

    def to_payload(self) -> dict[str, Any]:
        out = super().to_payload()
        if self.upstream_status is not None:
            out["statusCode"] = self.upstream_status
        return out
