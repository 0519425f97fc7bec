"""Structured errors raised by the gear check pipeline."""

from __future__ import annotations


class GearCheckError(RuntimeError):
    """Base error carrying a stable machine-readable code."""

    code = "GEARCHECK_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code:
            self.code = code


class ValidationError(GearCheckError):
    """Identifier is not a bare character name."""

    code = "INVALID_IDENTIFIER"


class AlreadyInProgressError(GearCheckError):
    """Requester already has a run in flight."""

    code = "ALREADY_IN_PROGRESS"


class FetchError(GearCheckError):
    """Navigation timed out or the page could not be loaded."""

    code = "FETCH_FAILED"

    def __init__(self, message: str, code: str | None = None, url: str | None = None) -> None:
        super().__init__(message, code)
        self.url = url


class SessionLaunchError(GearCheckError):
    """Headless browser could not be started."""

    code = "SESSION_LAUNCH_FAILED"


class AuthorizationGrantError(GearCheckError):
    """Role grant was refused or failed."""

    code = "ROLE_GRANT_FAILED"
