"""Failure taxonomy shared by the services and the HTTP layer.

Services raise these; ``welth.main`` renders them as failure envelopes.
"""

from __future__ import annotations


class LedgerError(Exception):
    kind = "ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(LedgerError):
    kind = "UNAUTHORIZED"
    status_code = 401


class NotFound(LedgerError):
    kind = "NOT_FOUND"
    status_code = 404


class Invalid(LedgerError):
    kind = "INVALID"
    status_code = 422


class RateLimited(LedgerError):
    kind = "RATE_LIMITED"
    status_code = 429


class Blocked(LedgerError):
    kind = "BLOCKED"
    status_code = 403


class StoreFailure(LedgerError):
    kind = "STORE_FAILURE"
    status_code = 503
