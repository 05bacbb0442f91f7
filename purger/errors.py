"""
purger.errors — Failure taxonomy and run-level exceptions.
"""

from enum import Enum
from typing import Optional

from purger.requester import Outcome, OutcomeKind


class PurgerError(Exception):
    """Base class for errors that stop a purger command."""


class ConfigError(PurgerError):
    """Required configuration is missing or invalid."""


class MalformedInputError(PurgerError):
    """The record file is absent or does not hold a usable record list."""


class UnauthorizedError(PurgerError):
    """The credential was rejected (401); no later request can succeed."""

    def __init__(self, message: str = "Unauthorized (401)", status: int = 401):
        super().__init__(message)
        self.status = status


class FailureKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    TRANSIENT = "transient"


def classify_outcome(outcome: Outcome) -> Optional[FailureKind]:
    """
    Map a request outcome onto the failure taxonomy.
    Returns None for a successful outcome.
    """
    if outcome.kind is OutcomeKind.OK:
        return None
    if outcome.kind is OutcomeKind.RATE_LIMITED:
        return FailureKind.RATE_LIMITED
    if outcome.kind is OutcomeKind.FATAL or outcome.status == 401:
        return FailureKind.UNAUTHORIZED
    if outcome.status == 404:
        return FailureKind.NOT_FOUND
    if outcome.status == 403:
        return FailureKind.FORBIDDEN
    return FailureKind.TRANSIENT
