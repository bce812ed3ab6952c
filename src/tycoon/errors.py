"""Game error taxonomy.

Every domain error aborts the single requested action and leaves stored
state unchanged. They subclass ValueError so callers that only care about
"the action was rejected" can keep catching ValueError.
"""

from __future__ import annotations


class GameError(ValueError):
    """Base class for recoverable, user-facing game errors."""

    status_code = 400


class InsufficientFunds(GameError):
    """BTC, USD, shards or loyalty below the required amount."""

    status_code = 402


class InsufficientShards(InsufficientFunds):
    """Not enough NEON shards."""


class InsufficientLoyalty(InsufficientFunds):
    """Not enough NEON loyalty points."""


class AlreadyInState(GameError):
    """Already in a syndicate, bonus already unlocked, event already joined, ..."""

    status_code = 409


class NotEligible(GameError):
    """Deadline passed, cooldown active, imprisoned, wrong phase."""

    status_code = 403


class NotFound(GameError):
    """Missing template or target entity."""

    status_code = 404


class LostUpdate(GameError):
    """A concurrent writer changed a document between read and write."""

    status_code = 409

    def __init__(self, key: str, expected: int | None, actual: int | None) -> None:
        super().__init__(
            f"Concurrent update on {key}: expected version {expected}, found {actual}"
        )
        self.key = key
        self.expected = expected
        self.actual = actual
