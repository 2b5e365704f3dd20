"""
Reward-economics exception hierarchy.

Provides typed errors for standing, distribution and staking operations so
callers can route failures precisely. Public ledger and coordinator
operations do not raise these across their boundary; they hand them back
inside an ``OperationResult``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from gamerewards.core.standing import StandingVerdict

T = TypeVar("T")


class EconomicsError(Exception):
    """Base exception for all reward-economics errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the caller can react and retry with other input
    """

    code = "ECONOMICS_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "error": self.message, **self.details}


# ==================== Validation Errors ====================


class EconomicsValidationError(EconomicsError):
    """Raised when caller-supplied input is malformed."""

    code = "VALIDATION_ERROR"


class InvalidAmountError(EconomicsValidationError):
    """Raised when a stake or reward amount is not acceptable."""

    code = "INVALID_AMOUNT"


class MalformedSignalsError(EconomicsValidationError):
    """Raised when a player signal set is structurally invalid."""

    code = "MALFORMED_SIGNALS"


class IneligiblePlayerError(EconomicsValidationError):
    """Raised when a player's standing does not allow a payout."""

    code = "INELIGIBLE_PLAYER"

    def __init__(self, message: str, verdict: "StandingVerdict", **kwargs: Any) -> None:
        details = {"standing": verdict.standing.value, "reason": verdict.reason.value}
        super().__init__(message, details=details, **kwargs)
        self.verdict = verdict


# ==================== Stake State Errors ====================


class StakeStateError(EconomicsError):
    """Raised when a stake operation is impossible in the current state."""

    code = "STAKE_STATE_ERROR"


class NoStakeBookError(StakeStateError):
    """Raised when a user has never staked."""

    code = "NO_STAKING_BOOK"


class StakeNotFoundError(StakeStateError):
    """Raised when a stake id is not among the user's active positions."""

    code = "STAKE_NOT_FOUND"


class LockActiveError(StakeStateError):
    """Raised when a stake is unstaked before its unlock time."""

    code = "LOCK_PERIOD_ACTIVE"

    def __init__(self, message: str, remaining_days: int, unlock_at: int, **kwargs: Any) -> None:
        details = {"remaining_days": remaining_days, "unlock_at": unlock_at}
        super().__init__(message, details=details, **kwargs)
        self.remaining_days = remaining_days
        self.unlock_at = unlock_at


# ==================== Storage Errors ====================


class StakeStoreError(EconomicsError):
    """Raised when persisted stake books cannot be read or written."""

    code = "STAKE_STORE_ERROR"

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


# ==================== Results ====================


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Tagged success/failure returned by public engine operations."""

    success: bool
    value: Optional[T] = None
    error: Optional[EconomicsError] = None

    @classmethod
    def ok(cls, value: T) -> "OperationResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: EconomicsError) -> "OperationResult[T]":
        return cls(success=False, error=error)

    @property
    def code(self) -> Optional[str]:
        return self.error.code if self.error else None

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


__all__ = [
    "EconomicsError",
    "EconomicsValidationError",
    "InvalidAmountError",
    "MalformedSignalsError",
    "IneligiblePlayerError",
    "StakeStateError",
    "NoStakeBookError",
    "StakeNotFoundError",
    "LockActiveError",
    "StakeStoreError",
    "OperationResult",
]
