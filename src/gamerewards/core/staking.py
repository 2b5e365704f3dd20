"""
Time-locked reward staking.

Each user owns a stake book of active positions. A position is created
ACTIVE with a fixed 30-day lock and 1.5x bonus, and can only be closed by
an unstake at or after its unlock time. There is no early withdrawal.

Yield compounds daily over the real elapsed time:

    d  = (now - created_at) / one_day_ms        (not floored)
    re = (0.05 / 365) * bonus_multiplier
    yield = max(0, principal * (1 + re) ** d - principal)

The same formula with d = 30 gives the estimate shown at stake time; the
amount actually paid uses the true elapsed time, so unstaking after the
unlock date keeps accruing.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Optional

from gamerewards.core.constants import (
    BASE_ANNUAL_RATE,
    BONUS_MULTIPLIER,
    DAYS_PER_YEAR,
    ESTIMATE_HORIZON_DAYS,
    LOCK_DURATION_DAYS,
    LOCK_DURATION_MS,
    MILLISECONDS_PER_DAY,
    STARTING_CAPITAL,
)
from gamerewards.core.economics_exceptions import (
    EconomicsValidationError,
    InvalidAmountError,
    LockActiveError,
    NoStakeBookError,
    OperationResult,
    StakeNotFoundError,
)
from gamerewards.core.stake_store import InMemoryStakeStore, StakeStore
from gamerewards.core.staking_models import (
    ProtocolStakingStats,
    StakePosition,
    StakeStatus,
    UserStakeBook,
)

logger = logging.getLogger(__name__)


def compound_yield(principal: int, bonus_multiplier: float, elapsed_days: float) -> float:
    """Daily-compounded bonus yield for ``elapsed_days`` (fractional days allowed)."""
    effective_daily_rate = (BASE_ANNUAL_RATE / DAYS_PER_YEAR) * bonus_multiplier
    grown = principal * (1 + effective_daily_rate) ** elapsed_days
    return max(0.0, grown - principal)


def estimated_yield(position: StakePosition) -> float:
    """Informational yield over the nominal 30-day horizon."""
    return compound_yield(position.principal, position.bonus_multiplier, ESTIMATE_HORIZON_DAYS)


def accrued_yield(position: StakePosition, now_ms: int) -> float:
    elapsed_days = (now_ms - position.created_at) / MILLISECONDS_PER_DAY
    return compound_yield(position.principal, position.bonus_multiplier, elapsed_days)


def remaining_lock_days(position: StakePosition, now_ms: int) -> int:
    """Whole days left until unlock, rounded up; 0 once unlocked."""
    gap = position.unlock_at - now_ms
    if gap <= 0:
        return 0
    return -(-gap // MILLISECONDS_PER_DAY)


def system_time_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class StakeReceipt:
    position: StakePosition
    estimated_yield: float

    def to_dict(self) -> Dict[str, Any]:
        return {**self.position.to_dict(), "estimated_yield": self.estimated_yield}


@dataclass(frozen=True)
class UnstakeReceipt:
    stake_id: str
    principal: int
    yield_amount: float
    total: float
    staking_duration_ms: int
    position: StakePosition

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["position"] = self.position.to_dict()
        return data


class StakeLedger:
    """
    Owns every user's stake book and the cumulative rewards-paid counter.

    Mutations of one user's book run under that user's store lock; the
    rewards counter has its own lock. ``get_protocol_stats`` reads books
    without the user locks and may mix states across users.
    """

    def __init__(
        self,
        store: Optional[StakeStore] = None,
        time_provider: Optional[Callable[[], int]] = None,
        id_factory: Optional[Callable[[str], str]] = None,
    ):
        self.store: StakeStore = store if store is not None else InMemoryStakeStore()
        self._time_provider = time_provider or system_time_ms
        self._id_factory = id_factory or (lambda user: f"stake_{uuid.uuid4().hex}")
        self._rewards_paid = 0.0
        self._totals_lock = threading.Lock()

    def now(self) -> int:
        return int(self._time_provider())

    @property
    def rewards_paid(self) -> float:
        with self._totals_lock:
            return self._rewards_paid

    def stake(self, user: str, principal: int) -> OperationResult[StakeReceipt]:
        if not isinstance(user, str) or not user:
            return OperationResult.fail(EconomicsValidationError("User id must be a non-empty string"))
        if isinstance(principal, bool) or not isinstance(principal, int) or principal <= 0:
            logger.info(
                "Rejected stake with invalid amount",
                extra={"event": "staking.stake.invalid_amount", "user": user, "amount": repr(principal)},
            )
            return OperationResult.fail(
                InvalidAmountError(
                    "Staking amount must be a positive integer",
                    details={"amount": repr(principal)},
                )
            )

        with self.store.user_lock(user):
            now = self.now()
            book = self.store.get(user) or UserStakeBook(user=user)
            position = StakePosition(
                stake_id=self._id_factory(user),
                user=user,
                principal=principal,
                created_at=now,
                unlock_at=now + LOCK_DURATION_MS,
                lock_duration_days=LOCK_DURATION_DAYS,
                bonus_multiplier=BONUS_MULTIPLIER,
            )
            book.add(position)
            self.store.upsert(book)

        receipt = StakeReceipt(position=position, estimated_yield=estimated_yield(position))
        logger.info(
            "User staking successful",
            extra={
                "event": "staking.stake.created",
                "user": user,
                "stake_id": position.stake_id,
                "amount": principal,
                "unlock_at": position.unlock_at,
            },
        )
        return OperationResult.ok(receipt)

    def unstake(self, user: str, stake_id: str) -> OperationResult[UnstakeReceipt]:
        with self.store.user_lock(user):
            book = self.store.get(user)
            if book is None:
                return OperationResult.fail(
                    NoStakeBookError("No staking book found for user", details={"user": user})
                )

            position = book.find(stake_id)
            if position is None:
                return OperationResult.fail(
                    StakeNotFoundError("Stake not found", details={"user": user, "stake_id": stake_id})
                )

            now = self.now()
            if not position.is_unlocked(now):
                days = remaining_lock_days(position, now)
                logger.info(
                    "Unstake rejected, lock period active",
                    extra={"event": "staking.unstake.locked", "user": user, "stake_id": stake_id, "remaining_days": days},
                )
                return OperationResult.fail(
                    LockActiveError(
                        f"Stake is locked for {days} more days",
                        remaining_days=days,
                        unlock_at=position.unlock_at,
                    )
                )

            reward = accrued_yield(position, now)
            book.remove(stake_id)
            self.store.upsert(book)

        with self._totals_lock:
            self._rewards_paid += reward

        closed = replace(position, status=StakeStatus.CLOSED)
        receipt = UnstakeReceipt(
            stake_id=stake_id,
            principal=position.principal,
            yield_amount=reward,
            total=position.principal + reward,
            staking_duration_ms=now - position.created_at,
            position=closed,
        )
        logger.info(
            "User unstaking successful",
            extra={
                "event": "staking.unstake.completed",
                "user": user,
                "stake_id": stake_id,
                "principal": position.principal,
                "yield": reward,
            },
        )
        return OperationResult.ok(receipt)

    def has_book(self, user: str) -> bool:
        return self.store.get(user) is not None

    def get_book(self, user: str) -> UserStakeBook:
        """The user's book, or an empty one if they never staked."""
        return self.store.get(user) or UserStakeBook(user=user)

    def current_yield(self, position: StakePosition) -> float:
        return accrued_yield(position, self.now())

    def get_protocol_stats(self) -> ProtocolStakingStats:
        books = self.store.books()
        total_staked = sum(book.total_staked for book in books)
        total_stakes = sum(len(book.positions) for book in books)
        return ProtocolStakingStats(
            total_staked=total_staked,
            total_staking_rewards=self.rewards_paid,
            total_users=len(books),
            total_stakes=total_stakes,
            average_stake_amount=total_staked / total_stakes if total_stakes else 0.0,
            protocol_liquidity_increase=total_staked / STARTING_CAPITAL * 100,
        )


__all__ = [
    "StakeLedger",
    "StakeReceipt",
    "UnstakeReceipt",
    "accrued_yield",
    "compound_yield",
    "estimated_yield",
    "remaining_lock_days",
]
