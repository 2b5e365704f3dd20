"""
Protocol economics coordinator.

Composes standing screening, reward distribution and the stake ledger
behind one facade, keeps lifetime reward totals, and reports protocol
sustainability. This is the only engine component consumed directly by the
API and CLI; it computes splits and never moves token balances itself.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from gamerewards.core import economics_metrics
from gamerewards.core.constants import (
    BASE_MONTHLY_REVENUE,
    MONTHLY_EXPENSES,
    STAKING_REVENUE_MULTIPLIER,
    STARTING_CAPITAL,
)
from gamerewards.core.economics_exceptions import (
    EconomicsError,
    IneligiblePlayerError,
    OperationResult,
)
from gamerewards.core.fraud_detection import FraudDetector
from gamerewards.core.reward_distribution import RewardDistribution, RewardDistributor
from gamerewards.core.standing import (
    PlayerSignals,
    Standing,
    StandingClassifier,
    StandingReason,
    StandingVerdict,
)
from gamerewards.core.staking import StakeLedger, StakeReceipt, UnstakeReceipt
from gamerewards.core.staking_models import ProtocolStakingStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewardEventResult:
    distribution: RewardDistribution
    staking_stats: ProtocolStakingStats

    @property
    def instant_claim(self) -> int:
        return self.distribution.instant_claim

    @property
    def staking_incentive(self) -> int:
        return self.distribution.staking_incentive

    @property
    def protocol_operations(self) -> int:
        return self.distribution.protocol_operations

    def to_dict(self) -> Dict[str, Any]:
        return {**self.distribution.to_dict(), "staking_stats": self.staking_stats.to_dict()}


@dataclass(frozen=True)
class StakeSummary:
    stake_id: str
    amount: int
    staked_at: int
    unlock_at: int
    current_rewards: float
    status: str


@dataclass(frozen=True)
class StakingInfo:
    user: str
    total_staked: int
    active_stakes: int
    total_rewards: float
    stakes: List[StakeSummary]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SustainabilityMetrics:
    monthly_expenses: int
    monthly_revenue: int
    sustainability_ratio: float
    is_self_sustaining: bool
    runway_months: int
    staking_contribution: float
    total_staked: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProtocolStatus:
    total_rewards_ever: int
    user_pool_ever: int
    protocol_pool_ever: int
    sustainability: SustainabilityMetrics
    staking_stats: ProtocolStakingStats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_rewards_ever": self.total_rewards_ever,
            "user_pool_ever": self.user_pool_ever,
            "protocol_pool_ever": self.protocol_pool_ever,
            "sustainability": self.sustainability.to_dict(),
            "staking_stats": self.staking_stats.to_dict(),
        }


def monthly_revenue() -> int:
    # Multiplier is an exact tenth; integer scaling keeps the floor exact.
    return (BASE_MONTHLY_REVENUE * round(STAKING_REVENUE_MULTIPLIER * 10)) // 10


def runway_months(expenses: int, revenue: int) -> int:
    net_monthly = revenue - expenses
    if net_monthly <= 0:
        return 0
    return STARTING_CAPITAL // net_monthly


class EconomicsCoordinator:
    """Facade over the classifier, distributor and stake ledger."""

    def __init__(
        self,
        ledger: Optional[StakeLedger] = None,
        distributor: Optional[RewardDistributor] = None,
        classifier: Optional[StandingClassifier] = None,
        fraud_detector: Optional[FraudDetector] = None,
    ):
        self.ledger = ledger or StakeLedger()
        self.distributor = distributor or RewardDistributor()
        self.classifier = classifier or StandingClassifier()
        self.fraud_detector = fraud_detector or FraudDetector()

        self._totals_lock = threading.Lock()
        self.total_rewards_ever = 0
        self.user_pool_ever = 0
        self.protocol_pool_ever = 0

        logger.info(
            "Protocol economics initialized",
            extra={"event": "economics.initialized", "starting_capital": STARTING_CAPITAL},
        )

    # ==================== Rewards ====================

    def process_reward(self, gross_amount: int) -> OperationResult[RewardEventResult]:
        """Split a gross reward and fold it into the lifetime totals."""
        try:
            distribution = self.distributor.distribute(gross_amount)
        except EconomicsError as exc:
            economics_metrics.record_reward_failure(exc.code)
            logger.warning(
                "Reward distribution rejected",
                extra={"event": "economics.reward.rejected", "code": exc.code, "amount": repr(gross_amount)},
            )
            return OperationResult.fail(exc)

        with self._totals_lock:
            self.total_rewards_ever += distribution.gross_amount
            self.user_pool_ever += distribution.user_share
            self.protocol_pool_ever += distribution.protocol_operations

        stats = self.ledger.get_protocol_stats()
        economics_metrics.record_distribution(distribution)
        economics_metrics.update_staking_gauges(stats)

        if distribution.unallocated_operations:
            logger.debug(
                "Operations buckets left flooring residual",
                extra={"event": "economics.reward.residual", "residual": distribution.unallocated_operations},
            )
        logger.info(
            "Rewards distributed",
            extra={
                "event": "economics.reward.distributed",
                "gross_amount": distribution.gross_amount,
                "instant_claim": distribution.instant_claim,
                "staking_incentive": distribution.staking_incentive,
                "protocol_operations": distribution.protocol_operations,
                "total_staked": stats.total_staked,
            },
        )
        return OperationResult.ok(RewardEventResult(distribution=distribution, staking_stats=stats))

    def screen_player(self, signals: Union[PlayerSignals, Mapping[str, Any]]) -> StandingVerdict:
        verdict = self.classifier.classify(signals)
        economics_metrics.record_verdict(verdict.standing.value)
        log = logger.info if verdict.is_valid else logger.warning
        log(
            "Player standing classified",
            extra={
                "event": "economics.standing.classified",
                "standing": verdict.standing.value,
                "reason": verdict.reason.value,
            },
        )
        return verdict

    def process_player_reward(
        self,
        player_id: str,
        signals: Union[PlayerSignals, Mapping[str, Any]],
        gross_amount: int,
        wallet: Optional[str] = None,
        achievement_id: Optional[str] = None,
        unlocked_at_ms: Optional[int] = None,
    ) -> OperationResult[RewardEventResult]:
        """
        Screen a player and distribute only when their standing is CLEARED.

        A cleared verdict is downgraded to SUSPICIOUS when the fraud detector
        flags the player/wallet pair, or flags the achievement claim (a marked
        pattern, or an unlock time in the future or older than a day).
        Both achievement fields are needed for the achievement check to run.
        """
        verdict = self.screen_player(signals)
        if verdict.is_valid and wallet and self.fraud_detector.check_user(player_id, wallet):
            verdict = self._flagged(verdict, "Player flagged by fraud checks")
        if (
            verdict.is_valid
            and achievement_id
            and unlocked_at_ms is not None
            and self.fraud_detector.check_achievement(achievement_id, player_id, unlocked_at_ms, self.ledger.now())
        ):
            verdict = self._flagged(verdict, "Achievement claim flagged by fraud checks")
        if not verdict.is_valid:
            economics_metrics.record_reward_failure(IneligiblePlayerError.code)
            return OperationResult.fail(
                IneligiblePlayerError(f"Player {player_id} is not eligible for rewards", verdict=verdict)
            )
        return self.process_reward(gross_amount)

    @staticmethod
    def _flagged(verdict: StandingVerdict, details: str) -> StandingVerdict:
        return StandingVerdict(Standing.SUSPICIOUS, StandingReason.SUSPICIOUS_ACTIVITY, details, verdict.signals)

    # ==================== Staking ====================

    def stake(self, user: str, amount: int) -> OperationResult[StakeReceipt]:
        result = self.ledger.stake(user, amount)
        economics_metrics.record_stake_operation("stake", "success" if result.success else result.code)
        return result

    def unstake(self, user: str, stake_id: str) -> OperationResult[UnstakeReceipt]:
        result = self.ledger.unstake(user, stake_id)
        economics_metrics.record_stake_operation("unstake", "success" if result.success else result.code)
        return result

    def get_staking_info(self, user: str) -> StakingInfo:
        book = self.ledger.get_book(user)
        summaries = [
            StakeSummary(
                stake_id=position.stake_id,
                amount=position.principal,
                staked_at=position.created_at,
                unlock_at=position.unlock_at,
                current_rewards=self.ledger.current_yield(position),
                status=position.status.value,
            )
            for position in book.positions
        ]
        return StakingInfo(
            user=user,
            total_staked=book.total_staked,
            active_stakes=len(summaries),
            total_rewards=sum(summary.current_rewards for summary in summaries),
            stakes=summaries,
        )

    def get_staking_stats(self) -> ProtocolStakingStats:
        return self.ledger.get_protocol_stats()

    # ==================== Status ====================

    def calculate_sustainability(self, stats: Optional[ProtocolStakingStats] = None) -> SustainabilityMetrics:
        stats = stats or self.ledger.get_protocol_stats()
        revenue = monthly_revenue()
        ratio = revenue / MONTHLY_EXPENSES
        return SustainabilityMetrics(
            monthly_expenses=MONTHLY_EXPENSES,
            monthly_revenue=revenue,
            sustainability_ratio=ratio,
            is_self_sustaining=ratio >= 1.0,
            runway_months=runway_months(MONTHLY_EXPENSES, revenue),
            staking_contribution=stats.protocol_liquidity_increase,
            total_staked=stats.total_staked,
        )

    def get_status(self) -> ProtocolStatus:
        stats = self.ledger.get_protocol_stats()
        with self._totals_lock:
            totals = (self.total_rewards_ever, self.user_pool_ever, self.protocol_pool_ever)
        return ProtocolStatus(
            total_rewards_ever=totals[0],
            user_pool_ever=totals[1],
            protocol_pool_ever=totals[2],
            sustainability=self.calculate_sustainability(stats),
            staking_stats=stats,
        )


__all__ = [
    "EconomicsCoordinator",
    "ProtocolStatus",
    "RewardEventResult",
    "StakeSummary",
    "StakingInfo",
    "SustainabilityMetrics",
]
