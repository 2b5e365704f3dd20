"""
Reward-economics instrumentation.

Prometheus metrics for reward splits, standing verdicts and staking, with
helper functions that are safe to call from the coordinator path.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge

if TYPE_CHECKING:
    from gamerewards.core.reward_distribution import RewardDistribution
    from gamerewards.core.staking_models import ProtocolStakingStats

rewards_distributed_counter = Counter(
    "gamerewards_rewards_distributed_total",
    "Minor token units routed to each reward bucket",
    ["bucket"],
)

reward_events_counter = Counter(
    "gamerewards_reward_events_total",
    "Reward distribution requests by outcome",
    ["outcome"],
)

standing_verdicts_counter = Counter(
    "gamerewards_standing_verdicts_total",
    "Player standing verdicts by standing",
    ["standing"],
)

stake_operations_counter = Counter(
    "gamerewards_stake_operations_total",
    "Stake and unstake requests by operation and outcome",
    ["operation", "outcome"],
)

total_staked_gauge = Gauge(
    "gamerewards_total_staked",
    "Principal currently locked in active stake positions",
)


def record_distribution(distribution: "RewardDistribution") -> None:
    """Increment bucket counters for a completed distribution."""
    reward_events_counter.labels(outcome="success").inc()
    if distribution.gross_amount <= 0:
        return
    rewards_distributed_counter.labels(bucket="instant_claim").inc(distribution.instant_claim)
    rewards_distributed_counter.labels(bucket="staking_incentive").inc(distribution.staking_incentive)
    rewards_distributed_counter.labels(bucket="protocol_operations").inc(distribution.protocol_operations)


def record_reward_failure(code: str) -> None:
    reward_events_counter.labels(outcome=code.lower()).inc()


def record_verdict(standing: str) -> None:
    standing_verdicts_counter.labels(standing=standing.lower()).inc()


def record_stake_operation(operation: str, outcome: str) -> None:
    stake_operations_counter.labels(operation=operation, outcome=outcome.lower()).inc()


def update_staking_gauges(stats: "ProtocolStakingStats") -> None:
    total_staked_gauge.set(stats.total_staked)
