"""
Deterministic reward splitting.

A gross reward (integer minor units) is split into:
- instant claim: 60% of the user half, claimable immediately
- staking incentive: the rest of the user half
- protocol operations: the protocol half, further divided into
  hosting / security / development / reserve buckets at 40/30/20/10

All arithmetic is integer floor division. The user/protocol and
instant/staking splits assign their remainder to the second part so the
three top-level parts always sum to the gross amount. The operations
buckets are floored independently and their sum may fall short of the
protocol share by up to 3 units; that residual is reported, not
redistributed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from gamerewards.core.constants import (
    INSTANT_CLAIM_RATIO,
    OPERATIONS_BUCKET_WEIGHTS,
    USER_SHARE_RATIO,
)
from gamerewards.core.economics_exceptions import InvalidAmountError


def _floor_share(amount: int, ratio: float) -> int:
    # Ratios are exact tenths; scaling to integers avoids float error on big amounts.
    numerator = round(ratio * 10)
    return (amount * numerator) // 10


@dataclass(frozen=True)
class OperationsBreakdown:
    hosting: int
    security: int
    development: int
    reserve: int

    @property
    def total(self) -> int:
        return self.hosting + self.security + self.development + self.reserve

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class RewardDistribution:
    gross_amount: int
    user_share: int
    instant_claim: int
    staking_incentive: int
    protocol_operations: int
    operations_breakdown: OperationsBreakdown

    @property
    def unallocated_operations(self) -> int:
        """Flooring residual left in the protocol share, 0..3 units."""
        return self.protocol_operations - self.operations_breakdown.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gross_amount": self.gross_amount,
            "user_share": self.user_share,
            "instant_claim": self.instant_claim,
            "staking_incentive": self.staking_incentive,
            "protocol_operations": self.protocol_operations,
            "operations_breakdown": self.operations_breakdown.to_dict(),
            "unallocated_operations": self.unallocated_operations,
        }


class RewardDistributor:
    """Splits gross rewards; has no state and never moves value."""

    def distribute(self, gross_amount: int) -> RewardDistribution:
        if isinstance(gross_amount, bool) or not isinstance(gross_amount, int):
            raise InvalidAmountError(
                "Reward amount must be an integer number of minor units",
                details={"amount": repr(gross_amount)},
            )
        if gross_amount < 0:
            raise InvalidAmountError(
                "Reward amount cannot be negative", details={"amount": gross_amount}
            )

        user_share = _floor_share(gross_amount, USER_SHARE_RATIO)
        protocol_share = gross_amount - user_share

        instant_claim = _floor_share(user_share, INSTANT_CLAIM_RATIO)
        staking_incentive = user_share - instant_claim

        return RewardDistribution(
            gross_amount=gross_amount,
            user_share=user_share,
            instant_claim=instant_claim,
            staking_incentive=staking_incentive,
            protocol_operations=protocol_share,
            operations_breakdown=self.allocate_operations(protocol_share),
        )

    @staticmethod
    def allocate_operations(protocol_share: int) -> OperationsBreakdown:
        buckets = {name: _floor_share(protocol_share, weight) for name, weight in OPERATIONS_BUCKET_WEIGHTS}
        return OperationsBreakdown(**buckets)


__all__ = ["OperationsBreakdown", "RewardDistribution", "RewardDistributor"]
