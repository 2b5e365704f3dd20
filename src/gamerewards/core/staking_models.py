"""Stake position and per-user stake book records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class StakeStatus(Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class StakePosition:
    """A time-locked deposit. Principal and timing never change after creation."""

    stake_id: str
    user: str
    principal: int
    created_at: int  # ms
    unlock_at: int  # ms
    lock_duration_days: int
    bonus_multiplier: float
    status: StakeStatus = StakeStatus.ACTIVE

    def is_unlocked(self, now_ms: int) -> bool:
        return now_ms >= self.unlock_at

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakePosition":
        return cls(
            stake_id=str(data["stake_id"]),
            user=str(data["user"]),
            principal=int(data["principal"]),
            created_at=int(data["created_at"]),
            unlock_at=int(data["unlock_at"]),
            lock_duration_days=int(data["lock_duration_days"]),
            bonus_multiplier=float(data["bonus_multiplier"]),
            status=StakeStatus(data.get("status", StakeStatus.ACTIVE.value)),
        )


@dataclass
class UserStakeBook:
    """Active positions of one user; ``total_staked`` is the sum of their principals."""

    user: str
    positions: List[StakePosition] = field(default_factory=list)
    total_staked: int = 0

    def find(self, stake_id: str) -> Optional[StakePosition]:
        for position in self.positions:
            if position.stake_id == stake_id:
                return position
        return None

    def add(self, position: StakePosition) -> None:
        self.positions.append(position)
        self.total_staked += position.principal

    def remove(self, stake_id: str) -> StakePosition:
        for index, position in enumerate(self.positions):
            if position.stake_id == stake_id:
                del self.positions[index]
                self.total_staked -= position.principal
                return position
        raise KeyError(stake_id)

    def copy(self) -> "UserStakeBook":
        return UserStakeBook(user=self.user, positions=list(self.positions), total_staked=self.total_staked)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user,
            "total_staked": self.total_staked,
            "positions": [position.to_dict() for position in self.positions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserStakeBook":
        positions = [StakePosition.from_dict(item) for item in data.get("positions", [])]
        return cls(
            user=str(data["user"]),
            positions=positions,
            total_staked=sum(position.principal for position in positions),
        )


@dataclass(frozen=True)
class ProtocolStakingStats:
    total_staked: int
    total_staking_rewards: float
    total_users: int
    total_stakes: int
    average_stake_amount: float
    protocol_liquidity_increase: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ProtocolStakingStats", "StakePosition", "StakeStatus", "UserStakeBook"]
