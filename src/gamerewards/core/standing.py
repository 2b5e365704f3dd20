"""
Player standing classification.

Turns reputation signals about a player (bans, account age, activity
heuristics, game ownership) into a single eligibility verdict. The first
matching rule wins, so a ban always outranks a merely suspicious signal.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from gamerewards.core.constants import MAX_SUSPICION_SCORE, MIN_ACCOUNT_AGE_DAYS
from gamerewards.core.economics_exceptions import MalformedSignalsError


class Standing(Enum):
    CLEARED = "CLEARED"
    SUSPICIOUS = "SUSPICIOUS"
    BLACKLISTED = "BLACKLISTED"
    INELIGIBLE = "INELIGIBLE"
    ERROR = "ERROR"


class StandingReason(Enum):
    VALID = "VALID"
    VAC_BAN = "VAC_BAN"
    COMMUNITY_BAN = "COMMUNITY_BAN"
    NEW_ACCOUNT = "NEW_ACCOUNT"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    NO_QUALIFYING_GAME = "NO_QUALIFYING_GAME"
    MALFORMED_SIGNALS = "MALFORMED_SIGNALS"


_COUNT_FIELDS = (
    "vac_ban_count",
    "game_ban_count",
    "account_age_days",
    "owned_games",
    "qualifying_games",
    "total_playtime_minutes",
)
_FLAG_FIELDS = ("vac_banned", "community_banned")


@dataclass(frozen=True)
class PlayerSignals:
    """Reputation signals for one player, produced fresh per classification."""

    vac_banned: bool = False
    vac_ban_count: int = 0
    community_banned: bool = False
    game_ban_count: int = 0
    account_age_days: int = 0
    suspicion_score: float = 0.0
    owned_games: int = 0
    qualifying_games: int = 0
    total_playtime_minutes: int = 0

    def problems(self) -> List[str]:
        """Return a description of every structural problem in the signal set."""
        found = []
        for name in _FLAG_FIELDS:
            if not isinstance(getattr(self, name), bool):
                found.append(f"{name} must be a boolean")
        for name in _COUNT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                found.append(f"{name} must be an integer")
            elif value < 0:
                found.append(f"{name} must not be negative")

        score = self.suspicion_score
        if isinstance(score, bool) or not isinstance(score, (int, float)) or math.isnan(score):
            found.append("suspicion_score must be a number")
        elif not 0.0 <= score <= 1.0:
            found.append("suspicion_score must be within [0, 1]")

        if not found and self.qualifying_games > self.owned_games:
            found.append("qualifying_games cannot exceed owned_games")
        return found

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlayerSignals":
        """Build signals from a mapping, rejecting unknown keys."""
        if not isinstance(data, Mapping):
            raise MalformedSignalsError("Player signals must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise MalformedSignalsError(
                "Unknown player signal fields", details={"fields": unknown}
            )
        return cls(**dict(data))


@dataclass(frozen=True)
class StandingVerdict:
    standing: Standing
    reason: StandingReason
    message: str
    signals: Optional[PlayerSignals] = None

    @property
    def is_valid(self) -> bool:
        return self.standing is Standing.CLEARED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "standing": self.standing.value,
            "reason": self.reason.value,
            "message": self.message,
            "signals": self.signals.to_dict() if self.signals else None,
        }


class StandingClassifier:
    """
    Classifies player standing from reputation signals.

    Rules, first match wins:
        1. VAC or community ban             -> BLACKLISTED
        2. account younger than 30 days     -> SUSPICIOUS (new account)
        3. suspicion score above 0.7        -> SUSPICIOUS (activity pattern)
        4. no game with 60+ minutes played  -> INELIGIBLE
        5. otherwise                        -> CLEARED

    The classifier holds no state; malformed signal sets produce an ERROR
    verdict instead of raising.
    """

    def classify(
        self,
        signals: Union[PlayerSignals, Mapping[str, Any]],
        include_signals: bool = True,
    ) -> StandingVerdict:
        if not isinstance(signals, PlayerSignals):
            try:
                signals = PlayerSignals.from_dict(signals)
            except (MalformedSignalsError, TypeError) as exc:
                return StandingVerdict(
                    Standing.ERROR, StandingReason.MALFORMED_SIGNALS, str(exc)
                )

        problems = signals.problems()
        if problems:
            return StandingVerdict(
                Standing.ERROR,
                StandingReason.MALFORMED_SIGNALS,
                "; ".join(problems),
                signals if include_signals else None,
            )

        standing, reason, message = self._evaluate(signals)
        return StandingVerdict(standing, reason, message, signals if include_signals else None)

    @staticmethod
    def _evaluate(signals: PlayerSignals):
        if signals.vac_banned:
            return Standing.BLACKLISTED, StandingReason.VAC_BAN, "VAC ban on record"
        if signals.community_banned:
            return Standing.BLACKLISTED, StandingReason.COMMUNITY_BAN, "Community ban on record"
        if signals.account_age_days < MIN_ACCOUNT_AGE_DAYS:
            return (
                Standing.SUSPICIOUS,
                StandingReason.NEW_ACCOUNT,
                f"Account is {signals.account_age_days} days old",
            )
        if signals.suspicion_score > MAX_SUSPICION_SCORE:
            return (
                Standing.SUSPICIOUS,
                StandingReason.SUSPICIOUS_ACTIVITY,
                f"Activity suspicion score {signals.suspicion_score:.2f}",
            )
        if signals.qualifying_games == 0:
            return (
                Standing.INELIGIBLE,
                StandingReason.NO_QUALIFYING_GAME,
                "No owned game with qualifying playtime",
            )
        return Standing.CLEARED, StandingReason.VALID, "Player standing verified"


__all__ = [
    "PlayerSignals",
    "Standing",
    "StandingClassifier",
    "StandingReason",
    "StandingVerdict",
]
