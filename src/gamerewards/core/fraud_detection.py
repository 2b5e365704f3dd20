"""Reputation and pattern based fraud checks for reward claims."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Set

from gamerewards.core.constants import MILLISECONDS_PER_DAY

logger = logging.getLogger(__name__)

REPUTATION_FLOOR = -100
REPUTATION_CEILING = 100
LOW_REPUTATION_THRESHOLD = -50
MAX_ACHIEVEMENT_AGE_MS = MILLISECONDS_PER_DAY


class FraudDetector:
    """Tracks player reputation and known-bad claim patterns."""

    def __init__(self) -> None:
        self._reputations: Dict[str, int] = {}
        self._suspicious_patterns: Set[str] = set()
        self._lock = threading.RLock()

    @staticmethod
    def user_pattern(player_id: str, wallet: str) -> str:
        return f"{player_id}:{wallet}"

    @staticmethod
    def achievement_pattern(achievement_id: str, user: str) -> str:
        return f"{achievement_id}:{user}"

    def get_reputation(self, player_id: str) -> int:
        with self._lock:
            return self._reputations.get(player_id, 0)

    def update_reputation(self, player_id: str, delta: int) -> int:
        """Apply ``delta`` and clamp the reputation to [-100, 100]."""
        with self._lock:
            current = self._reputations.get(player_id, 0)
            updated = max(REPUTATION_FLOOR, min(REPUTATION_CEILING, current + delta))
            self._reputations[player_id] = updated
        logger.info(
            "Player reputation updated",
            extra={"event": "fraud.reputation.updated", "player_id": player_id, "reputation": updated},
        )
        return updated

    def mark_suspicious_pattern(self, pattern: str) -> None:
        with self._lock:
            self._suspicious_patterns.add(pattern)
        logger.warning(
            "Suspicious pattern marked",
            extra={"event": "fraud.pattern.marked", "pattern": pattern},
        )

    def check_user(self, player_id: str, wallet: str) -> bool:
        """Return True when the player/wallet pair should be held for review."""
        with self._lock:
            if self.user_pattern(player_id, wallet) in self._suspicious_patterns:
                flagged_by = "pattern"
            elif self._reputations.get(player_id, 0) < LOW_REPUTATION_THRESHOLD:
                flagged_by = "reputation"
            else:
                return False
        logger.warning(
            "Player flagged by fraud checks",
            extra={"event": "fraud.user.flagged", "player_id": player_id, "flagged_by": flagged_by},
        )
        return True

    def check_achievement(self, achievement_id: str, user: str, unlocked_at_ms: int, now_ms: int) -> bool:
        """Return True when an achievement claim looks farmed or stale."""
        with self._lock:
            if self.achievement_pattern(achievement_id, user) in self._suspicious_patterns:
                logger.warning(
                    "Suspicious achievement pattern detected",
                    extra={"event": "fraud.achievement.pattern", "achievement_id": achievement_id},
                )
                return True

        age_ms = now_ms - unlocked_at_ms
        if age_ms < 0 or age_ms > MAX_ACHIEVEMENT_AGE_MS:
            logger.warning(
                "Invalid achievement timestamp",
                extra={"event": "fraud.achievement.timestamp", "achievement_id": achievement_id, "age_ms": age_ms},
            )
            return True
        return False

    def reset(self) -> None:
        with self._lock:
            self._reputations.clear()
            self._suspicious_patterns.clear()


__all__ = ["FraudDetector"]
