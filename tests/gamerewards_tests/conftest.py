import sys
from pathlib import Path

import pytest

# Make the src directory importable (for `gamerewards.*`) before collection runs.
project_root = Path(__file__).resolve().parents[2]
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

from gamerewards.core.constants import MILLISECONDS_PER_DAY  # noqa: E402

START_MS = 1_700_000_000_000


class FakeClock:
    """Controllable millisecond clock for time-dependent tests"""

    def __init__(self, now_ms=START_MS):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms

    def advance(self, ms=0, days=0):
        self.now_ms += ms + days * MILLISECONDS_PER_DAY
        return self.now_ms


class SequentialIds:
    """Deterministic stake id factory: stake_1, stake_2, ..."""

    def __init__(self):
        self.count = 0

    def __call__(self, user):
        self.count += 1
        return f"stake_{self.count}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    """StakeLedger on an in-memory store with a fake clock and sequential ids"""
    from gamerewards.core.staking import StakeLedger

    return StakeLedger(time_provider=clock, id_factory=SequentialIds())


@pytest.fixture
def coordinator(ledger):
    from gamerewards.core.economics import EconomicsCoordinator

    return EconomicsCoordinator(ledger=ledger)


@pytest.fixture
def cleared_signals():
    """Signals of an established player in good standing"""
    return {
        "vac_banned": False,
        "vac_ban_count": 0,
        "community_banned": False,
        "game_ban_count": 0,
        "account_age_days": 365,
        "suspicion_score": 0.1,
        "owned_games": 12,
        "qualifying_games": 5,
        "total_playtime_minutes": 4200,
    }


@pytest.fixture
def app(coordinator):
    from gamerewards.api import create_app

    app = create_app(coordinator=coordinator)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
