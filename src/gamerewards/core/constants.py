"""
Engine constants for the gaming rewards economics core.

These values are part of the engine contract shared with existing callers
and are not configurable through the environment.
"""

from __future__ import annotations

# ==================== Time ====================

MILLISECONDS_PER_DAY = 24 * 60 * 60 * 1000

# ==================== Standing thresholds ====================

MIN_ACCOUNT_AGE_DAYS = 30  # accounts younger than this are suspicious
MAX_SUSPICION_SCORE = 0.7  # scores strictly above this are suspicious
MIN_QUALIFYING_PLAYTIME_MINUTES = 60  # per-game playtime for a qualifying game

# ==================== Reward split ====================

USER_SHARE_RATIO = 0.5
INSTANT_CLAIM_RATIO = 0.6  # of the user share

# Protocol operations buckets, in payout order. Weights sum to 1.0.
OPERATIONS_BUCKET_WEIGHTS = (
    ("hosting", 0.4),
    ("security", 0.3),
    ("development", 0.2),
    ("reserve", 0.1),
)

# ==================== Staking ====================

LOCK_DURATION_DAYS = 30
LOCK_DURATION_MS = LOCK_DURATION_DAYS * MILLISECONDS_PER_DAY
BONUS_MULTIPLIER = 1.5
BASE_ANNUAL_RATE = 0.05
DAYS_PER_YEAR = 365
ESTIMATE_HORIZON_DAYS = 30

# ==================== Protocol treasury ====================

STARTING_CAPITAL = 1_000_000_000  # minor units; baseline for liquidity increase
MONTHLY_EXPENSES = 100_000_000
BASE_MONTHLY_REVENUE = 150_000_000
STAKING_REVENUE_MULTIPLIER = 1.2
