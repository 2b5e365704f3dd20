"""
Gaming Rewards Engine

Reward economics for achievement payouts: player standing screening,
deterministic reward splits, and time-locked staking with bonus yield.

Main Components:
- Standing: eligibility verdicts from reputation signals
- Distribution: user / staking / protocol-operations reward split
- Staking: per-user stake books with lock periods and compounding yield
- Economics: coordinator exposing the above to the API and CLI
"""

__version__ = "0.1.0"
__author__ = "Gaming Rewards Development Team"

__all__ = []
