"""Core reward-economics engine."""
