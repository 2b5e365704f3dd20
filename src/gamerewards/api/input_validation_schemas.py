from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, StrictInt, constr


class ClassifyInput(BaseModel):
    signals: Dict[str, Any]


class DistributeInput(BaseModel):
    amount: StrictInt


class ProcessRewardInput(BaseModel):
    player_id: constr(min_length=1)
    signals: Dict[str, Any]
    amount: StrictInt
    wallet: Optional[constr(min_length=1)] = None
    achievement_id: Optional[constr(min_length=1)] = None
    unlocked_at_ms: Optional[StrictInt] = None


class StakeInput(BaseModel):
    user: constr(min_length=1)
    amount: StrictInt


class UnstakeInput(BaseModel):
    user: constr(min_length=1)
    stake_id: constr(min_length=1)
