"""Build PlayerSignals from Steam Web API response bodies.

Fetching is the caller's job; this module only reads the JSON shapes of
GetPlayerBans, GetPlayerSummaries and GetOwnedGames. Field types are
checked strictly: a body that does not match those shapes raises
MalformedSignalsError rather than being coerced.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from gamerewards.core.constants import MILLISECONDS_PER_DAY, MIN_QUALIFYING_PLAYTIME_MINUTES
from gamerewards.core.economics_exceptions import MalformedSignalsError
from gamerewards.core.standing import PlayerSignals


def _require_mapping(payload: Any, name: str) -> Mapping[str, Any]:
    """None reads as an empty object; anything else must be a JSON object."""
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise MalformedSignalsError(f"{name} must be a JSON object", details={"field": name})
    return payload


def _require_list(value: Any, name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedSignalsError(f"{name} must be a JSON array", details={"field": name})
    return value


def _first_player(body: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    players = _require_list(body.get("players"), f"{name}.players")
    if not players:
        return {}
    return _require_mapping(players[0], f"{name}.players[0]")


def _flag(entry: Mapping[str, Any], key: str) -> bool:
    value = entry.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise MalformedSignalsError(f"{key} must be a boolean", details={"field": key, "value": repr(value)})
    return value


def _count(entry: Mapping[str, Any], key: str) -> int:
    value = entry.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedSignalsError(
            f"{key} must be a non-negative integer", details={"field": key, "value": repr(value)}
        )
    return value


def account_age_days(time_created_seconds: int, now_ms: int) -> int:
    """Whole days between account creation and ``now_ms``."""
    return max(0, (now_ms - time_created_seconds * 1000) // MILLISECONDS_PER_DAY)


def summarize_owned_games(owned_games_payload: Any) -> Dict[str, int]:
    payload = _require_mapping(owned_games_payload, "owned games")
    response = _require_mapping(payload.get("response"), "owned games.response")
    games = _require_list(response.get("games"), "owned games.response.games")
    playtimes = [
        _count(_require_mapping(game, "owned games.response.games[]"), "playtime_forever")
        for game in games
    ]
    return {
        "owned_games": len(playtimes),
        "qualifying_games": sum(1 for minutes in playtimes if minutes >= MIN_QUALIFYING_PLAYTIME_MINUTES),
        "total_playtime_minutes": sum(playtimes),
    }


def signals_from_steam(
    bans_payload: Any,
    summary_payload: Any,
    owned_games_payload: Any,
    *,
    now_ms: int,
    suspicion_score: float = 0.0,
) -> PlayerSignals:
    """
    Combine the three Steam lookups for one player into PlayerSignals.

    A missing player entry falls back to "no bans" and an account age of 0,
    which the classifier treats as a new account.

    Args:
        bans_payload: GetPlayerBans body, ``{"players": [...]}``
        summary_payload: GetPlayerSummaries body, ``{"response": {"players": [...]}}``
        owned_games_payload: GetOwnedGames body, ``{"response": {"games": [...]}}``
        now_ms: Current time in milliseconds, used for account age
        suspicion_score: Activity heuristic score in [0, 1]

    Raises:
        MalformedSignalsError: If a body, or any field read from it, has the wrong type
    """
    bans = _first_player(_require_mapping(bans_payload, "bans"), "bans")
    summary_body = _require_mapping(summary_payload, "summary")
    summary = _first_player(_require_mapping(summary_body.get("response"), "summary.response"), "summary")

    time_created: Optional[int] = _count(summary, "timecreated") or None
    age = account_age_days(time_created, now_ms) if time_created else 0

    return PlayerSignals(
        vac_banned=_flag(bans, "VACBanned"),
        vac_ban_count=_count(bans, "NumberOfVACBans"),
        community_banned=_flag(bans, "CommunityBanned"),
        game_ban_count=_count(bans, "NumberOfGameBans"),
        account_age_days=age,
        suspicion_score=suspicion_score,
        **summarize_owned_games(owned_games_payload),
    )
