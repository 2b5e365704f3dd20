"""
Economics API Blueprint

Handles standing screening, reward distribution, staking and protocol
status endpoints. Every route delegates to the EconomicsCoordinator held in
the API context.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple, Type, TypeVar

from flask import Blueprint, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from gamerewards.api.base import (
    error_response,
    get_coordinator,
    get_json_payload,
    result_response,
    success_response,
)
from gamerewards.api.input_validation_schemas import (
    ClassifyInput,
    DistributeInput,
    ProcessRewardInput,
    StakeInput,
    UnstakeInput,
)

logger = logging.getLogger(__name__)

economics_bp = Blueprint("economics", __name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_body(model: Type[ModelT], function: str) -> Tuple[Optional[ModelT], Optional[Tuple[Any, int]]]:
    """Validate the JSON body against ``model``; returns (model, None) or (None, error response)."""
    payload = get_json_payload()
    if payload is None:
        return None, error_response(
            "Request body must be a JSON object",
            status=400,
            code="invalid_json",
            event_type="api.invalid_json",
        )
    try:
        return model.model_validate(payload), None
    except PydanticValidationError as exc:
        logger.warning(
            "PydanticValidationError in %s",
            function,
            extra={"event": "api.invalid_payload", "error_type": "PydanticValidationError", "function": function},
        )
        return None, error_response(
            "Invalid request payload",
            status=400,
            code="invalid_payload",
            context={"errors": exc.errors(include_url=False, include_context=False)},
            event_type="api.invalid_payload",
        )


@economics_bp.route("/standing/classify", methods=["POST"])
def classify_standing() -> Tuple[Any, int]:
    """Classify a player's standing from raw reputation signals."""
    body, error = _parse_body(ClassifyInput, "classify_standing")
    if error:
        return error
    verdict = get_coordinator().screen_player(body.signals)
    return success_response({"verdict": verdict.to_dict()})


@economics_bp.route("/rewards/distribute", methods=["POST"])
def distribute_reward() -> Tuple[Any, int]:
    """Split a gross reward into instant, staking and operations parts."""
    body, error = _parse_body(DistributeInput, "distribute_reward")
    if error:
        return error
    return result_response(get_coordinator().process_reward(body.amount))


@economics_bp.route("/rewards/process", methods=["POST"])
def process_player_reward() -> Tuple[Any, int]:
    """Screen a player, then distribute their reward if they are cleared."""
    body, error = _parse_body(ProcessRewardInput, "process_player_reward")
    if error:
        return error
    result = get_coordinator().process_player_reward(
        body.player_id,
        body.signals,
        body.amount,
        wallet=body.wallet,
        achievement_id=body.achievement_id,
        unlocked_at_ms=body.unlocked_at_ms,
    )
    return result_response(result)


@economics_bp.route("/staking/stake", methods=["POST"])
def stake() -> Tuple[Any, int]:
    body, error = _parse_body(StakeInput, "stake")
    if error:
        return error
    return result_response(get_coordinator().stake(body.user, body.amount), status=201)


@economics_bp.route("/staking/unstake", methods=["POST"])
def unstake() -> Tuple[Any, int]:
    body, error = _parse_body(UnstakeInput, "unstake")
    if error:
        return error
    return result_response(get_coordinator().unstake(body.user, body.stake_id))


# Static rule; Flask matches it before the /staking/<user> converter.
@economics_bp.route("/staking/stats", methods=["GET"])
def staking_stats() -> Tuple[Any, int]:
    """Protocol-wide staking aggregates."""
    stats = get_coordinator().get_staking_stats()
    return success_response({"stats": stats.to_dict()})


@economics_bp.route("/staking/<user>", methods=["GET"])
def staking_info(user: str) -> Tuple[Any, int]:
    """Active stakes of one user with their current accrued yield."""
    info = get_coordinator().get_staking_info(user)
    return success_response(info.to_dict())


@economics_bp.route("/economics/status", methods=["GET"])
def economics_status() -> Tuple[Any, int]:
    """Lifetime reward totals, sustainability and staking aggregates."""
    status = get_coordinator().get_status()
    return success_response(status.to_dict())


@economics_bp.route("/metrics", methods=["GET"])
def metrics() -> Response:
    """Prometheus metrics."""
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
