"""
Base utilities for the API blueprint

Provides the coordinator lookup and response helpers shared by routes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from flask import g, jsonify, request

from gamerewards.core.economics_exceptions import (
    EconomicsError,
    EconomicsValidationError,
    IneligiblePlayerError,
    LockActiveError,
    NoStakeBookError,
    OperationResult,
    StakeNotFoundError,
    StakeStoreError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match decides the status.
_ERROR_STATUS = (
    (IneligiblePlayerError, 403),
    (NoStakeBookError, 404),
    (StakeNotFoundError, 404),
    (LockActiveError, 409),
    (StakeStoreError, 500),
    (EconomicsValidationError, 400),
)


def get_api_context() -> Dict[str, Any]:
    """Get the API context stored in Flask's g object during request setup."""
    return g.get("api_context", {})


def get_coordinator() -> Any:
    """Get the economics coordinator from context."""
    return get_api_context().get("coordinator")


def success_response(payload: Dict[str, Any], status: int = 200) -> Tuple[Any, int]:
    """Return a success payload with consistent structure."""
    body = {"success": True, **payload}
    return jsonify(body), status


def error_response(
    message: str,
    status: int = 400,
    code: str = "bad_request",
    context: Optional[Dict[str, Any]] = None,
    event_type: str = "api.error",
) -> Tuple[Any, int]:
    """Return an error payload and log it with its request path."""
    log = logger.error if status >= 500 else logger.warning
    log(
        "API request failed: %s",
        message,
        extra={"event": event_type, "code": code, "status": status, "path": request.path},
    )
    body: Dict[str, Any] = {"success": False, "error": message, "code": code}
    if context:
        body["details"] = context
    return jsonify(body), status


def status_for_error(error: EconomicsError) -> int:
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 400 if error.recoverable else 500


def economics_error_response(error: EconomicsError) -> Tuple[Any, int]:
    return error_response(
        error.message,
        status=status_for_error(error),
        code=error.code,
        context=error.details,
        event_type="api.economics_error",
    )


def result_response(result: OperationResult, status: int = 200) -> Tuple[Any, int]:
    """Render an ``OperationResult`` whose value has ``to_dict()``."""
    if not result.success:
        return economics_error_response(result.error)
    return success_response(result.value.to_dict(), status=status)


def get_json_payload() -> Optional[Dict[str, Any]]:
    """Return the JSON object body, or None if the body is not a JSON object."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None
    return payload
