"""
Gaming Rewards HTTP API

Flask application factory exposing the economics coordinator.

Usage:
    from gamerewards.api import create_app
    app = create_app()
    app.run(host="127.0.0.1", port=8600)
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from flask import Flask, g
from werkzeug.exceptions import RequestEntityTooLarge

from gamerewards.api.base import economics_error_response, error_response
from gamerewards.api.economics_bp import economics_bp
from gamerewards.core.config import Config
from gamerewards.core.economics import EconomicsCoordinator
from gamerewards.core.economics_exceptions import EconomicsError
from gamerewards.core.stake_store import create_stake_store
from gamerewards.core.staking import StakeLedger

__all__ = ["create_app", "build_coordinator", "economics_bp"]

logger = logging.getLogger(__name__)


def build_coordinator(config: Any = Config) -> EconomicsCoordinator:
    """Create a coordinator whose stake store follows ``config.DATA_DIR``."""
    store = create_stake_store(config.DATA_DIR or None)
    return EconomicsCoordinator(ledger=StakeLedger(store=store))


def create_app(
    coordinator: Optional[EconomicsCoordinator] = None,
    config: Any = Config,
) -> Flask:
    """
    Build the Flask app.

    Args:
        coordinator: Coordinator to serve; built from ``config`` when omitted
        config: Configuration class (``Config`` by default)
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.API_MAX_JSON_BYTES

    api_context = {
        "coordinator": coordinator or build_coordinator(config),
        "config": config,
    }

    @app.before_request
    def inject_api_context() -> None:
        """Inject API context into Flask's g object for blueprint access."""
        g.api_context = api_context

    @app.errorhandler(EconomicsError)
    def handle_economics_error(error: EconomicsError) -> Tuple[Any, int]:
        return economics_error_response(error)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error: RequestEntityTooLarge) -> Tuple[Any, int]:
        return error_response(
            f"Request body exceeds {config.API_MAX_JSON_BYTES} bytes",
            status=413,
            code="payload_too_large",
            event_type="api.payload_too_large",
        )

    app.register_blueprint(economics_bp)
    app.extensions["gamerewards"] = api_context
    logger.info(
        "Economics API created",
        extra={"event": "api.created", "environment": config.ENVIRONMENT_TYPE.value},
    )
    return app
