from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..core.exceptions import ConflictError, DomainError, NotFoundError, StorageUnavailable, ValidationError

logger = logging.getLogger(__name__)


def status_for(error: DomainError) -> int:
    if isinstance(error, ConflictError):
        return 409
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, StorageUnavailable):
        return 503
    return 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, error)
        payload = {"success": False, "message": str(error)}
        if isinstance(error, ConflictError):
            payload["conflict"] = error.slot.to_dict()
        return jsonify(payload), status
