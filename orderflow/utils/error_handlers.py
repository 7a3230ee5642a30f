from flask import jsonify
from marshmallow import ValidationError

from .logger import Log


def _error_response(status_code, error, message, **extra):
    response = {
        "success": False,
        "status_code": status_code,
        "error": error,
        "message": message,
    }
    response.update(extra)
    return jsonify(response), status_code


def handle_permission_error(error):
    return _error_response(403, "PermissionError", str(error))


def handle_validation_error(error):
    return _error_response(400, "Validation Error", error.messages)


def handle_type_error(error):
    Log.error(f"[error_handlers.py][handle_type_error] {str(error)}")
    return _error_response(400, "Type Error", str(error))


# Registries raise ValueError for rejected input
def handle_value_error(error):
    return _error_response(400, "Bad Request", str(error))


def handle_rate_limit(e):
    # description carries the limiter error_message
    return _error_response(
        429,
        "Too Many Requests",
        e.description or "Too many requests, please try again later.",
    )


def handle_auth_error(error):
    status_codes = {"BAD_REQUEST": 400, "UNAUTHORIZED": 401, "FORBIDDEN": 403, "CONFLICT": 409}
    return _error_response(
        status_codes.get(error.status_code, 401),
        "Authentication Error",
        error.message,
    )


def handle_storage_path_error(error):
    return _error_response(400, "Storage Path Error", error.message)


def handle_plan_limit_error(error):
    return _error_response(403, error.code, error.message, meta=error.meta)


def handle_duplicate_product_code(error):
    return _error_response(409, "Duplicate Product Code", error.message, code=error.code)


def handle_invalid_status_transition(error):
    return _error_response(
        409,
        "Invalid Status Transition",
        error.message,
        current=error.current,
        target=error.target,
    )
