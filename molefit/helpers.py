from functools import wraps

from flask import current_app, jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from pydantic import ValidationError

from molefit.errors import ConfigurationError, ForbiddenError, MissingFieldError, NotFoundError, RequestValidationError
from molefit.models import Doctor


def api_response(success, message, data=None, status_code=200):
    return {
        "success": success,
        "message": message,
        "data": data
    }, status_code


def error_response(error, message, status_code=500):
    return jsonify({"success": False, "error": error, "message": message}), status_code


def get_services():
    """Collaborators wired into the current app by create_app()."""
    return current_app.extensions["molefit"]


def require_setting(name):
    value = current_app.config.get(name)
    if value in (None, ""):
        raise ConfigurationError(name)
    return value


def parse_body(schema, data):
    """
    Validate a JSON body against a pydantic schema.
    Missing required fields raise MissingFieldError naming them (by alias);
    any other problem raises RequestValidationError.
    """
    if not isinstance(data, dict):
        raise RequestValidationError("JSON body required")

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        missing = [str(err["loc"][0]) for err in errors if err["type"] == "missing" and err["loc"]]
        if missing:
            raise MissingFieldError(missing) from e
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in errors
        ]
        raise RequestValidationError("; ".join(problems)) from e


def role_required(*roles):
    """JWT-protect a view and restrict it to the given roles (claim `role`)."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if get_jwt().get("role") not in roles:
                raise ForbiddenError(f"Only {' or '.join(roles)} accounts can do this")
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def current_doctor():
    doctor = Doctor.query.filter_by(user_id=get_jwt_identity()).first()
    if not doctor:
        raise NotFoundError("Doctor profile not found")
    return doctor
