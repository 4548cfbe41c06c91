# caltrail/errors.py
"""Domain errors raised by routes and services, rendered as JSON by one handler."""

from flask import jsonify


class CalTrailError(Exception):
    status_code = 500
    error = "ServerError"

    def __init__(self, message: str = "", fields: dict | None = None, error: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = fields
        if error:
            self.error = error

    def to_dict(self) -> dict:
        payload = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.fields:
            payload["fields"] = self.fields
        return payload


class NotFound(CalTrailError):
    """Referenced record does not exist; decided before any permission check."""
    status_code = 404
    error = "NotFound"

    def __init__(self, resource: str, message: str = ""):
        super().__init__(message or f"{resource} not found", error=f"{resource}NotFound")
        self.resource = resource


class Forbidden(CalTrailError):
    status_code = 403
    error = "Forbidden"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class InvalidInput(CalTrailError):
    status_code = 422
    error = "ValidationError"


class ConflictOfState(CalTrailError):
    status_code = 409
    error = "Conflict"


class UpstreamError(CalTrailError):
    """External nutrient database failed or is not configured."""
    status_code = 502
    error = "UpstreamError"

    def __init__(self, message: str = "", status_code: int | None = None, error: str | None = None):
        super().__init__(message, error=error)
        if status_code:
            self.status_code = status_code


def register_error_handlers(app) -> None:
    @app.errorhandler(CalTrailError)
    def _domain_error(err: CalTrailError):
        if err.status_code >= 500:
            app.logger.error("%s: %s", err.error, err.message)
        return jsonify(err.to_dict()), err.status_code
