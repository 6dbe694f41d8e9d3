"""
Error types raised by services and controllers.

Every ApiError carries the HTTP status it should be rendered with and a short
`error` label; the app-level handler turns it into the JSON envelope
{"success": false, "error": ..., "message": ...}.
"""


class ApiError(Exception):
    status_code = 500
    error = "Internal server error"

    def __init__(self, message, status_code=None, error=None, details=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error
        self.details = details

    def to_dict(self):
        body = {"success": False, "error": self.error, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class RequestValidationError(ApiError):
    status_code = 400
    error = "Invalid request"


class MissingFieldError(RequestValidationError):
    error = "Missing required fields"

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}", details={"fields": self.fields})


class AuthenticationError(ApiError):
    status_code = 401
    error = "Invalid credentials"


class ForbiddenError(ApiError):
    status_code = 403
    error = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    error = "Not found"


class ConflictError(ApiError):
    status_code = 409
    error = "Conflict"


class ConfigurationError(ApiError):
    error = "Server configuration error"

    def __init__(self, setting):
        self.setting = setting
        super().__init__(f"{setting} is not configured")


class NoPatientAvailable(ApiError):
    status_code = 400
    error = "No patient available"


class NoDoctorAvailable(ApiError):
    error = "No doctor available"


class ProvisioningError(ApiError):
    error = "Failed to prepare exercise completion"


class MintError(ApiError):
    error = "NFT minting failed"
