"""
Workflow error taxonomy.

Every failure a transition can produce is one of these types. Each carries the
HTTP status the API layer maps it to, so routes never need to translate them
individually.
"""
from typing import Dict, Optional


class WorkflowError(Exception):
    status_code = 400
    error_code = "WORKFLOW_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class AuthorizationError(WorkflowError):
    status_code = 403
    error_code = "NOT_PERMITTED"

    def __init__(self, message: str = "Not permitted"):
        super().__init__(message)

    def to_dict(self) -> dict:
        # Never reveal which role could have acted.
        return {"error": self.error_code, "message": "Not permitted"}


class ValidationError(WorkflowError):
    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, details: Dict[str, str], message: str = "Validation failed"):
        super().__init__(message, details)


class InvalidOtpError(WorkflowError):
    status_code = 400
    error_code = "INVALID_OTP"

    def __init__(self, message: str = "Invalid or expired OTP"):
        super().__init__(message)


class NotFoundError(WorkflowError):
    status_code = 404
    error_code = "NOT_FOUND"


class ConflictError(WorkflowError):
    status_code = 409
    error_code = "CONFLICT"


class ExternalServiceError(WorkflowError):
    status_code = 502
    error_code = "EXTERNAL_SERVICE_ERROR"
