# lotbook/errors.py

from typing import Any, Dict, List, Optional


class WorkflowError(Exception):
    """
    Base of every failure the core reports to its caller.
    All of them are caller/precondition errors: nothing here is retried.
    """

    code = "WORKFLOW_ERROR"
    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class InvalidTransition(WorkflowError):
    code = "INVALID_TRANSITION"
    http_status = 409


class Unauthorized(WorkflowError):
    code = "UNAUTHORIZED"
    http_status = 403


class IncompleteDelegation(WorkflowError):
    code = "INCOMPLETE_DELEGATION"
    http_status = 409


class FieldOwnershipViolation(WorkflowError):
    code = "FIELD_OWNERSHIP_VIOLATION"
    http_status = 403


class VarietyMismatch(WorkflowError):
    code = "VARIETY_MISMATCH"
    http_status = 422


class ValidationError(WorkflowError):
    code = "VALIDATION_ERROR"
    http_status = 422

    def __init__(self, errors, details: Optional[Dict[str, Any]] = None):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__("Validation failed: " + ", ".join(self.errors), details)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["errors"] = self.errors
        return d


class NotFound(WorkflowError):
    code = "NOT_FOUND"
    http_status = 404


class ConcurrentModification(WorkflowError):
    code = "CONCURRENT_MODIFICATION"
    http_status = 409
