"""Application exception hierarchy and the JSON error translator."""

from typing import Any, Dict, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db
from .utils.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base application error with structured context."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses."""
        result = {
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(AppError):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field
        if field and "field" not in self.details:
            self.details["field"] = field

    @classmethod
    def from_form(cls, form) -> "ValidationError":
        """Build an error carrying every field error of a WTForms form."""
        first_field, messages = next(iter(form.errors.items()))
        return cls(
            f"{first_field}: {messages[0]}",
            field=first_field,
            details={"fields": form.errors},
        )


class AuthenticationError(AppError):
    """Raised when a request needs an authenticated principal."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="AUTH_ERROR", details=details)


class AuthorizationError(AppError):
    """Raised when the caller lacks permission for an operation."""

    status_code = 403

    def __init__(
        self,
        message: str = "Insufficient permissions",
        required_role: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="FORBIDDEN", details=details)
        self.required_role = required_role
        if required_role:
            self.details["required_role"] = required_role


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404

    def __init__(
        self, resource: str, identifier: Any = None, details: Optional[Dict[str, Any]] = None
    ):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{message}: {identifier}"
        super().__init__(message, code="NOT_FOUND", details=details)
        self.resource = resource
        self.identifier = identifier
        self.details["resource"] = resource
        if identifier is not None:
            self.details["identifier"] = str(identifier)


class BusinessRuleError(AppError):
    """Raised when a well-formed request breaks a domain rule."""

    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="BUSINESS_RULE", details=details)


def register_error_handlers(app: Flask):
    """Translate every exception escaping a view into a JSON response."""

    @app.errorhandler(AppError)
    def handle_app_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.error("%s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        db.session.rollback()
        code = (error.name or "HTTP_ERROR").upper().replace(" ", "_")
        return jsonify({"error": code, "message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"error": "INTERNAL_ERROR", "message": "Internal server error"}), 500
