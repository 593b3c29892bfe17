"""
Error taxonomy for the PDF gateway.

Every failure a caller can see is a GatewayError subclass carrying its
HTTP status and a stable machine-readable code. The front end turns
these into JSON responses in one exception handler.
"""

import traceback
from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    http_status: int = 500
    code: str = "internal_error"
    error: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.error
        super().__init__(self.message)

    def to_dict(self, include_stack: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for the JSON error body."""
        return {"error": self.error, "code": self.code}


# ============================================================================
# Authentication (401)
# ============================================================================

class AuthError(GatewayError):
    http_status = 401
    code = "auth_error"
    error = "Unauthorized"


class MissingCredential(AuthError):
    code = "missing_credential"
    error = "API key required"


class InvalidCredential(AuthError):
    code = "invalid_credential"
    error = "Invalid API key"


# ============================================================================
# Request validation (400)
# ============================================================================

class ValidationError(GatewayError):
    http_status = 400
    code = "validation_error"
    error = "Invalid request"

    def to_dict(self, include_stack: bool = False) -> Dict[str, Any]:
        body = super().to_dict(include_stack)
        if self.message != self.error:
            body["message"] = self.message
        return body


class MissingRequiredField(ValidationError):
    code = "missing_required_field"
    error = "URL is required"

    def __init__(self, field: str = "url", message: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InvalidField(ValidationError):
    code = "invalid_field"
    error = "Invalid request field"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


# ============================================================================
# Rendering (500)
# ============================================================================

class RenderError(GatewayError):
    """Failure anywhere in the browser lifecycle. Always reported as 500."""

    http_status = 500
    code = "render_error"
    error = "Failed to generate PDF"

    def to_dict(self, include_stack: bool = False) -> Dict[str, Any]:
        body = super().to_dict(include_stack)
        body["message"] = self.message
        if include_stack:
            body["stack"] = "".join(traceback.format_exception(self))
        return body


class EngineLaunchError(RenderError):
    code = "engine_launch_error"


class NavigationTimeout(RenderError):
    code = "navigation_timeout"


class NavigationError(RenderError):
    code = "navigation_error"


class ExportError(RenderError):
    code = "export_error"
