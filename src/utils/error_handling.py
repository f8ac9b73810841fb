"""
Centralized error handling and request logging
Every framework-level error is rendered as the standard response envelope;
internal details are logged server-side only.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from contextvars import ContextVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from models.response import Envelope

# Context variable for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)

class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    SENSITIVE_FIELD_PATTERNS = [
        'password', 'pass', 'token', 'key', 'secret', 'authorization',
        'auth', 'credential', 'cookie'
    ]
    MAX_BODY_LOG_SIZE = 5000  # Truncate large bodies

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively redact sensitive values and truncate long strings"""
        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(str(key)) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data

class StructuredLogger:
    """Structured error logging with request context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True
    ) -> str:
        """Log a JSON error entry and return its trace id"""
        trace_id = request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request:
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(dict(request.headers)),
                "client_ip": request.client.host if request.client else None
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception)
            }
            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.error(json.dumps(log_entry, indent=2, default=str))
        return trace_id

class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a trace id per request and logs the request line"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)
        request.state.trace_id = trace_id

        client = request.client.host if request.client else "unknown"
        logger.info(f"{datetime.now(timezone.utc).isoformat()} - {request.method} {request.url.path} - {client}")

        response = await call_next(request)
        response.headers["X-Trace-ID"] = trace_id
        return response

# Global exception handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors (unknown route, wrong method, ...) as envelopes"""
    if exc.status_code >= 500:
        StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            exception=exc
        )
    return Envelope.fail(str(exc.detail)).to_response(exc.status_code)

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body validation errors (HTTP 422)"""
    validation_details = [
        {
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown")
        }
        for error in exc.errors()
    ]

    StructuredLogger.log_error(
        "validation_error_422",
        f"Request validation failed: {len(validation_details)} validation errors",
        request=request,
        extra_context={"validation_errors": validation_details},
        include_traceback=False
    )

    return Envelope.fail("Invalid request body").to_response(422)

async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle anything a route did not catch; never exposes details"""
    StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc
    )
    return Envelope.fail("An unexpected error occurred").to_response(500)

def setup_error_handling(app):
    """Install request context middleware and the envelope exception handlers"""
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling initialized")
