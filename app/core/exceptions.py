"""
Application Exception Handling

Single AppException class for all user-visible errors with FastAPI integration.

Storage and parsing failures are recovered where they occur and never reach
this layer; only import rejection, manual-save failure and command
ambiguity are surfaced to the caller.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Invalid file", "INVALID_IMPORT_FILE", 400)
        raise AppException("No match", "NO_MATCHING_VARIANT", 404, {"transcript": "..."})

    Error Codes:
        Catalog:
            - CATALOG_NOT_LOADED (503)
            - PRODUCT_NOT_FOUND (404)

        Backup & Restore:
            - INVALID_IMPORT_FILE (400)
            - SAVE_FAILED (503)
            - NO_BACKUP_FOUND (404)
            - BACKUP_CORRUPTED (422)

        Commands:
            - COMMAND_NOT_UNDERSTOOD (422)
            - NO_MATCHING_VARIANT (404)
            - CLASSIFIER_UNAVAILABLE (503)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "SAVE_FAILED")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def catalog_not_loaded() -> AppException:
    """Create catalog not loaded exception."""
    return AppException(
        "Product catalog not loaded",
        "CATALOG_NOT_LOADED",
        503
    )


def product_not_found(product_id: Optional[str] = None) -> AppException:
    """Create product not found exception."""
    details = {"product_id": product_id} if product_id else {}
    return AppException("Product not found", "PRODUCT_NOT_FOUND", 404, details)


def invalid_import_file(reason: str) -> AppException:
    """Create invalid import file exception."""
    return AppException(
        f"Invalid file format. {reason}",
        "INVALID_IMPORT_FILE",
        400,
        {"reason": reason}
    )


def manual_save_failed() -> AppException:
    """Create manual save failure exception."""
    return AppException(
        "Save failed. Please export a backup immediately.",
        "SAVE_FAILED",
        503
    )


def no_backup_found() -> AppException:
    """Create missing local backup exception."""
    return AppException("No local backup found", "NO_BACKUP_FOUND", 404)


def backup_corrupted() -> AppException:
    """Create corrupted local backup exception."""
    return AppException("Local backup corrupted", "BACKUP_CORRUPTED", 422)


def command_not_understood(transcript: str, reason: str = "") -> AppException:
    """Create unrecognized command exception."""
    message = f'Could not understand: "{transcript}".'
    if reason:
        message = f"{message} {reason}"
    return AppException(
        message,
        "COMMAND_NOT_UNDERSTOOD",
        422,
        {"transcript": transcript, "reason": reason}
    )


def no_matching_variant(transcript: str) -> AppException:
    """Create no matching product/variant exception."""
    return AppException(
        "Could not find matching product/variant to update.",
        "NO_MATCHING_VARIANT",
        404,
        {"transcript": transcript}
    )


def classifier_unavailable() -> AppException:
    """Create classifier not configured exception."""
    return AppException(
        "Command interpreter is not configured",
        "CLASSIFIER_UNAVAILABLE",
        503
    )
