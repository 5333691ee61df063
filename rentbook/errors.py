"""Application error types and API response helpers."""

from typing import Any, Dict

from fastapi import HTTPException, status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class ValidationError(AppError):
    """Input failed validation before anything was persisted."""

    def __init__(self, message: str):
        super().__init__(message, "validation_error", status.HTTP_400_BAD_REQUEST)


class PropertyNotFoundError(AppError):
    """Referenced property does not exist."""

    def __init__(self, message: str = "Property not found."):
        super().__init__(message, "property_not_found", status.HTTP_404_NOT_FOUND)


class PropertyCodeTakenError(AppError):
    """Another property already uses the requested code."""

    def __init__(self, message: str = "Property code is already in use."):
        super().__init__(message, "property_code_taken", status.HTTP_409_CONFLICT)


class BillNotFoundError(AppError):
    """Referenced bill does not exist."""

    def __init__(self, message: str = "Bill not found."):
        super().__init__(message, "bill_not_found", status.HTTP_404_NOT_FOUND)


class ClaimNotFoundError(AppError):
    """Referenced payment claim does not exist on the bill."""

    def __init__(self, message: str = "Payment claim not found."):
        super().__init__(message, "claim_not_found", status.HTTP_404_NOT_FOUND)


class ClaimAlreadyProcessedError(AppError):
    """Payment claim is no longer pending."""

    def __init__(self, message: str = "This payment claim has already been processed."):
        super().__init__(message, "claim_already_processed", status.HTTP_409_CONFLICT)


class InvalidStatusTransitionError(AppError):
    """Bill status change is not allowed from the current status."""

    def __init__(self, message: str):
        super().__init__(message, "invalid_status_transition", status.HTTP_409_CONFLICT)


class BillNotSettledError(AppError):
    """Bill still has a remaining balance."""

    def __init__(self, message: str):
        super().__init__(message, "bill_not_settled", status.HTTP_409_CONFLICT)


class UnauthorizedError(AppError):
    """Caller did not identify itself."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "unauthorized", status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(AppError):
    """Caller is not allowed to perform this action."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, "forbidden", status.HTTP_403_FORBIDDEN)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


def raise_app_error(error: AppError) -> None:
    """Raise an HTTPException from an AppError."""
    raise HTTPException(
        status_code=error.http_status,
        detail=error_response(error),
    ) from error
