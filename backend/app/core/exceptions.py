"""
Custom Exceptions for FlashPrint
================================

Services raise these instead of generic exceptions; the API layer turns them
into JSON error responses using ``status_code``.

Usage:
    from app.core.exceptions import OrderNotFoundError

    if not order:
        raise OrderNotFoundError(order_id)
"""

from typing import Optional, Any, Dict, List


class FlashPrintError(Exception):
    """Base exception for all FlashPrint errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authorization Errors
# ============================================

class AuthorizationError(FlashPrintError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class InvalidSetupKeyError(AuthorizationError):
    """Admin bootstrap attempted without the configured setup key"""

    def __init__(self):
        super().__init__("Invalid setup key")
        self.code = "INVALID_SETUP_KEY"


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(FlashPrintError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class OrderNotFoundError(ResourceNotFoundError):
    def __init__(self, order_id: str):
        super().__init__("Order", order_id)


class AddressNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("Address", user_id)


class ExpenseNotFoundError(ResourceNotFoundError):
    def __init__(self, expense_id: str):
        super().__init__("Expense", expense_id)


class DocumentNotFoundError(ResourceNotFoundError):
    def __init__(self, item_id: str):
        super().__init__("Document", item_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(FlashPrintError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class AddressRequiredError(ValidationError):
    """Orders need a saved delivery address"""

    def __init__(self):
        super().__init__("Please set up your delivery address first")
        self.code = "ADDRESS_REQUIRED"


class NoFilesUploadedError(ValidationError):
    def __init__(self):
        super().__init__("No files uploaded", field="files")
        self.code = "NO_FILES"


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_name: str, allowed_types: List[str]):
        super().__init__(
            f"File '{file_name}' not allowed. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_name": file_name, "allowed_types": allowed_types}


class FileTooLargeError(ValidationError):
    def __init__(self, file_name: str, max_size: int):
        super().__init__(
            f"File '{file_name}' exceeds the {max_size // 1024 // 1024}MB limit"
        )
        self.code = "FILE_TOO_LARGE"
        self.details = {"file_name": file_name, "max_size": max_size}


class InvalidDocumentError(ValidationError):
    """Uploaded PDF is empty, corrupt or has no pages"""

    def __init__(self, file_name: str, reason: str = "Could not read PDF"):
        super().__init__(f"{reason}: {file_name}")
        self.code = "INVALID_DOCUMENT"
        self.details = {"file_name": file_name}


class EmailAlreadyRegisteredError(ValidationError):
    def __init__(self):
        super().__init__("Email already registered", field="email")
        self.code = "EMAIL_TAKEN"


# ============================================
# Reporting Errors
# ============================================

class ReportGenerationError(FlashPrintError):
    """Daily workbook could not be built or written"""

    def __init__(self, message: str, report_date: Optional[str] = None):
        super().__init__(message, code="REPORT_GENERATION_FAILED")
        if report_date:
            self.details["date"] = report_date


def error_response(error: FlashPrintError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
