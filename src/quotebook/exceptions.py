"""Domain exception hierarchy for Quotebook.

All domain-specific exceptions inherit from QuotebookError. This allows
catching all application errors with a single base class while preserving
specificity for individual error types.
"""

from typing import Any
from uuid import UUID


class QuotebookError(Exception):
    """Base exception for all Quotebook errors.

    Includes optional error_code for API responses and extra context.
    """

    error_code: str = "QB_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(QuotebookError):
    """Base exception for validation errors."""

    error_code = "VALIDATION_ERROR"
    status_code = 422


class InvalidAmountError(ValidationError):
    """Raised when a numeric field cannot be used in a calculation."""

    error_code = "INVALID_AMOUNT"

    def __init__(self, field: str, value: Any, reason: str = "not a number") -> None:
        super().__init__(
            f"Invalid {field}: {value!r} ({reason})",
            context={"field": field, "value": str(value), "reason": reason},
        )


class InvalidItemFieldError(ValidationError):
    """Raised when an item edit targets a field that cannot be edited."""

    error_code = "INVALID_ITEM_FIELD"

    def __init__(self, field: str, reason: str | None = None) -> None:
        message = f"Item field cannot be edited: {field}"
        context: dict[str, Any] = {"field": field}
        if reason:
            message = f"{message} ({reason})"
            context["reason"] = reason
        super().__init__(message, context=context)


class InvalidSettingsError(ValidationError):
    """Raised when a settings section fails validation."""

    error_code = "INVALID_SETTINGS"

    def __init__(self, section: str, errors: list[dict[str, str]]) -> None:
        super().__init__(
            f"Invalid {section} settings",
            context={"section": section, "errors": errors},
        )


# =============================================================================
# Document Errors
# =============================================================================


class DocumentError(QuotebookError):
    """Base exception for quote and invoice errors."""

    error_code = "DOCUMENT_ERROR"
    status_code = 400


class DocumentNotFoundError(DocumentError):
    error_code = "DOCUMENT_NOT_FOUND"
    status_code = 404

    def __init__(self, document_id: UUID | str) -> None:
        super().__init__(
            f"Document not found: {document_id}",
            context={"document_id": str(document_id)},
        )


class DocumentLockedError(DocumentError):
    """Raised when editing items or totals of a document in a terminal status."""

    error_code = "DOCUMENT_LOCKED"
    status_code = 409

    def __init__(self, document_id: UUID | str, status: str) -> None:
        super().__init__(
            f"Document {document_id} is {status} and can no longer be edited",
            context={"document_id": str(document_id), "status": status},
        )


class InvalidStatusTransitionError(DocumentError):
    error_code = "INVALID_STATUS_TRANSITION"
    status_code = 409

    def __init__(self, document_id: UUID | str, current: str, target: str) -> None:
        super().__init__(
            f"Cannot move document {document_id} from {current} to {target}",
            context={
                "document_id": str(document_id),
                "current_status": current,
                "target_status": target,
            },
        )


class ConversionError(DocumentError):
    """Raised when a quote cannot be converted into an invoice."""

    error_code = "CONVERSION_ERROR"
    status_code = 409

    def __init__(self, document_id: UUID | str, reason: str) -> None:
        super().__init__(
            f"Cannot convert document {document_id}: {reason}",
            context={"document_id": str(document_id)},
        )


# =============================================================================
# Client Errors
# =============================================================================


class ClientError(QuotebookError):
    """Base exception for client, contact and project errors."""

    error_code = "CLIENT_ERROR"
    status_code = 400


class ClientNotFoundError(ClientError):
    error_code = "CLIENT_NOT_FOUND"
    status_code = 404

    def __init__(self, client_id: UUID | str) -> None:
        super().__init__(
            f"Client not found: {client_id}",
            context={"client_id": str(client_id)},
        )


class ContactNotFoundError(ClientError):
    error_code = "CONTACT_NOT_FOUND"
    status_code = 404

    def __init__(self, contact_id: UUID | str) -> None:
        super().__init__(
            f"Contact not found: {contact_id}",
            context={"contact_id": str(contact_id)},
        )


class ProjectNotFoundError(ClientError):
    error_code = "PROJECT_NOT_FOUND"
    status_code = 404

    def __init__(self, project_id: UUID | str) -> None:
        super().__init__(
            f"Project not found: {project_id}",
            context={"project_id": str(project_id)},
        )


# =============================================================================
# Catalog, Template and Settings Errors
# =============================================================================


class ProductNotFoundError(QuotebookError):
    error_code = "PRODUCT_NOT_FOUND"
    status_code = 404

    def __init__(self, product_id: UUID | str) -> None:
        super().__init__(
            f"Product not found: {product_id}",
            context={"product_id": str(product_id)},
        )


class TemplateNotFoundError(QuotebookError):
    error_code = "TEMPLATE_NOT_FOUND"
    status_code = 404

    def __init__(self, template_id: str) -> None:
        super().__init__(
            f"Template not found: {template_id}",
            context={"template_id": template_id},
        )
