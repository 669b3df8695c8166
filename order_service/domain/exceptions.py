"""
Custom exceptions for the order service domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database, etc.).
"""

from typing import Any, Dict, List, Optional


class OrderServiceException(Exception):
    """Base exception for all order service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(OrderServiceException):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class InsufficientStockException(OrderServiceException):
    """Raised when available stock does not cover a requested quantity."""

    def __init__(self, shortages: List[Dict[str, Any]]):
        product_ids = ", ".join(s["product_id"] for s in shortages)
        super().__init__(
            message=f"Insufficient stock for product(s): {product_ids}",
            details={"shortages": shortages},
        )

    @classmethod
    def for_product(
        cls, product_id: str, requested: int, available: Optional[int] = None
    ) -> "InsufficientStockException":
        return cls(
            [{"product_id": product_id, "requested": requested, "available": available}]
        )


class NotFoundException(OrderServiceException):
    """Raised when a referenced entity does not exist."""

    entity = "Entity"

    def __init__(self, entity_id: str):
        super().__init__(
            message=f"{self.entity} not found: {entity_id}",
            details={"entity": self.entity.lower(), "id": entity_id},
        )


class OrderNotFoundException(NotFoundException):
    entity = "Order"


class ProductNotFoundException(NotFoundException):
    entity = "Product"


class UserNotFoundException(NotFoundException):
    entity = "User"


class ReferenceNotFoundException(NotFoundException):
    """Raised when a write points at a row that does not exist (foreign key)."""

    def __init__(self, reason: Optional[str] = None):
        message = "Referenced record does not exist"
        if reason:
            message += f": {reason}"
        OrderServiceException.__init__(self, message=message, details={"reason": reason})


class ConflictException(OrderServiceException):
    """Raised when a write violates a uniqueness or reference constraint."""

    def __init__(self, entity: str, reason: Optional[str] = None):
        message = f"Conflict on {entity}"
        if reason:
            message += f": {reason}"
        super().__init__(message=message, details={"entity": entity, "reason": reason})


class StorageException(OrderServiceException):
    """Raised when the persistence layer fails for an unclassified reason."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Storage {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )
