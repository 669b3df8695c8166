"""
Tests for custom exceptions
"""

from order_service.domain.exceptions import (ConflictException,
                                             InsufficientStockException,
                                             NotFoundException,
                                             OrderNotFoundException,
                                             OrderServiceException,
                                             ProductNotFoundException,
                                             ReferenceNotFoundException,
                                             StorageException,
                                             UserNotFoundException,
                                             ValidationException)


class TestOrderServiceExceptions:
    """Test domain exception hierarchy and payloads"""

    def test_base_exception(self):
        exc = OrderServiceException("boom", {"a": 1})
        assert str(exc) == "boom"
        assert exc.details == {"a": 1}

    def test_base_exception_default_details(self):
        assert OrderServiceException("boom").details == {}

    def test_validation_exception(self):
        exc = ValidationException("quantity", 0, "must be at least 1")
        assert isinstance(exc, OrderServiceException)
        assert "quantity" in exc.message
        assert exc.details == {"field": "quantity", "value": "0", "reason": "must be at least 1"}

    def test_insufficient_stock_lists_products(self):
        exc = InsufficientStockException(
            [
                {"product_id": "p1", "requested": 3, "available": 2},
                {"product_id": "p2", "requested": 1, "available": 0},
            ]
        )
        assert "p1, p2" in exc.message
        assert len(exc.details["shortages"]) == 2

    def test_insufficient_stock_for_product(self):
        exc = InsufficientStockException.for_product("p1", 4)
        assert exc.details["shortages"] == [
            {"product_id": "p1", "requested": 4, "available": None}
        ]

    def test_not_found_variants(self):
        for cls, entity in (
            (OrderNotFoundException, "order"),
            (ProductNotFoundException, "product"),
            (UserNotFoundException, "user"),
        ):
            exc = cls("x1")
            assert isinstance(exc, NotFoundException)
            assert exc.details == {"entity": entity, "id": "x1"}
            assert "x1" in exc.message

    def test_reference_not_found(self):
        exc = ReferenceNotFoundException("FOREIGN KEY constraint failed")
        assert isinstance(exc, NotFoundException)
        assert exc.message.startswith("Referenced record does not exist")
        assert exc.details == {"reason": "FOREIGN KEY constraint failed"}

    def test_conflict(self):
        exc = ConflictException("user", "email taken")
        assert exc.message == "Conflict on user: email taken"
        assert exc.details["entity"] == "user"

    def test_storage(self):
        exc = StorageException("transaction")
        assert exc.message == "Storage transaction failed"
        assert exc.details == {"operation": "transaction", "reason": None}
