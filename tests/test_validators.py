"""
Tests for request and response models
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from order_service.domain.entities import (Order, OrderItem, ProductCategory,
                                           SortOrder)
from order_service.validators import (MAX_INTEGER, PRODUCT_SORT_ORDERS,
                                      USER_SORT_ORDERS,
                                      OrderCreate, OrderWithTotalResponse,
                                      ProductCreate, ProductUpdate, UserCreate,
                                      UserUpdate, parse_sort_order)


class TestOrderCreate:
    """Test order request validation"""

    def test_camel_case_to_command(self):
        payload = OrderCreate.model_validate(
            {
                "userId": "u1",
                "orderItems": [
                    {"productId": "p1", "unitPrice": 20, "quantity": 3},
                    {"productId": "p1", "unitPrice": 10, "quantity": 1},
                ],
            }
        )

        command = payload.to_command()

        assert command.user_id == "u1"
        assert [line.product_id for line in command.lines] == ["p1", "p1"]
        assert command.lines[0].unit_price == 20.0
        assert command.requested_quantities() == {"p1": 4}

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            OrderCreate.model_validate({"userId": "u1", "orderItems": []})

    def test_unknown_item_field_rejected(self):
        with pytest.raises(ValidationError):
            OrderCreate.model_validate(
                {
                    "userId": "u1",
                    "orderItems": [
                        {"productId": "p1", "unitPrice": 1, "quantity": 1, "discount": 5}
                    ],
                }
            )


class TestUserModels:
    """Test user request models"""

    def test_create_accepts_camel_case(self):
        user = UserCreate.model_validate(
            {"email": "a@example.com", "firstName": "A", "lastName": "B", "address": "C"}
        )
        assert user.model_dump(mode="json")["first_name"] == "A"

    def test_create_rejects_invalid_email(self):
        with pytest.raises(ValidationError):
            UserCreate.model_validate(
                {"email": "nope", "firstName": "A", "lastName": "B", "address": "C"}
            )

    def test_update_changes_only_sent_fields(self):
        update = UserUpdate.model_validate({"lastName": "Smith"})
        assert update.changes() == {"last_name": "Smith"}

    def test_update_rejects_null(self):
        with pytest.raises(ValidationError, match="cannot be null"):
            UserUpdate.model_validate({"address": None})


class TestProductModels:
    """Test product request models"""

    def test_category_enum(self):
        product = ProductCreate.model_validate(
            {
                "name": "Mat",
                "description": "Yoga mat",
                "category": "SPORTS",
                "price": 25,
                "stock": 4,
            }
        )
        assert product.category is ProductCategory.SPORTS
        assert product.model_dump(mode="json")["category"] == "SPORTS"

    def test_update_serializes_category_value(self):
        update = ProductUpdate.model_validate({"category": "BEAUTY", "price": 0})
        assert update.changes() == {"category": "BEAUTY", "price": 0.0}


class TestSortOrder:
    """Test sort key parsing"""

    def test_known_keys(self):
        assert parse_sort_order("oldest", USER_SORT_ORDERS) is SortOrder.OLDEST
        assert parse_sort_order("priceHighest", PRODUCT_SORT_ORDERS) is SortOrder.PRICE_HIGHEST

    @pytest.mark.parametrize("value", [None, "", "random", "PRICELOWEST"])
    def test_unknown_keys_fall_back_to_newest(self, value):
        assert parse_sort_order(value, PRODUCT_SORT_ORDERS) is SortOrder.NEWEST

    def test_price_sort_not_allowed_for_users(self):
        assert parse_sort_order("priceLowest", USER_SORT_ORDERS) is SortOrder.NEWEST


def test_order_with_total_response():
    order = Order(
        id="o1",
        user_id="u1",
        created_at=datetime(2024, 1, 1),
        items=[OrderItem(id="i1", product_id="p1", unit_price=2.5, quantity=4)],
    )

    body = OrderWithTotalResponse.from_entity(order).model_dump(by_alias=True)

    assert body["total"] == 10.0
    assert body["userId"] == "u1"
    assert body["orderItems"][0]["unitPrice"] == 2.5


class TestNumericBounds:
    """Numbers must be finite, in range for the columns, and not strings"""

    def item(self, **overrides):
        return {"productId": "p1", "unitPrice": 1, "quantity": 1, **overrides}

    @pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_unit_price_rejected(self, price):
        with pytest.raises(ValidationError):
            OrderCreate.model_validate({"userId": "u1", "orderItems": [self.item(unitPrice=price)]})

    def test_non_finite_product_price_rejected(self):
        with pytest.raises(ValidationError):
            ProductUpdate.model_validate({"price": float("inf")})

    def test_quantity_above_column_range_rejected(self):
        with pytest.raises(ValidationError):
            OrderCreate.model_validate({"userId": "u1", "orderItems": [self.item(quantity=2**31)]})

    def test_largest_quantity_accepted(self):
        payload = OrderCreate.model_validate(
            {"userId": "u1", "orderItems": [self.item(quantity=MAX_INTEGER)]}
        )
        assert payload.order_items[0].quantity == MAX_INTEGER

    def test_stock_above_column_range_rejected(self):
        with pytest.raises(ValidationError):
            ProductUpdate.model_validate({"stock": 2**64})

    @pytest.mark.parametrize(
        "overrides", [{"quantity": "2"}, {"unitPrice": "1"}, {"quantity": True}]
    )
    def test_numeric_strings_rejected(self, overrides):
        with pytest.raises(ValidationError):
            OrderCreate.model_validate({"userId": "u1", "orderItems": [self.item(**overrides)]})

    def test_integer_unit_price_still_accepted(self):
        payload = OrderCreate.model_validate({"userId": "u1", "orderItems": [self.item(unitPrice=20)]})
        assert payload.order_items[0].unit_price == 20.0
