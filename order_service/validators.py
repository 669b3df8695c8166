"""
Pydantic models for request/response validation.

Wire format is camelCase (`firstName`, `orderItems`, `unitPrice`);
snake_case names are accepted on input as well. Create models reject
unknown fields, update models are partial versions of them.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import (BaseModel, ConfigDict, EmailStr, Field, model_validator)
from pydantic.alias_generators import to_camel

from .domain.entities import (Order, OrderLine, PlaceOrderCommand, Product,
                              ProductCategory, SortOrder, User)

# Largest value an Integer column holds on every supported database
MAX_INTEGER = 2**31 - 1


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictCamelModel(CamelModel):
    """Request model that rejects unknown fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class PartialUpdateModel(StrictCamelModel):
    """Partial update: fields may be omitted but not set to null."""

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def changes(self) -> dict:
        """Fields present in the request, keyed by column name."""
        return self.model_dump(exclude_unset=True, mode="json")


# Request Models


class UserCreate(StrictCamelModel):
    """Request model for creating a user."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=30)
    last_name: str = Field(..., min_length=1, max_length=30)
    address: str


class UserUpdate(PartialUpdateModel):
    """Request model for updating a user."""

    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=30)
    last_name: Optional[str] = Field(None, min_length=1, max_length=30)
    address: Optional[str] = None


class ProductCreate(StrictCamelModel):
    """Request model for creating a product."""

    name: str = Field(..., min_length=1, max_length=60)
    description: str
    category: ProductCategory
    price: float = Field(..., ge=0, strict=True, allow_inf_nan=False)
    stock: int = Field(..., ge=0, le=MAX_INTEGER, strict=True)


class ProductUpdate(PartialUpdateModel):
    """Request model for updating a product."""

    name: Optional[str] = Field(None, min_length=1, max_length=60)
    description: Optional[str] = None
    category: Optional[ProductCategory] = None
    price: Optional[float] = Field(None, ge=0, strict=True, allow_inf_nan=False)
    stock: Optional[int] = Field(None, ge=0, le=MAX_INTEGER, strict=True)


class OrderItemCreate(StrictCamelModel):
    """One requested order line."""

    product_id: str = Field(..., min_length=1)
    unit_price: float = Field(
        ...,
        ge=0,
        strict=True,
        allow_inf_nan=False,
        description="Price per unit captured at order time",
    )
    quantity: int = Field(..., ge=1, le=MAX_INTEGER, strict=True)


class OrderCreate(StrictCamelModel):
    """Request model for placing an order."""

    user_id: str = Field(..., min_length=1)
    order_items: List[OrderItemCreate] = Field(..., min_length=1)

    def to_command(self) -> PlaceOrderCommand:
        return PlaceOrderCommand(
            user_id=self.user_id,
            lines=tuple(
                OrderLine(
                    product_id=item.product_id,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                )
                for item in self.order_items
            ),
        )


def parse_sort_order(value: Optional[str], allowed: Iterable[SortOrder]) -> SortOrder:
    """
    Resolve a listing sort key.

    Unknown or disallowed keys fall back to newest first.
    """
    for order in allowed:
        if order.value == value:
            return order
    return SortOrder.NEWEST


USER_SORT_ORDERS = (SortOrder.NEWEST, SortOrder.OLDEST)
PRODUCT_SORT_ORDERS = tuple(SortOrder)


# Response Models


class UserResponse(CamelModel):
    """Model for user data in responses."""

    id: str
    email: str
    first_name: str
    last_name: str
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            address=user.address,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class ProductResponse(CamelModel):
    """Model for product data in responses."""

    id: str
    name: str
    description: str
    category: ProductCategory
    price: float
    stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            category=product.category,
            price=product.price,
            stock=product.stock,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class OrderItemResponse(CamelModel):
    """Model for one order line in responses."""

    id: str
    product_id: str
    unit_price: float
    quantity: int


class OrderResponse(CamelModel):
    """Model for a placed order, without total."""

    id: str
    user_id: str
    created_at: Optional[datetime] = None
    order_items: List[OrderItemResponse]

    @classmethod
    def from_entity(cls, order: Order, **extra) -> "OrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            created_at=order.created_at,
            order_items=[
                OrderItemResponse(
                    id=item.id,
                    product_id=item.product_id,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                )
                for item in order.items
            ],
            **extra,
        )


class OrderWithTotalResponse(OrderResponse):
    """Model for an order read back with its computed total."""

    total: float

    @classmethod
    def from_entity(cls, order: Order, **extra) -> "OrderWithTotalResponse":
        return super().from_entity(order, total=order.total, **extra)


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str
    message: str
    details: dict = {}
