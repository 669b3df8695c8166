"""
Domain entities for users, products and orders.

Core business objects of the order service. These entities are
framework-agnostic and contain only business logic.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ProductCategory(str, Enum):
    """Catalog categories a product can belong to."""

    FASHION = "FASHION"
    BEAUTY = "BEAUTY"
    SPORTS = "SPORTS"
    ELECTRONICS = "ELECTRONICS"
    HOME_INTERIOR = "HOME_INTERIOR"
    HOUSEHOLD_SUPPLIES = "HOUSEHOLD_SUPPLIES"
    KITCHENWARE = "KITCHENWARE"


class SortOrder(str, Enum):
    """Sort keys accepted by the listing endpoints."""

    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_LOWEST = "priceLowest"
    PRICE_HIGHEST = "priceHighest"


@dataclass
class User:
    """Customer account."""

    id: str
    email: str
    first_name: str
    last_name: str
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Product:
    """
    Sellable product.

    Stock is only ever lowered by order placement; price is the current
    list price and has no bearing on prices already captured by orders.
    """

    id: str
    name: str
    description: str
    category: ProductCategory
    price: float
    stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def can_supply(self, quantity: int) -> bool:
        """Check whether current stock covers the requested quantity."""
        return self.stock >= quantity


@dataclass(frozen=True)
class OrderLine:
    """
    Requested order line, as submitted by the caller.

    Immutable so a command cannot change between the feasibility
    check and the commit.
    """

    product_id: str
    unit_price: float
    quantity: int

    def __post_init__(self):
        """Validate line on creation."""
        if self.quantity < 1:
            raise ValueError(f"Quantity must be at least 1, got {self.quantity}")
        if self.unit_price < 0:
            raise ValueError(f"Unit price must not be negative, got {self.unit_price}")


@dataclass(frozen=True)
class PlaceOrderCommand:
    """Request to place an order for a user."""

    user_id: str
    lines: Tuple[OrderLine, ...]

    def __post_init__(self):
        if not self.lines:
            raise ValueError("An order needs at least one line")

    def requested_quantities(self) -> Dict[str, int]:
        """
        Total quantity requested per product id.

        Lines naming the same product are summed. Keys keep the order in
        which each product id first appears.
        """
        totals: Dict[str, int] = {}
        for line in self.lines:
            totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
        return totals


@dataclass
class OrderItem:
    """Persisted order line with the unit price captured at order time."""

    id: str
    product_id: str
    unit_price: float
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


@dataclass
class Order:
    """
    Placed order.

    The total is derived from the items on every access and never stored.
    """

    id: str
    user_id: str
    items: List[OrderItem] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def total(self) -> float:
        return sum(item.subtotal for item in self.items)


@dataclass(frozen=True)
class PageRequest:
    """Offset pagination and sort key for listing endpoints."""

    offset: int = 0
    limit: int = 10
    order: SortOrder = SortOrder.NEWEST
