"""
Database models for the order service.

This module defines SQLAlchemy ORM models for users, products,
orders and their line items.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (CheckConstraint, Column, DateTime, Float, ForeignKey,
                        Index, Integer, String, Text)
from sqlalchemy.orm import declarative_base, relationship

Base: Any = declarative_base()


def generate_id() -> str:
    """Generate an opaque primary key."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time, naive to match the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserModel(Base):
    """
    Customer account.

    Attributes:
        id: Primary key identifier (uuid string)
        email: Unique email address
        first_name: Given name
        last_name: Family name
        address: Postal address
        created_at: Timestamp of creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(30), nullable=False)
    last_name = Column(String(30), nullable=False)
    address = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    orders = relationship("OrderModel", back_populates="user", passive_deletes="all")

    __table_args__ = (Index("idx_users_created_at", "created_at"),)


class ProductModel(Base):
    """
    Sellable product with its available stock.

    Attributes:
        id: Primary key identifier (uuid string)
        name: Product name
        description: Free text description
        category: Catalog category
        price: Current list price
        stock: Units available for sale, never negative
        created_at: Timestamp of creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(60), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(30), nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        Index("idx_products_category", "category"),
        Index("idx_products_created_at", "created_at"),
        Index("idx_products_price", "price"),
    )


class OrderModel(Base):
    """
    Order header linking a user to its line items.

    Attributes:
        id: Primary key identifier (uuid string)
        user_id: Owning user
        created_at: Timestamp of placement
        items: Line items in submission order
    """

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("UserModel", back_populates="orders")
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_orders_user_id", "user_id"),)


class OrderItemModel(Base):
    """
    One line of an order.

    Attributes:
        id: Primary key identifier (uuid string)
        order_id: Owning order
        product_id: Ordered product
        position: Zero-based index of the line in the submitted order
        unit_price: Price per unit captured when the order was placed
        quantity: Units ordered, at least one
    """

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    position = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("OrderModel", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_order_items_unit_price_non_negative"),
        Index("idx_order_items_order_id", "order_id"),
        Index("idx_order_items_product_id", "product_id"),
    )
