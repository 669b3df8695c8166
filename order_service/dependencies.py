"""
Shared dependencies for the application.

Builds request-scoped services on top of the request's database
session, so every repository of one request shares one transaction.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .repositories.sql_repository import (SqlOrderRepository,
                                          SqlProductRepository,
                                          SqlTransactionCoordinator,
                                          SqlUserRepository)
from .services.order_service import OrderPlacementService
from .services.product_service import ProductService
from .services.user_service import UserService


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(SqlUserRepository(db))


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(SqlProductRepository(db))


def get_order_service(db: Session = Depends(get_db)) -> OrderPlacementService:
    """
    Get order placement service for dependency injection.

    Repositories and the transaction coordinator share the session.
    """
    return OrderPlacementService(
        product_repo=SqlProductRepository(db),
        order_repo=SqlOrderRepository(db),
        transaction=SqlTransactionCoordinator(db),
    )
