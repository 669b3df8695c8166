"""
Order placement business logic.

Checks that stock covers an order, then creates the order and lowers
stock in one atomic unit. Also serves orders with their computed total.
"""

from functools import partial
from typing import Dict, List

from ..domain.entities import Order, PlaceOrderCommand, Product
from ..domain.exceptions import (InsufficientStockException,
                                 OrderNotFoundException,
                                 OrderServiceException,
                                 ProductNotFoundException)
from ..logging_config import get_logger
from ..metrics import track_order_placed, track_order_rejected
from ..repositories.interfaces import (IOrderRepository, IProductRepository,
                                       ITransactionCoordinator)

logger = get_logger(__name__)


class OrderPlacementService:
    """
    Order placement with stock deduction.

    Placement flow:
    1. Fetch every referenced product in one query
    2. Check stock covers the summed quantity per product
    3. Create the order and decrement stock in one transaction
    """

    def __init__(
        self,
        product_repo: IProductRepository,
        order_repo: IOrderRepository,
        transaction: ITransactionCoordinator,
    ):
        """
        Initialize order placement service.

        Args:
            product_repo: Product repository (reads and stock decrements)
            order_repo: Order repository
            transaction: Coordinator that commits writes all-or-nothing
        """
        self.product_repo = product_repo
        self.order_repo = order_repo
        self.transaction = transaction

    async def place_order(self, command: PlaceOrderCommand) -> Order:
        """
        Place an order and deduct stock.

        Items are stored verbatim, including the caller's unit price.
        The returned order carries no total.

        Args:
            command: User id and order lines

        Returns:
            Created order with its items

        Raises:
            ProductNotFoundException: If a referenced product does not exist
            InsufficientStockException: If stock does not cover a quantity
            ReferenceNotFoundException: If the user does not exist
            ConflictException: If a uniqueness constraint is violated
            StorageException: If the store fails otherwise
        """
        requested = command.requested_quantities()

        try:
            products = await self.product_repo.find_by_ids(requested.keys())
            self._check_feasibility(requested, products)
        except OrderServiceException as e:
            track_order_rejected(type(e).__name__)
            logger.info(
                "Order rejected",
                user_id=command.user_id,
                reason=e.message,
            )
            raise

        operations = [partial(self.order_repo.create, command.user_id, command.lines)]
        operations.extend(
            partial(self.product_repo.decrement_stock, product_id, quantity)
            for product_id, quantity in requested.items()
        )

        try:
            results = await self.transaction.run_atomically(operations)
        except Exception as e:
            track_order_rejected(type(e).__name__)
            raise

        order = results[0]
        track_order_placed(len(order.items))
        logger.info(
            "Order placed",
            order_id=order.id,
            user_id=order.user_id,
            items=len(order.items),
        )
        return order

    async def get_order_with_total(self, order_id: str) -> Order:
        """
        Get an order with its items; `total` is derived on access.

        Raises:
            OrderNotFoundException: If no order has this id
        """
        order = await self.order_repo.find_by_id_with_items(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    @staticmethod
    def _check_feasibility(requested: Dict[str, int], products: List[Product]) -> None:
        found = {product.id: product for product in products}

        missing = [product_id for product_id in requested if product_id not in found]
        if missing:
            raise ProductNotFoundException(missing[0])

        shortages = [
            {
                "product_id": product_id,
                "requested": quantity,
                "available": found[product_id].stock,
            }
            for product_id, quantity in requested.items()
            if not found[product_id].can_supply(quantity)
        ]
        if shortages:
            raise InsufficientStockException(shortages)
