"""
Repository interfaces (Abstract Base Classes).

Define the contract for user, product and order persistence, and for
grouping writes into one all-or-nothing unit, independent of the
underlying storage mechanism.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence

from ..domain.entities import Order, OrderLine, PageRequest, Product, User

Operation = Callable[[], Awaitable[Any]]


class IUserRepository(ABC):
    """Abstract repository interface for user records."""

    @abstractmethod
    async def list(self, page: PageRequest) -> List[User]:
        """
        List users.

        Args:
            page: Offset, limit and sort key (newest or oldest)

        Returns:
            Users in the requested order
        """
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create(self, data: dict) -> User:
        """
        Create a user.

        Raises:
            ConflictException: If the email is already registered
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, changes: dict) -> Optional[User]:
        """
        Apply a partial update.

        Returns:
            Updated user, or None if no user has this id
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """
        Delete a user.

        Returns:
            True if a user was deleted, False if none had this id
        """
        pass


class IProductRepository(ABC):
    """Abstract repository interface for product records and stock."""

    @abstractmethod
    async def list(self, page: PageRequest, category: Optional[str] = None) -> List[Product]:
        """
        List products.

        Args:
            page: Offset, limit and sort key
            category: Only return products of this category

        Returns:
            Products in the requested order
        """
        pass

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def find_by_ids(self, product_ids: Iterable[str]) -> List[Product]:
        """
        Fetch all products whose id is in the given set, in one query.

        Ids without a matching product are simply absent from the result.
        """
        pass

    @abstractmethod
    async def create(self, data: dict) -> Product:
        pass

    @abstractmethod
    async def update(self, product_id: str, changes: dict) -> Optional[Product]:
        pass

    @abstractmethod
    async def delete(self, product_id: str) -> bool:
        pass

    @abstractmethod
    async def decrement_stock(self, product_id: str, amount: int) -> None:
        """
        Lower a product's stock as part of the surrounding transaction.

        The decrement only applies when the product still holds at least
        `amount` units, so stock can never become negative.

        Raises:
            InsufficientStockException: If the row is missing or short
        """
        pass


class IOrderRepository(ABC):
    """Abstract repository interface for orders and their items."""

    @abstractmethod
    async def create(self, user_id: str, lines: Sequence[OrderLine]) -> Order:
        """
        Create an order header plus one item per line, in line order.

        Writes become durable only when the surrounding transaction commits.
        """
        pass

    @abstractmethod
    async def find_by_id_with_items(self, order_id: str) -> Optional[Order]:
        """
        Fetch an order together with its items.

        Returns:
            Order entity if found, None otherwise
        """
        pass


class ITransactionCoordinator(ABC):
    """Groups repository writes into one atomic unit."""

    @abstractmethod
    async def run_atomically(self, operations: Sequence[Operation]) -> List[Any]:
        """
        Run the operations in order inside one transaction.

        Either every operation's effect is committed, or none is.

        Args:
            operations: Zero-argument coroutine functions

        Returns:
            The operations' results, in the same order

        Raises:
            OrderServiceException: Domain errors pass through unchanged;
                storage errors are translated
        """
        pass
