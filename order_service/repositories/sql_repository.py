"""
SQLAlchemy implementation of the user, product and order repositories.

All repositories built for one request share the request's session.
Single-entity CRUD commits immediately; order creation and stock
decrements only flush, and SqlTransactionCoordinator commits them
together.
"""

from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..domain.entities import (Order, OrderItem, OrderLine, PageRequest, Product,
                               ProductCategory, SortOrder, User)
from ..domain.exceptions import (ConflictException, InsufficientStockException,
                                 OrderServiceException,
                                 ReferenceNotFoundException, StorageException)
from ..logging_config import get_logger
from ..models import OrderItemModel, OrderModel, ProductModel, UserModel
from .interfaces import (IOrderRepository, IProductRepository,
                         ITransactionCoordinator, IUserRepository, Operation)

logger = get_logger(__name__)

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def translate_storage_error(
    exc: SQLAlchemyError, entity: str = "record", operation: str = "write"
) -> OrderServiceException:
    """
    Map a storage error to a domain exception.

    Args:
        exc: Error raised by SQLAlchemy
        entity: Entity being written, used in messages
        operation: Operation being performed (create, update, delete, ...)

    Returns:
        ConflictException for uniqueness violations and for deletes of
        still-referenced rows, ReferenceNotFoundException for writes that
        point at missing rows, StorageException otherwise
    """
    if isinstance(exc, IntegrityError):
        reason = str(exc.orig)
        code = getattr(exc.orig, "pgcode", None)
        lowered = reason.lower()

        if code == UNIQUE_VIOLATION or "unique" in lowered:
            return ConflictException(entity, reason)
        if code == FOREIGN_KEY_VIOLATION or "foreign key" in lowered:
            if operation == "delete":
                return ConflictException(entity, "still referenced by other records")
            return ReferenceNotFoundException(reason)

    return StorageException(operation, str(exc))


class SqlRepository:
    """Shared session handling for the SQL repositories."""

    entity = "record"

    def __init__(self, db: Session):
        """
        Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Storage write failed",
                entity=self.entity,
                operation=operation,
                error=str(e),
            )
            raise translate_storage_error(e, self.entity, operation) from e

    def _read_failed(self, operation: str, error: SQLAlchemyError) -> OrderServiceException:
        self.db.rollback()
        logger.error(
            "Storage read failed",
            entity=self.entity,
            operation=operation,
            error=str(error),
        )
        return translate_storage_error(error, self.entity, operation)

    def _get(self, model: Any, record_id: str) -> Any:
        try:
            return self.db.get(model, record_id)
        except SQLAlchemyError as e:
            raise self._read_failed("read", e) from e

    @staticmethod
    def _apply(model: Any, changes: dict) -> None:
        for key, value in changes.items():
            setattr(model, key, value)


class SqlUserRepository(SqlRepository, IUserRepository):
    """SQL implementation for user records."""

    entity = "user"

    async def list(self, page: PageRequest) -> List[User]:
        if page.order == SortOrder.OLDEST:
            order_by = UserModel.created_at.asc()
        else:
            order_by = UserModel.created_at.desc()

        try:
            rows = (
                self.db.query(UserModel)
                .order_by(order_by, UserModel.id)
                .offset(page.offset)
                .limit(page.limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._read_failed("list", e) from e
        return [self._map_to_entity(row) for row in rows]

    async def find_by_id(self, user_id: str) -> Optional[User]:
        row = self._get(UserModel, user_id)
        return self._map_to_entity(row) if row else None

    async def create(self, data: dict) -> User:
        row = UserModel(**data)
        self.db.add(row)
        self._commit("create")
        self.db.refresh(row)
        return self._map_to_entity(row)

    async def update(self, user_id: str, changes: dict) -> Optional[User]:
        row = self._get(UserModel, user_id)
        if row is None:
            return None

        self._apply(row, changes)
        self._commit("update")
        self.db.refresh(row)
        return self._map_to_entity(row)

    async def delete(self, user_id: str) -> bool:
        row = self._get(UserModel, user_id)
        if row is None:
            return False

        self.db.delete(row)
        self._commit("delete")
        return True

    @staticmethod
    def _map_to_entity(row: UserModel) -> User:
        return User(
            id=row.id,
            email=row.email,
            first_name=row.first_name,
            last_name=row.last_name,
            address=row.address,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class SqlProductRepository(SqlRepository, IProductRepository):
    """SQL implementation for products and their stock."""

    entity = "product"

    SORT_COLUMNS = {
        SortOrder.PRICE_LOWEST: ProductModel.price.asc(),
        SortOrder.PRICE_HIGHEST: ProductModel.price.desc(),
        SortOrder.OLDEST: ProductModel.created_at.asc(),
        SortOrder.NEWEST: ProductModel.created_at.desc(),
    }

    async def list(self, page: PageRequest, category: Optional[str] = None) -> List[Product]:
        query = self.db.query(ProductModel)
        if category:
            query = query.filter(ProductModel.category == category)

        order_by = self.SORT_COLUMNS.get(page.order, ProductModel.created_at.desc())
        try:
            rows = (
                query.order_by(order_by, ProductModel.id)
                .offset(page.offset)
                .limit(page.limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._read_failed("list", e) from e
        return [self._map_to_entity(row) for row in rows]

    async def find_by_id(self, product_id: str) -> Optional[Product]:
        row = self._get(ProductModel, product_id)
        return self._map_to_entity(row) if row else None

    async def find_by_ids(self, product_ids: Iterable[str]) -> List[Product]:
        ids = list(product_ids)
        if not ids:
            return []

        try:
            rows = self.db.query(ProductModel).filter(ProductModel.id.in_(ids)).all()
        except SQLAlchemyError as e:
            raise self._read_failed("read", e) from e
        return [self._map_to_entity(row) for row in rows]

    async def create(self, data: dict) -> Product:
        row = ProductModel(**data)
        self.db.add(row)
        self._commit("create")
        self.db.refresh(row)
        return self._map_to_entity(row)

    async def update(self, product_id: str, changes: dict) -> Optional[Product]:
        row = self._get(ProductModel, product_id)
        if row is None:
            return None

        self._apply(row, changes)
        self._commit("update")
        self.db.refresh(row)
        return self._map_to_entity(row)

    async def delete(self, product_id: str) -> bool:
        row = self._get(ProductModel, product_id)
        if row is None:
            return False

        self.db.delete(row)
        self._commit("delete")
        return True

    async def decrement_stock(self, product_id: str, amount: int) -> None:
        # Conditional update: the stock check and the write are one statement
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= amount)
            .values(stock=ProductModel.stock - amount)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            logger.warning(
                "Stock decrement rejected", product_id=product_id, amount=amount
            )
            raise InsufficientStockException.for_product(product_id, amount)

    @staticmethod
    def _map_to_entity(row: ProductModel) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            description=row.description,
            category=ProductCategory(row.category),
            price=row.price,
            stock=row.stock,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class SqlOrderRepository(SqlRepository, IOrderRepository):
    """SQL implementation for orders and their items."""

    entity = "order"

    async def create(self, user_id: str, lines: Sequence[OrderLine]) -> Order:
        row = OrderModel(
            user_id=user_id,
            items=[
                OrderItemModel(
                    product_id=line.product_id,
                    position=position,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                )
                for position, line in enumerate(lines)
            ],
        )
        self.db.add(row)
        self.db.flush()
        return self._map_to_entity(row)

    async def find_by_id_with_items(self, order_id: str) -> Optional[Order]:
        try:
            row = (
                self.db.query(OrderModel)
                .options(selectinload(OrderModel.items))
                .filter(OrderModel.id == order_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._read_failed("read", e) from e
        return self._map_to_entity(row) if row else None

    @staticmethod
    def _map_to_entity(row: OrderModel) -> Order:
        return Order(
            id=row.id,
            user_id=row.user_id,
            created_at=row.created_at,
            items=[
                OrderItem(
                    id=item.id,
                    product_id=item.product_id,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                )
                for item in row.items
            ],
        )


class SqlTransactionCoordinator(ITransactionCoordinator):
    """Runs repository writes on a shared session and commits them once."""

    def __init__(self, db: Session):
        self.db = db

    async def run_atomically(self, operations: Sequence[Operation]) -> List[Any]:
        results: List[Any] = []
        try:
            for operation in operations:
                results.append(await operation())
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Transaction rolled back", error=str(e))
            raise translate_storage_error(e, "order", "transaction") from e
        except Exception:
            self.db.rollback()
            raise

        return results
