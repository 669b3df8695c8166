"""Product catalog management."""

from typing import List, Optional

from ..domain.entities import PageRequest, Product
from ..domain.exceptions import ProductNotFoundException
from ..logging_config import get_logger
from ..repositories.interfaces import IProductRepository

logger = get_logger(__name__)


class ProductService:
    """CRUD operations over catalog products."""

    def __init__(self, product_repo: IProductRepository):
        self.product_repo = product_repo

    async def list_products(
        self, page: PageRequest, category: Optional[str] = None
    ) -> List[Product]:
        """
        List products, optionally restricted to one category.

        Args:
            page: Offset, limit and sort key (newest, oldest,
                priceLowest, priceHighest)
            category: Category filter

        Returns:
            Matching products
        """
        return await self.product_repo.list(page, category=category)

    async def get_product(self, product_id: str) -> Product:
        product = await self.product_repo.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    async def create_product(self, data: dict) -> Product:
        product = await self.product_repo.create(data)
        logger.info("Product created", product_id=product.id, stock=product.stock)
        return product

    async def update_product(self, product_id: str, changes: dict) -> Product:
        if not changes:
            return await self.get_product(product_id)

        product = await self.product_repo.update(product_id, changes)
        if product is None:
            raise ProductNotFoundException(product_id)
        logger.info("Product updated", product_id=product_id, fields=sorted(changes))
        return product

    async def delete_product(self, product_id: str) -> None:
        if not await self.product_repo.delete(product_id):
            raise ProductNotFoundException(product_id)
        logger.info("Product deleted", product_id=product_id)
