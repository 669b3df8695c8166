"""
Product API router.

CRUD endpoints over catalog products, with sorted and category-filtered
listing.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..config import settings
from ..dependencies import get_product_service
from ..domain.entities import PageRequest, ProductCategory
from ..services.product_service import ProductService
from ..validators import (PRODUCT_SORT_ORDERS, ErrorResponse, ProductCreate,
                          ProductResponse, ProductUpdate, parse_sort_order)

router = APIRouter(prefix="/products", tags=["products"])


@router.get(
    "",
    response_model=List[ProductResponse],
    summary="List products",
)
async def list_products(
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    order: Optional[str] = Query(
        "newest", description="newest, oldest, priceLowest or priceHighest"
    ),
    category: Optional[ProductCategory] = Query(None),
    service: ProductService = Depends(get_product_service),
):
    page = PageRequest(
        offset=offset, limit=limit, order=parse_sort_order(order, PRODUCT_SORT_ORDERS)
    )
    products = await service.list_products(
        page, category=category.value if category else None
    )
    return [ProductResponse.from_entity(product) for product in products]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get product",
)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return ProductResponse.from_entity(await service.get_product(product_id))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload", "model": ErrorResponse}},
    summary="Create product",
)
async def create_product(
    payload: ProductCreate, service: ProductService = Depends(get_product_service)
):
    product = await service.create_product(payload.model_dump(mode="json"))
    return ProductResponse.from_entity(product)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"description": "Invalid payload", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
    },
    summary="Update product",
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    product = await service.update_product(product_id, payload.changes())
    return ProductResponse.from_entity(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"description": "Product is referenced by orders", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
    },
    summary="Delete product",
)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
