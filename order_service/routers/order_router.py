"""
Order API router.

Placing an order deducts stock atomically; reading an order returns it
with a total computed from its items.
"""

from fastapi import APIRouter, Depends, status

from ..dependencies import get_order_service
from ..services.order_service import OrderPlacementService
from ..validators import (ErrorResponse, OrderCreate, OrderResponse,
                          OrderWithTotalResponse)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Order placed"},
        400: {"description": "Invalid payload or insufficient stock", "model": ErrorResponse},
        404: {"description": "User or product not found", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Place order",
)
async def create_order(
    payload: OrderCreate,
    service: OrderPlacementService = Depends(get_order_service),
):
    """
    Place an order.

    Every line's `unitPrice` is stored as sent; stock of each product is
    lowered by the total quantity ordered for it.
    """
    order = await service.place_order(payload.to_command())
    return OrderResponse.from_entity(order)


@router.get(
    "/{order_id}",
    response_model=OrderWithTotalResponse,
    responses={404: {"description": "Order not found", "model": ErrorResponse}},
    summary="Get order with total",
)
async def get_order(
    order_id: str,
    service: OrderPlacementService = Depends(get_order_service),
):
    order = await service.get_order_with_total(order_id)
    return OrderWithTotalResponse.from_entity(order)
