from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import (
    AuthenticatedIdentity,
    RequestContext,
    create_order_limit,
    get_current_user,
    get_request_context,
    limiter,
    require_admin,
)
from .dependencies import get_order_service
from .schemas import OrderCreate, OrderResponse, OrderStatusUpdate
from .service import OrderService

router = APIRouter(tags=["Orders"])
public_router = APIRouter()  # For any public endpoints (e.g. health check)


@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


# --- QUERIES ---

@router.get("/mine", response_model=list[OrderResponse], summary="myOrders")
async def my_orders(
    user: AuthenticatedIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_orders(db, user.id)


@router.get("/{order_id}", response_model=OrderResponse | None, summary="orderById")
async def order_by_id(
    order_id: int,
    user: AuthenticatedIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_order(db, order_id)


# --- MUTATIONS ---

@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED, summary="createOrder")
@limiter.limit(create_order_limit)
async def create_order(
    request: Request,  # read by slowapi
    payload: OrderCreate,
    context: RequestContext = Depends(get_request_context),
    service: OrderService = Depends(get_order_service),
    db: AsyncSession = Depends(get_db),
):
    return await service.create_order(db, context.token, payload.product_id, payload.quantity)


@router.patch("/{order_id}/status", response_model=OrderResponse, summary="updateOrderStatus")
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    admin: AuthenticatedIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.update_status(db, order_id, payload.status)


@router.delete("/{order_id}", response_model=bool, summary="deleteOrder")
async def delete_order(
    order_id: int,
    admin: AuthenticatedIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.delete_order(db, order_id)
