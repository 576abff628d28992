"""
Order creation: aggregate the caller's profile and the product from the
upstream services, check stock, price the order, and persist the snapshot.

The stock check reads the catalog without reserving anything, so a
concurrent purchase elsewhere can still win the race. Nothing spans the
upstream reads and the insert: if the insert fails there is nothing to
compensate and no retry.
"""
import asyncio
import time

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import InsufficientStock, InvalidQuantity, NotFound, ServiceError, Unauthorized
from shared.observability import orders_create_duration_seconds, orders_create_total
from .clients import CatalogClient, IdentityClient
from .models import Order, OrderStatus
from .repository import OrderRepository
from .schemas import OrderSnapshot

logger = structlog.get_logger(__name__)


class OrderService:
    def __init__(self, identity: IdentityClient, catalog: CatalogClient):
        self.identity = identity
        self.catalog = catalog

    async def create_order(self, db: AsyncSession, token: str | None, product_id: str, quantity: int) -> Order:
        started = time.perf_counter()
        try:
            order = await self._create_order(db, token, product_id, quantity)
        except ServiceError as e:
            orders_create_total.labels(outcome=e.code.lower()).inc()
            logger.info("order_rejected", product_id=product_id, quantity=quantity, error=e.code, detail=e.detail)
            raise
        finally:
            orders_create_duration_seconds.observe(time.perf_counter() - started)

        orders_create_total.labels(outcome="created").inc()
        logger.info(
            "order_created",
            order_id=order.id,
            user_id=order.user_id,
            product_id=order.product_id,
            quantity=order.quantity,
            total_price=str(order.total_price),
        )
        return order

    async def _create_order(self, db: AsyncSession, token: str | None, product_id: str, quantity: int) -> Order:
        if not token:
            raise Unauthorized()
        if quantity <= 0:
            raise InvalidQuantity()

        # Independent reads; both must finish before any check. The user
        # outcome is judged first, whatever happened to the product read.
        profile, product = await asyncio.gather(
            self.identity.fetch_profile(token),
            self.catalog.fetch_product(product_id),
            return_exceptions=True,
        )
        if isinstance(profile, BaseException):
            raise profile
        if profile is None:
            raise NotFound("user")
        if isinstance(product, BaseException):
            raise product
        if product is None:
            raise NotFound("product")

        if product.stock < quantity:
            raise InsufficientStock(product.id, quantity, product.stock)

        snapshot = OrderSnapshot(
            user_id=profile.id,
            user_name=profile.name,
            user_email=profile.email,
            product_id=product.id,
            product_name=product.name,
            product_price=product.price,
            quantity=quantity,
            total_price=product.price * quantity,
        )
        return await OrderRepository.insert(db, snapshot)

    @staticmethod
    async def list_orders(db: AsyncSession, user_id: str) -> list[Order]:
        return await OrderRepository.list_by_user(db, user_id)

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order | None:
        return await OrderRepository.get_by_id(db, order_id)

    @staticmethod
    async def update_status(db: AsyncSession, order_id: int, status: OrderStatus) -> Order:
        order = await OrderRepository.update_status(db, order_id, status)
        if not order:
            raise NotFound("order")
        logger.info("order_status_updated", order_id=order_id, status=order.status)
        return order

    @staticmethod
    async def delete_order(db: AsyncSession, order_id: int) -> bool:
        # Deleting an order that is already gone still reports success
        removed = await OrderRepository.delete(db, order_id)
        logger.info("order_deleted", order_id=order_id, removed=removed)
        return True
