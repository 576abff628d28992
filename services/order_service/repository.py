import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import StoreError
from .models import Order, OrderStatus
from .schemas import OrderSnapshot

logger = structlog.get_logger(__name__)

# Refused or dropped connections surface from the driver as OSError, not SQLAlchemyError
STORE_FAILURES = (SQLAlchemyError, OSError)


async def _rollback_and_raise(db: AsyncSession, operation: str, exc: Exception):
    logger.error("store_error", operation=operation, error=str(exc))
    await db.rollback()
    raise StoreError() from exc


class OrderRepository:
    """Sole owner of the `orders` table. One statement, one commit per call."""

    @staticmethod
    async def insert(db: AsyncSession, snapshot: OrderSnapshot) -> Order:
        order = Order(
            user_id=snapshot.user_id,
            user_name=snapshot.user_name,
            user_email=snapshot.user_email,
            product_id=snapshot.product_id,
            product_name=snapshot.product_name,
            product_price=snapshot.product_price,
            quantity=snapshot.quantity,
            total_price=snapshot.total_price,
            status=OrderStatus.CREATED.value,
        )
        try:
            db.add(order)
            await db.commit()
            await db.refresh(order)
        except STORE_FAILURES as e:
            await _rollback_and_raise(db, "insert", e)
        return order

    @staticmethod
    async def list_by_user(db: AsyncSession, user_id: str) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        try:
            result = await db.execute(stmt)
        except STORE_FAILURES as e:
            await _rollback_and_raise(db, "list_by_user", e)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(db: AsyncSession, order_id: int) -> Order | None:
        try:
            result = await db.execute(select(Order).where(Order.id == order_id))
        except STORE_FAILURES as e:
            await _rollback_and_raise(db, "get_by_id", e)
        return result.scalars().first()

    @staticmethod
    async def update_status(db: AsyncSession, order_id: int, status: OrderStatus) -> Order | None:
        try:
            result = await db.execute(select(Order).where(Order.id == order_id))
            order = result.scalars().first()

            if not order:
                return None

            # No transition rules: any status may follow any other
            order.status = OrderStatus(status).value

            await db.commit()
            await db.refresh(order)
        except STORE_FAILURES as e:
            await _rollback_and_raise(db, "update_status", e)
        return order

    @staticmethod
    async def delete(db: AsyncSession, order_id: int) -> bool:
        """Deletes the order. Returns whether a row was actually removed."""
        try:
            result = await db.execute(delete(Order).where(Order.id == order_id))
            await db.commit()
        except STORE_FAILURES as e:
            await _rollback_and_raise(db, "delete", e)
        return result.rowcount > 0
