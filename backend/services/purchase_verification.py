from typing import NamedTuple, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.orders import Order, OrderItem, ORDER_STATUS_COMPLETED
from schemas.review import AuthenticatedIdentity, GuestIdentity, ReviewerIdentity


class PurchaseVerification(NamedTuple):
    is_verified: bool
    order_id: Optional[UUID] = None


class PurchaseVerifier:
    """Looks for a completed order of the reviewer that contains the product."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def verify(
        self,
        identity: ReviewerIdentity,
        product_id: UUID,
        order_id: Optional[UUID] = None
    ) -> PurchaseVerification:
        query = (
            select(Order.id)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .where(Order.status == ORDER_STATUS_COMPLETED, OrderItem.product_id == product_id)
        )

        if isinstance(identity, AuthenticatedIdentity):
            query = query.where(Order.user_id == identity.user_id)
        elif isinstance(identity, GuestIdentity):
            query = query.where(func.lower(Order.customer_email) == identity.email.lower())
        else:
            raise TypeError(f"Unsupported reviewer identity: {identity!r}")

        if order_id:
            query = query.where(Order.id == order_id)

        result = await self.db.execute(query.order_by(Order.created_at.desc()).limit(1))
        matched_order_id = result.scalars().first()

        if matched_order_id is None:
            return PurchaseVerification(is_verified=False)
        return PurchaseVerification(is_verified=True, order_id=matched_order_id)
