import math
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.review import Review
from schemas.review import ReviewListQuery, ReviewStats
from services.rating_aggregator import build_rating_distribution


SORTABLE_FIELDS = {
    "created_at": Review.created_at,
    "rating": Review.rating,
    "helpful_count": Review.helpful_count,
    "report_count": Review.report_count,
}


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_review_filters(query: ReviewListQuery) -> List[Any]:
    """Translate list filters into SQLAlchemy criteria, skipping unset ones."""
    criteria = []

    if query.rating is not None:
        if isinstance(query.rating, list):
            criteria.append(Review.rating.in_(query.rating))
        else:
            criteria.append(Review.rating == query.rating)

    if query.is_verified is not None:
        criteria.append(Review.is_verified.is_(query.is_verified))
    if query.is_approved is not None:
        criteria.append(Review.is_approved.is_(query.is_approved))
    if query.is_pinned is not None:
        criteria.append(Review.is_pinned.is_(query.is_pinned))

    if query.user_id:
        criteria.append(Review.user_id == query.user_id)
    if query.product_id:
        criteria.append(Review.product_id == query.product_id)
    if query.customer_email:
        criteria.append(Review.customer_email == query.customer_email)

    if query.start_date:
        criteria.append(Review.created_at >= query.start_date)
    if query.end_date:
        criteria.append(Review.created_at <= query.end_date)

    if query.search:
        # Search text is literal; LIKE wildcards in it are escaped
        pattern = f"%{escape_like(query.search)}%"
        criteria.append(or_(
            Review.title.ilike(pattern, escape="\\"),
            Review.content.ilike(pattern, escape="\\"),
            Review.customer_name.ilike(pattern, escape="\\"),
            Review.customer_email.ilike(pattern, escape="\\"),
        ))

    return criteria


class ReviewQueryService:
    """Read side: filtered, sorted, paginated review listings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_reviews(self, query: ReviewListQuery) -> Dict[str, Any]:
        criteria = build_review_filters(query)
        offset = (query.page - 1) * query.limit

        sort_column = SORTABLE_FIELDS[query.sort_by]
        order = sort_column.asc() if query.sort_order == "asc" else sort_column.desc()

        total_query = select(func.count()).select_from(Review).where(*criteria)
        total = (await self.db.execute(total_query)).scalar_one()

        reviews_query = (
            select(Review)
            .where(*criteria)
            .order_by(order, Review.id)
            .offset(offset)
            .limit(query.limit)
        )
        reviews = (await self.db.execute(reviews_query)).scalars().all()

        return {
            "reviews": list(reviews),
            "pagination": {
                "page": query.page,
                "limit": query.limit,
                "total": total,
                "pages": math.ceil(total / query.limit),
            },
        }

    async def get_product_reviews(self, product_id: UUID, query: Optional[ReviewListQuery] = None) -> Dict[str, Any]:
        query = query or ReviewListQuery()
        return await self.list_reviews(
            query.model_copy(update={"product_id": product_id, "is_approved": True}))

    async def get_user_reviews(self, user_id: UUID, query: Optional[ReviewListQuery] = None) -> Dict[str, Any]:
        query = query or ReviewListQuery()
        return await self.list_reviews(query.model_copy(update={"user_id": user_id}))

    async def get_pending_reviews(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        """Moderation queue, oldest submissions first."""
        return await self.list_reviews(ReviewListQuery(
            page=page,
            limit=limit,
            is_approved=False,
            sort_by="created_at",
            sort_order="asc",
        ))

    async def get_product_review_stats(self, product_id: UUID) -> ReviewStats:
        """Live review statistics for one product, read straight from the reviews table."""
        for_product = Review.product_id == product_id
        approved = Review.is_approved.is_(True)

        total, average = (await self.db.execute(
            select(func.count(Review.id), func.avg(Review.rating)).where(for_product, approved)
        )).one()

        per_star = await self.db.execute(
            select(Review.rating, func.count(Review.id))
            .where(for_product, approved)
            .group_by(Review.rating)
        )

        async def count(*criteria) -> int:
            result = await self.db.execute(
                select(func.count()).select_from(Review).where(for_product, *criteria))
            return result.scalar_one()

        return ReviewStats(
            product_id=product_id,
            total_reviews=total or 0,
            average_rating=float(average) if average is not None else 0.0,
            rating_distribution=build_rating_distribution(dict(per_star.all()), total or 0),
            verified_reviews=await count(Review.is_verified.is_(True)),
            guest_reviews=await count(Review.user_id.is_(None)),
            pending_reviews=await count(Review.is_approved.is_(False)),
            reported_reviews=await count(Review.report_count > 0),
        )
