"""
Product rating aggregate: review count, average and per-star distribution,
always derived from the product's approved reviews by a full re-query.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Mapping
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.exceptions import ProductNotFoundException
from models.product import Product
from models.review import Review


def build_rating_distribution(star_counts: Mapping[int, int], total: int) -> Dict[str, int]:
    """
    Percentage of approved reviews per star, rounded half-up independently.

    The values are not normalized, so they may add up to 99 or 101.
    """
    distribution = {str(star): 0 for star in range(1, 6)}
    if total <= 0:
        return distribution

    for star, count in star_counts.items():
        if str(star) not in distribution:
            continue
        percentage = (Decimal(count) * 100 / Decimal(total)).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP)
        distribution[str(star)] = int(percentage)
    return distribution


async def recompute_product_aggregate(session: AsyncSession, product_id: UUID) -> Product:
    """
    Recompute and store the rating aggregate of one product.

    Runs inside the caller's transaction and must be its last write, so the
    aggregate is committed (or rolled back) together with the change that
    triggered it. Safe to call repeatedly.
    """
    # Pending inserts/updates/deletes must be visible to the queries below
    await session.flush()

    approved = (Review.product_id == product_id, Review.is_approved.is_(True))

    totals = await session.execute(
        select(func.count(Review.id), func.avg(Review.rating)).where(*approved)
    )
    total, average = totals.one()

    per_star = await session.execute(
        select(Review.rating, func.count(Review.id))
        .where(*approved)
        .group_by(Review.rating)
    )
    star_counts = {rating: count for rating, count in per_star.all()}

    product = await session.get(Product, product_id)
    if product is None:
        raise ProductNotFoundException()

    average_rating = float(average) if total and average is not None else 0.0

    product.review_count = total or 0
    product.average_rating = average_rating
    product.rating = average_rating
    product.rating_distribution = build_rating_distribution(star_counts, total or 0)

    await session.flush()
    return product
