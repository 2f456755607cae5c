"""
End-to-end review lifecycle and the product aggregate invariant
"""
import asyncio
from decimal import Decimal, ROUND_HALF_UP
from uuid import uuid4

from hypothesis import given, settings, strategies as st
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from conftest import add_user, create_test_engine
from core.database import Base
from models.product import Product
from models.review import Review
from models.user import User
from schemas.review import AdminReviewUpdate, GuestReviewCreate, ReviewCreate
from services.moderation import ModerationService
from services.rating_aggregator import recompute_product_aggregate
from services.review import ReviewService


class TestReviewLifecycle:

    async def test_verified_user_then_guest_then_approval(self, db_session: AsyncSession, test_user: User,
                                                          admin_user: User, test_product: Product,
                                                          completed_order):
        reviews = ReviewService(db_session)

        user_review = await reviews.create_review(
            test_user.id, ReviewCreate(product_id=test_product.id, rating=5, title="Perfect"))
        assert user_review.is_approved

        await db_session.refresh(test_product)
        assert test_product.review_count == 1
        assert test_product.average_rating == 5.0
        assert test_product.rating_distribution == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 100}

        guest_review = await reviews.create_guest_review(GuestReviewCreate(
            product_id=test_product.id, rating=3, title="Okay",
            customer_email="guest@example.com", customer_name="Gus Guest",
        ))
        assert not guest_review.is_approved

        await db_session.refresh(test_product)
        assert test_product.review_count == 1
        assert test_product.average_rating == 5.0

        await ModerationService(db_session).admin_update_review(
            admin_user.id, guest_review.id, AdminReviewUpdate(is_approved=True))

        await db_session.refresh(test_product)
        assert test_product.review_count == 2
        assert test_product.average_rating == 4.0
        assert test_product.rating_distribution == {"1": 0, "2": 0, "3": 50, "4": 0, "5": 50}


def expected_aggregate(approved_ratings):
    if not approved_ratings:
        return 0, 0.0, {str(star): 0 for star in range(1, 6)}
    total = len(approved_ratings)
    distribution = {}
    for star in range(1, 6):
        percentage = Decimal(approved_ratings.count(star) * 100) / Decimal(total)
        distribution[str(star)] = int(percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return total, sum(approved_ratings) / total, distribution


async def run_moderation_sequence(initial, flips):
    """Seed reviews, flip approvals through the moderation service, return product and ground truth"""
    engine = create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with async_session() as session:
            admin = await add_user(session, "admin@example.com", "Ada", "Admin", role="Admin")
            product = Product(id=uuid4(), name="Property Shoe")
            session.add(product)

            reviews = []
            for index, (rating, approved) in enumerate(initial):
                review = Review(
                    id=uuid4(), product_id=product.id, user_id=None,
                    customer_email=f"guest{index}@example.com", customer_name=f"Guest {index}",
                    rating=rating, is_approved=approved,
                )
                session.add(review)
                reviews.append(review)
            await session.commit()
            await recompute_product_aggregate(session, product.id)
            await session.commit()

            moderation = ModerationService(session)
            for index, approve in flips:
                if not reviews:
                    break
                target = reviews[index % len(reviews)]
                await moderation.admin_update_review(admin.id, target.id, AdminReviewUpdate(is_approved=approve))

            await session.refresh(product)
            approved_ratings = [r.rating for r in reviews if r.is_approved]
            return (
                (product.review_count, product.average_rating, product.rating_distribution),
                expected_aggregate(approved_ratings),
            )
    finally:
        await engine.dispose()


class TestAggregateInvariant:

    @given(
        initial=st.lists(st.tuples(st.integers(min_value=1, max_value=5), st.booleans()), max_size=12),
        flips=st.lists(st.tuples(st.integers(min_value=0, max_value=50), st.booleans()), max_size=8),
    )
    @settings(max_examples=25, deadline=None)
    def test_aggregate_matches_approved_reviews(self, initial, flips):
        stored, expected = asyncio.run(run_moderation_sequence(initial, flips))

        review_count, average_rating, distribution = stored
        expected_count, expected_average, expected_distribution = expected
        assert review_count == expected_count
        assert abs(average_rating - expected_average) < 1e-9
        assert distribution == expected_distribution
