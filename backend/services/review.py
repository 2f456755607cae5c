from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError
from typing import Optional
from uuid import UUID

from core.config import settings
from core.database import atomic
from core.exceptions import (
    InvalidRatingException,
    DuplicateReviewException,
    ProductNotFoundException,
    UserNotFoundException,
    ReviewNotFoundException,
    ReviewForbiddenException,
)
from core.utils.logging import structured_logger
from models.product import Product
from models.review import Review
from models.user import User
from schemas.review import (
    AuthenticatedIdentity,
    GuestIdentity,
    GuestReviewCreate,
    ReviewCreate,
    ReviewUpdate,
)
from services.content_filter import profanity_filter
from services.purchase_verification import PurchaseVerifier
from services.rating_aggregator import recompute_product_aggregate


MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating: Optional[int]) -> None:
    if rating is None or isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRatingException()


def clean_text(text: Optional[str]) -> Optional[str]:
    """Sanitize user supplied text; blank values are stored as NULL."""
    if text is None or not text.strip():
        return None
    text = text.strip()
    if settings.ENABLE_PROFANITY_FILTER:
        return profanity_filter.clean(text)
    return text


class ReviewService:
    """Review submission (authenticated and guest) and author-owned changes."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.verifier = PurchaseVerifier(db)

    async def get_review_by_id(self, review_id: UUID) -> Optional[Review]:
        result = await self.db.execute(select(Review).filter_by(id=review_id))
        return result.scalars().first()

    async def create_review(self, user_id: UUID, review_data: ReviewCreate) -> Review:
        validate_rating(review_data.rating)

        if await self._has_user_review(user_id, review_data.product_id):
            raise DuplicateReviewException()

        if not await self.db.get(Product, review_data.product_id):
            raise ProductNotFoundException()

        user = await self.db.get(User, user_id)
        if not user:
            raise UserNotFoundException()

        verification = await self.verifier.verify(
            AuthenticatedIdentity(user_id), review_data.product_id, review_data.order_id
        )
        is_approved = settings.AUTO_APPROVE_VERIFIED_USERS and verification.is_verified

        new_review = Review(
            user_id=user_id,
            product_id=review_data.product_id,
            order_id=verification.order_id,
            rating=review_data.rating,
            title=clean_text(review_data.title),
            content=clean_text(review_data.content),
            customer_email=user.email,
            customer_name=user.full_name,
            is_verified=verification.is_verified,
            is_approved=is_approved,
        )
        await self._insert(new_review)

        structured_logger.info(
            message="Review created",
            user_id=user_id,
            review_id=new_review.id,
            product_id=new_review.product_id,
            metadata={
                "is_verified": new_review.is_verified,
                "is_approved": new_review.is_approved,
            }
        )
        return new_review

    async def create_guest_review(self, review_data: GuestReviewCreate) -> Review:
        validate_rating(review_data.rating)

        if await self._has_guest_review(review_data.customer_email, review_data.product_id):
            raise DuplicateReviewException("You have already reviewed this product with this email")

        if not await self.db.get(Product, review_data.product_id):
            raise ProductNotFoundException()

        identity = GuestIdentity(review_data.customer_email, review_data.customer_name)
        verification = await self.verifier.verify(identity, review_data.product_id, review_data.order_id)
        is_approved = settings.AUTO_APPROVE_GUESTS and verification.is_verified

        new_review = Review(
            user_id=None,
            product_id=review_data.product_id,
            order_id=verification.order_id,
            rating=review_data.rating,
            title=clean_text(review_data.title),
            content=clean_text(review_data.content),
            customer_email=identity.email,
            customer_name=clean_text(identity.name) or identity.name,
            is_verified=verification.is_verified,
            is_approved=is_approved,
        )
        await self._insert(new_review)

        structured_logger.info(
            message="Guest review created",
            review_id=new_review.id,
            product_id=new_review.product_id,
            metadata={
                "is_verified": new_review.is_verified,
                "is_approved": new_review.is_approved,
            }
        )
        return new_review

    async def update_review(self, user_id: UUID, review_id: UUID, review_data: ReviewUpdate) -> Review:
        review = await self.get_review_by_id(review_id)
        if not review:
            raise ReviewNotFoundException()

        # Guest reviews have no owner and cannot be edited through this path
        if review.user_id is None or review.user_id != user_id:
            raise ReviewForbiddenException("You can only update your own reviews")

        changes = review_data.model_dump(exclude_unset=True)

        if "rating" in changes:
            validate_rating(changes["rating"])

        was_approved = review.is_approved
        rating_changed = "rating" in changes and changes["rating"] != review.rating

        # Only a real change of title or content sends the review back to moderation
        text_changed = False
        for field in ("title", "content"):
            if field in changes:
                cleaned = clean_text(changes[field])
                if cleaned != getattr(review, field):
                    text_changed = True
                changes[field] = cleaned

        async with atomic(self.db):
            for key, value in changes.items():
                setattr(review, key, value)
            if text_changed:
                review.is_approved = False

            if (rating_changed and was_approved) or (text_changed and was_approved):
                await recompute_product_aggregate(self.db, review.product_id)

        await self.db.refresh(review)
        return review

    async def delete_review(self, user_id: UUID, review_id: UUID) -> None:
        review = await self.get_review_by_id(review_id)
        if not review:
            raise ReviewNotFoundException()

        if review.user_id is None or review.user_id != user_id:
            raise ReviewForbiddenException("You can only delete your own reviews")

        product_id = review.product_id
        async with atomic(self.db):
            await self.db.delete(review)
            await recompute_product_aggregate(self.db, product_id)

    async def can_user_review(self, user_id: UUID, product_id: UUID) -> bool:
        if await self._has_user_review(user_id, product_id):
            return False

        if not settings.REQUIRE_PURCHASE_FOR_REVIEW:
            return True

        verification = await self.verifier.verify(AuthenticatedIdentity(user_id), product_id)
        return verification.is_verified

    async def _insert(self, review: Review) -> None:
        try:
            async with atomic(self.db):
                self.db.add(review)
                if review.is_approved:
                    await recompute_product_aggregate(self.db, review.product_id)
        except IntegrityError as e:
            # A concurrent submission won the unique constraint
            raise DuplicateReviewException() from e

        await self.db.refresh(review)

    async def _has_user_review(self, user_id: UUID, product_id: UUID) -> bool:
        result = await self.db.execute(
            select(Review.id).filter_by(user_id=user_id, product_id=product_id)
        )
        return result.scalars().first() is not None

    async def _has_guest_review(self, customer_email: str, product_id: UUID) -> bool:
        result = await self.db.execute(
            select(Review.id).where(
                Review.customer_email == customer_email,
                Review.product_id == product_id,
                Review.user_id.is_(None),
            )
        )
        return result.scalars().first() is not None
