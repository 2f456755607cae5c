"""
All-or-nothing writes: a failure anywhere in a unit leaves no partial state,
and storage-level uniqueness still yields the typed duplicate errors when the
service's own checks are raced
"""
import pytest
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.exceptions import DuplicateReportException, DuplicateReviewException, InvalidRatingException
from models.product import Product
from models.review import Review, ReviewModerationLog, ReviewReport
from models.user import User
from schemas.review import AdminReviewUpdate, GuestReviewCreate, ReportCreate, ReviewCreate, ReviewUpdate
from services.moderation import ModerationService
from services.review import ReviewService
from services.review_feedback import ReviewFeedbackService


async def count_rows(db_session: AsyncSession, model, *criteria) -> int:
    result = await db_session.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar_one()


async def fetch_review(db_session: AsyncSession, review_id) -> Review:
    result = await db_session.execute(
        select(Review).filter_by(id=review_id).execution_options(populate_existing=True))
    return result.scalars().first()


async def failing_recompute(session, product_id):
    raise RuntimeError("aggregate write failed")


async def nothing_found(*args):
    return False


@pytest.fixture
async def approved_review(db_session: AsyncSession, test_user: User, test_product: Product, completed_order):
    return await ReviewService(db_session).create_review(
        test_user.id, ReviewCreate(product_id=test_product.id, rating=4, title="Comfy", content="Good grip"))


class TestFailedRecomputeRollsBack:

    async def test_approval_and_log_are_not_committed(self, db_session: AsyncSession, monkeypatch,
                                                      admin_user: User, test_user: User, test_product: Product):
        pending = await ReviewService(db_session).create_review(
            test_user.id, ReviewCreate(product_id=test_product.id, rating=2))
        review_id, product_id = pending.id, test_product.id
        monkeypatch.setattr("services.moderation.recompute_product_aggregate", failing_recompute)

        with pytest.raises(RuntimeError):
            await ModerationService(db_session).admin_update_review(
                admin_user.id, review_id, AdminReviewUpdate(is_approved=True, moderator_notes="ok"))

        review = await fetch_review(db_session, review_id)
        assert review.is_approved is False
        assert review.moderator_notes is None
        assert await count_rows(db_session, ReviewModerationLog, ReviewModerationLog.review_id == review_id) == 0

        product = await db_session.get(Product, product_id, populate_existing=True)
        assert product.review_count == 0

    async def test_author_delete_keeps_review(self, db_session: AsyncSession, monkeypatch, test_user: User,
                                              test_product: Product, approved_review: Review):
        review_id, product_id = approved_review.id, test_product.id
        monkeypatch.setattr("services.review.recompute_product_aggregate", failing_recompute)

        with pytest.raises(RuntimeError):
            await ReviewService(db_session).delete_review(test_user.id, review_id)

        assert await fetch_review(db_session, review_id) is not None
        product = await db_session.get(Product, product_id, populate_existing=True)
        assert product.review_count == 1
        assert product.average_rating == 4.0

    async def test_admin_delete_keeps_review_and_log_empty(self, db_session: AsyncSession, monkeypatch,
                                                           admin_user: User, approved_review: Review):
        review_id = approved_review.id
        monkeypatch.setattr("services.moderation.recompute_product_aggregate", failing_recompute)

        with pytest.raises(RuntimeError):
            await ModerationService(db_session).admin_delete_review(admin_user.id, review_id, reason="Spam")

        assert await fetch_review(db_session, review_id) is not None
        assert await count_rows(db_session, ReviewModerationLog, ReviewModerationLog.review_id == review_id) == 0


class TestRejectedUpdatePersistsNothing:

    async def test_invalid_rating_leaves_review_and_aggregate(self, db_session: AsyncSession, test_user: User,
                                                              test_product: Product, approved_review: Review):
        review_id, product_id = approved_review.id, test_product.id

        with pytest.raises(InvalidRatingException):
            await ReviewService(db_session).update_review(
                test_user.id, review_id, ReviewUpdate(rating=0, content="Changed my mind"))

        review = await fetch_review(db_session, review_id)
        assert review.rating == 4
        assert review.content == "Good grip"
        assert review.is_approved is True

        product = await db_session.get(Product, product_id, populate_existing=True)
        assert product.review_count == 1
        assert product.average_rating == 4.0
        assert product.rating_distribution["4"] == 100


class TestStorageRejectsRacedDuplicates:

    async def test_user_review(self, db_session: AsyncSession, monkeypatch, test_user: User,
                               test_product: Product, approved_review: Review):
        product_id = test_product.id
        # The competing submission committed after this request's duplicate check ran
        monkeypatch.setattr(ReviewService, "_has_user_review", nothing_found)

        with pytest.raises(DuplicateReviewException) as exc_info:
            await ReviewService(db_session).create_review(
                test_user.id, ReviewCreate(product_id=product_id, rating=1))
        assert exc_info.value.error_code == "DUPLICATE_REVIEW"

        assert await count_rows(db_session, Review, Review.product_id == product_id) == 1
        product = await db_session.get(Product, product_id, populate_existing=True)
        assert product.review_count == 1
        assert product.average_rating == 4.0

    async def test_guest_review(self, db_session: AsyncSession, monkeypatch, test_product: Product):
        product_id = test_product.id
        service = ReviewService(db_session)
        guest_review = GuestReviewCreate(
            product_id=product_id, rating=3, customer_email="guest@example.com", customer_name="Gus Guest")
        await service.create_guest_review(guest_review)
        monkeypatch.setattr(ReviewService, "_has_guest_review", nothing_found)

        with pytest.raises(DuplicateReviewException):
            await service.create_guest_review(guest_review)

        assert await count_rows(db_session, Review, Review.product_id == product_id) == 1

    async def test_report(self, db_session: AsyncSession, monkeypatch, other_user: User,
                          approved_review: Review):
        review_id = approved_review.id
        service = ReviewFeedbackService(db_session)
        await service.report_review(other_user.id, ReportCreate(review_id=review_id, reason="SPAM"))
        monkeypatch.setattr(ReviewFeedbackService, "_has_reported", nothing_found)

        with pytest.raises(DuplicateReportException):
            await service.report_review(other_user.id, ReportCreate(review_id=review_id, reason="OTHER"))

        assert await count_rows(db_session, ReviewReport, ReviewReport.review_id == review_id) == 1
        review = await fetch_review(db_session, review_id)
        assert review.report_count == 1
