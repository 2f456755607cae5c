"""
Helpful votes and abuse reports on reviews.

Both counters on the review are recomputed from their child rows inside the
same transaction as the vote or report that changed them.
"""
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.database import atomic
from core.exceptions import (
    DuplicateReportException,
    ReviewForbiddenException,
    ReviewNotFoundException,
)
from core.utils.logging import structured_logger
from models.review import Review, ReviewHelpfulVote, ReviewReport
from schemas.review import IpVoter, ReportCreate, UserVoter, VoterKey


class ReviewFeedbackService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def vote_helpful(self, user_id: UUID, review_id: UUID, is_helpful: bool) -> None:
        await self.cast_vote(UserVoter(user_id), review_id, is_helpful)

    async def vote_helpful_anonymous(self, ip_address: str, review_id: UUID, is_helpful: bool) -> None:
        # No self-vote check is possible for anonymous voters
        await self.cast_vote(IpVoter(ip_address), review_id, is_helpful)

    async def cast_vote(self, voter: VoterKey, review_id: UUID, is_helpful: bool) -> None:
        """Insert or overwrite the voter's opinion, then recount helpful votes."""
        review = await self._get_review(review_id)

        if isinstance(voter, UserVoter):
            if review.user_id is not None and review.user_id == voter.user_id:
                raise ReviewForbiddenException("You cannot vote on your own review")
            voter_clause = ReviewHelpfulVote.user_id == voter.user_id
            new_vote = ReviewHelpfulVote(review_id=review_id, user_id=voter.user_id)
        elif isinstance(voter, IpVoter):
            voter_clause = ReviewHelpfulVote.ip_address == voter.ip_address
            new_vote = ReviewHelpfulVote(review_id=review_id, ip_address=voter.ip_address)
        else:
            raise TypeError(f"Unsupported voter key: {voter!r}")

        async with atomic(self.db):
            result = await self.db.execute(
                select(ReviewHelpfulVote).where(
                    ReviewHelpfulVote.review_id == review_id, voter_clause)
            )
            vote = result.scalars().first()
            if vote:
                vote.is_helpful = is_helpful
            else:
                new_vote.is_helpful = is_helpful
                self.db.add(new_vote)
            await self.db.flush()

            review.helpful_count = await self._count(
                ReviewHelpfulVote,
                ReviewHelpfulVote.review_id == review_id,
                ReviewHelpfulVote.is_helpful.is_(True),
            )

    async def report_review(self, user_id: UUID, report_data: ReportCreate) -> None:
        review = await self._get_review(report_data.review_id)

        if await self._has_reported(user_id, review.id):
            raise DuplicateReportException()

        try:
            async with atomic(self.db):
                self.db.add(ReviewReport(
                    user_id=user_id,
                    review_id=review.id,
                    reason=report_data.reason.value,
                    description=report_data.description,
                ))
                await self.db.flush()

                review.report_count = await self._count(
                    ReviewReport, ReviewReport.review_id == review.id)
        except IntegrityError as e:
            raise DuplicateReportException() from e

        structured_logger.info(
            message="Review reported",
            user_id=user_id,
            review_id=review.id,
            product_id=review.product_id,
            metadata={"reason": report_data.reason.value, "report_count": review.report_count}
        )

    async def _get_review(self, review_id: UUID) -> Review:
        review = await self.db.get(Review, review_id)
        if not review:
            raise ReviewNotFoundException()
        return review

    async def _has_reported(self, user_id: UUID, review_id: UUID) -> bool:
        result = await self.db.execute(
            select(ReviewReport.id).filter_by(user_id=user_id, review_id=review_id)
        )
        return result.scalars().first() is not None

    async def _count(self, model, *criteria) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(model).where(*criteria))
        return result.scalar_one()
