from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.database import atomic
from core.exceptions import ReportNotFoundException, ReviewNotFoundException
from core.utils.logging import structured_logger
from models.review import ModerationAction, Review, ReviewModerationLog, ReviewReport
from schemas.review import (
    AdminReviewUpdate,
    BulkModerationResult,
    BulkReviewOperation,
    HandleReportRequest,
)
from services.rating_aggregator import recompute_product_aggregate


ADMIN_DELETE_NOTES = "Review deleted by administrator"

# How each bulk action maps onto a single-review admin update
BULK_UPDATES = {
    "approve": {"is_approved": True},
    "reject": {"is_approved": False},
    "pin": {"is_pinned": True},
    "unpin": {"is_pinned": False},
}


def infer_moderation_action(
    changes: AdminReviewUpdate,
    was_approved: bool,
    was_pinned: bool
) -> ModerationAction:
    """
    Name the action an admin update performed, first matching rule wins:
    approval change, then pin change, then a plain edit.

    When approval and pin change together only the approval is recorded.
    """
    if changes.is_approved is not None and changes.is_approved != was_approved:
        return ModerationAction.APPROVED if changes.is_approved else ModerationAction.REJECTED

    if changes.is_pinned is not None and changes.is_pinned != was_pinned:
        return ModerationAction.PINNED if changes.is_pinned else ModerationAction.UNPINNED

    return ModerationAction.EDITED


class ModerationService:
    """Admin-side review changes. Every call writes one moderation log entry."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def admin_update_review(
        self,
        moderator_id: UUID,
        review_id: UUID,
        update_data: AdminReviewUpdate
    ) -> Review:
        review = await self._get_review(review_id)

        was_approved = bool(review.is_approved)
        was_pinned = bool(review.is_pinned)
        action = infer_moderation_action(update_data, was_approved, was_pinned)

        async with atomic(self.db):
            for key, value in update_data.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(review, key, value)

            self.db.add(ReviewModerationLog(
                review_id=review.id,
                moderator_id=moderator_id,
                action=action.value,
                notes=update_data.moderator_notes,
            ))

            if update_data.is_approved is not None and update_data.is_approved != was_approved:
                await recompute_product_aggregate(self.db, review.product_id)

        await self.db.refresh(review)

        structured_logger.info(
            message="Review moderated",
            user_id=moderator_id,
            review_id=review_id,
            product_id=review.product_id,
            metadata={"action": action.value}
        )
        return review

    async def admin_delete_review(
        self,
        moderator_id: UUID,
        review_id: UUID,
        reason: Optional[str] = None
    ) -> None:
        review = await self._get_review(review_id)
        product_id = review.product_id

        async with atomic(self.db):
            await self.db.delete(review)
            self.db.add(ReviewModerationLog(
                review_id=review_id,
                moderator_id=moderator_id,
                action=ModerationAction.DELETED.value,
                reason=reason,
                notes=ADMIN_DELETE_NOTES,
            ))
            await recompute_product_aggregate(self.db, product_id)

        structured_logger.info(
            message="Review deleted by moderator",
            user_id=moderator_id,
            review_id=review_id,
            product_id=product_id,
            metadata={"reason": reason}
        )

    async def bulk_moderate(
        self,
        moderator_id: UUID,
        operation: BulkReviewOperation
    ) -> BulkModerationResult:
        """
        Apply one action to many reviews, one transaction per review.

        Reviews that no longer exist are reported back in `failed`; any other
        error stops the batch and propagates.
        """
        result = BulkModerationResult(action=operation.action)

        # dict.fromkeys keeps the caller's order while dropping repeats
        for review_id in dict.fromkeys(operation.review_ids):
            try:
                if operation.action == "delete":
                    await self.admin_delete_review(moderator_id, review_id, operation.reason)
                else:
                    await self.admin_update_review(
                        moderator_id,
                        review_id,
                        AdminReviewUpdate(
                            moderator_notes=operation.notes,
                            **BULK_UPDATES[operation.action],
                        ),
                    )
            except ReviewNotFoundException:
                structured_logger.warning(
                    message="Bulk moderation skipped missing review",
                    user_id=moderator_id,
                    review_id=review_id,
                    metadata={"action": operation.action}
                )
                result.failed.append(review_id)
            else:
                result.processed.append(review_id)

        structured_logger.info(
            message="Bulk moderation finished",
            user_id=moderator_id,
            metadata={
                "action": operation.action,
                "processed": len(result.processed),
                "failed": len(result.failed),
            }
        )
        return result

    async def handle_report(
        self,
        moderator_id: UUID,
        report_id: UUID,
        handle_data: HandleReportRequest
    ) -> ReviewReport:
        """Record the moderator's decision on a report; the report itself is kept."""
        report = await self.db.get(ReviewReport, report_id)
        if not report:
            raise ReportNotFoundException()

        async with atomic(self.db):
            report.status = handle_data.status.value
            report.admin_notes = handle_data.admin_notes
            report.handled_by = moderator_id
            report.handled_at = datetime.now(timezone.utc)

        await self.db.refresh(report)
        return report

    async def get_moderation_log(self, review_id: UUID) -> list:
        result = await self.db.execute(
            select(ReviewModerationLog)
            .filter_by(review_id=review_id)
            .order_by(ReviewModerationLog.created_at.asc())
        )
        return list(result.scalars().all())

    async def _get_review(self, review_id: UUID) -> Review:
        review = await self.db.get(Review, review_id)
        if not review:
            raise ReviewNotFoundException()
        return review
