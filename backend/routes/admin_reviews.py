from datetime import datetime
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal, Optional
from uuid import UUID

from core.database import get_db
from core.dependencies import require_admin
from core.utils.response import Response
from models.user import User
from schemas.review import (
    AdminDeleteRequest,
    AdminReviewResponse,
    AdminReviewUpdate,
    BulkReviewOperation,
    HandleReportRequest,
    ReportResponse,
    ReviewListQuery,
)
from services.moderation import ModerationService
from services.review_query import ReviewQueryService

router = APIRouter(prefix="/v1/admin/reviews", tags=["Admin Reviews"])


@router.get("/")
async def list_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Literal["created_at", "rating", "helpful_count", "report_count"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    search: Optional[str] = Query(None, max_length=200),
    rating: Optional[List[int]] = Query(None),
    is_verified: Optional[bool] = Query(None),
    is_approved: Optional[bool] = Query(None),
    is_pinned: Optional[bool] = Query(None),
    user_id: Optional[UUID] = Query(None),
    product_id: Optional[UUID] = Query(None),
    customer_email: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All reviews, any approval state, with the full filter set."""
    query = ReviewListQuery(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        rating=rating,
        is_verified=is_verified,
        is_approved=is_approved,
        is_pinned=is_pinned,
        user_id=user_id,
        product_id=product_id,
        customer_email=customer_email,
        start_date=start_date,
        end_date=end_date,
    )
    result = await ReviewQueryService(db).list_reviews(query)
    return Response.paginated(result, AdminReviewResponse)


@router.get("/pending")
async def get_pending_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Moderation queue, oldest first."""
    result = await ReviewQueryService(db).get_pending_reviews(page, limit)
    return Response.paginated(result, AdminReviewResponse)


@router.post("/bulk")
async def bulk_moderate(
    operation: BulkReviewOperation,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await ModerationService(db).bulk_moderate(admin.id, operation)
    return Response(success=True, data=result, message="Bulk moderation completed")


@router.put("/reports/{report_id}")
async def handle_report(
    report_id: UUID,
    handle_data: HandleReportRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    report = await ModerationService(db).handle_report(admin.id, report_id, handle_data)
    return Response(success=True, data=ReportResponse.model_validate(report), message="Report updated")


@router.put("/{review_id}")
async def admin_update_review(
    review_id: UUID,
    update_data: AdminReviewUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Approve, reject, pin or annotate a review."""
    review = await ModerationService(db).admin_update_review(admin.id, review_id, update_data)
    return Response(
        success=True,
        data=AdminReviewResponse.model_validate(review),
        message="Review updated successfully"
    )


@router.delete("/{review_id}")
async def admin_delete_review(
    review_id: UUID,
    delete_data: Optional[AdminDeleteRequest] = Body(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    reason = delete_data.reason if delete_data else None
    await ModerationService(db).admin_delete_review(admin.id, review_id, reason)
    return Response(success=True, message="Review deleted successfully")


@router.get("/{review_id}/log")
async def get_moderation_log(
    review_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    entries = await ModerationService(db).get_moderation_log(review_id)
    return Response(
        success=True,
        data=[
            {
                "id": entry.id,
                "action": entry.action,
                "reason": entry.reason,
                "notes": entry.notes,
                "moderator_id": entry.moderator_id,
                "created_at": entry.created_at,
            }
            for entry in entries
        ]
    )
