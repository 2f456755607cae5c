from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal, Optional
from uuid import UUID

from core.database import get_db
from core.dependencies import get_current_user, get_optional_user, get_client_ip
from core.exceptions import ReviewNotFoundException
from core.utils.response import Response
from models.user import User
from schemas.review import (
    GuestReviewCreate,
    HelpfulVoteRequest,
    ReportCreate,
    ReportRequest,
    ReviewCreate,
    ReviewListQuery,
    ReviewResponse,
    ReviewUpdate,
)
from services.review import ReviewService
from services.review_feedback import ReviewFeedbackService
from services.review_query import ReviewQueryService

router = APIRouter(prefix="/v1/reviews", tags=["Reviews"])

SortField = Literal["created_at", "rating", "helpful_count", "report_count"]


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a new review for a product."""
    review = await ReviewService(db).create_review(current_user.id, review_data)
    return Response(
        success=True,
        data=ReviewResponse.model_validate(review),
        message="Review created successfully",
        status_code=status.HTTP_201_CREATED
    )


@router.post("/guest", status_code=status.HTTP_201_CREATED)
async def create_guest_review(
    review_data: GuestReviewCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create a review without an account; it waits for moderation."""
    review = await ReviewService(db).create_guest_review(review_data)
    return Response(
        success=True,
        data=ReviewResponse.model_validate(review),
        message="Review submitted for moderation",
        status_code=status.HTTP_201_CREATED
    )


@router.get("/me")
async def get_my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Reviews written by the current user, approved or not."""
    result = await ReviewQueryService(db).get_user_reviews(
        current_user.id, ReviewListQuery(page=page, limit=limit))
    return Response.paginated(result, ReviewResponse)


@router.get("/product/{product_id}")
async def get_reviews_for_product(
    product_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    rating: Optional[List[int]] = Query(None),
    is_verified: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    sort_by: SortField = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    db: AsyncSession = Depends(get_db)
):
    """Approved reviews of a product with optional filtering and sorting."""
    query = ReviewListQuery(
        page=page,
        limit=limit,
        rating=rating,
        is_verified=is_verified,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = await ReviewQueryService(db).get_product_reviews(product_id, query)
    return Response.paginated(result, ReviewResponse)


@router.get("/product/{product_id}/stats")
async def get_product_review_stats(
    product_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    stats = await ReviewQueryService(db).get_product_review_stats(product_id)
    return Response(success=True, data=stats)


@router.get("/product/{product_id}/can-review")
async def can_review_product(
    product_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    can_review = await ReviewService(db).can_user_review(current_user.id, product_id)
    return Response(success=True, data={"can_review": can_review})


@router.get("/{review_id}")
async def get_review(
    review_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Get a specific approved review by ID."""
    review = await ReviewService(db).get_review_by_id(review_id)
    if not review or not review.is_approved:
        raise ReviewNotFoundException()
    return Response(success=True, data=ReviewResponse.model_validate(review))


@router.put("/{review_id}")
async def update_review(
    review_id: UUID,
    review_data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update an existing review. Changing the text sends it back to moderation."""
    review = await ReviewService(db).update_review(current_user.id, review_id, review_data)
    return Response(
        success=True,
        data=ReviewResponse.model_validate(review),
        message="Review updated successfully"
    )


@router.delete("/{review_id}")
async def delete_review(
    review_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a review."""
    await ReviewService(db).delete_review(current_user.id, review_id)
    return Response(success=True, message="Review deleted successfully")


@router.post("/{review_id}/helpful")
async def vote_helpful(
    review_id: UUID,
    vote: HelpfulVoteRequest,
    request: Request,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Vote a review helpful or unhelpful; anonymous visitors vote by IP address."""
    feedback = ReviewFeedbackService(db)
    if current_user is not None:
        await feedback.vote_helpful(current_user.id, review_id, vote.is_helpful)
    else:
        await feedback.vote_helpful_anonymous(get_client_ip(request), review_id, vote.is_helpful)
    return Response(success=True, message="Vote recorded")


@router.post("/{review_id}/report", status_code=status.HTTP_201_CREATED)
async def report_review(
    review_id: UUID,
    report_request: ReportRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Report a review for moderation."""
    report_data = ReportCreate(review_id=review_id, **report_request.model_dump())
    await ReviewFeedbackService(db).report_review(current_user.id, report_data)
    return Response(
        success=True,
        message="Review reported",
        status_code=status.HTTP_201_CREATED
    )
