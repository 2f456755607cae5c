from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from core.config import settings
from models.review import ReportReason, ReportStatus


# --- Identities ---
# Who wrote a review. Both variants end up in the same reviews row, but each
# has its own uniqueness rule and its own way of matching orders.

@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: UUID


@dataclass(frozen=True)
class GuestIdentity:
    email: str
    name: str


ReviewerIdentity = Union[AuthenticatedIdentity, GuestIdentity]


# Who cast a helpful vote. Users and IP addresses are deduplicated separately.

@dataclass(frozen=True)
class UserVoter:
    user_id: UUID


@dataclass(frozen=True)
class IpVoter:
    ip_address: str


VoterKey = Union[UserVoter, IpVoter]


# --- Requests ---
# The rating range is enforced by the service so that every entry point
# (HTTP or internal) fails the same way.

class ReviewCreate(BaseModel):
    product_id: UUID
    rating: int
    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = Field(None, max_length=5000)
    order_id: Optional[UUID] = None


class GuestReviewCreate(ReviewCreate):
    customer_email: str = Field(..., min_length=3, max_length=255)
    customer_name: str = Field(..., min_length=1, max_length=255)

    @field_validator("customer_email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("customer_email must be an email address")
        return value


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = Field(None, max_length=5000)


class AdminReviewUpdate(BaseModel):
    is_approved: Optional[bool] = None
    is_pinned: Optional[bool] = None
    moderator_notes: Optional[str] = Field(None, max_length=2000)


class AdminDeleteRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class HelpfulVoteRequest(BaseModel):
    is_helpful: bool


class ReportRequest(BaseModel):
    reason: ReportReason
    description: Optional[str] = Field(None, max_length=1000)


class ReportCreate(ReportRequest):
    review_id: UUID


class HandleReportRequest(BaseModel):
    status: ReportStatus
    admin_notes: Optional[str] = Field(None, max_length=2000)


BulkAction = Literal["approve", "reject", "delete", "pin", "unpin"]


class BulkReviewOperation(BaseModel):
    review_ids: List[UUID] = Field(..., min_length=1, max_length=settings.REVIEW_BULK_LIMIT)
    action: BulkAction
    reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=2000)


class ReviewListQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_by: Literal["created_at", "rating", "helpful_count", "report_count"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    search: Optional[str] = None

    rating: Optional[Union[int, List[int]]] = None
    is_verified: Optional[bool] = None
    is_approved: Optional[bool] = None
    is_pinned: Optional[bool] = None
    user_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    customer_email: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


# --- Responses ---

class ReviewResponse(BaseModel):
    id: UUID
    product_id: UUID
    user_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    customer_name: str
    rating: int
    title: Optional[str] = None
    content: Optional[str] = None
    is_verified: bool
    is_approved: bool
    is_pinned: bool
    helpful_count: int
    report_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminReviewResponse(ReviewResponse):
    customer_email: str
    moderator_notes: Optional[str] = None


class ReportResponse(BaseModel):
    id: UUID
    review_id: UUID
    user_id: UUID
    reason: ReportReason
    description: Optional[str] = None
    status: ReportStatus
    handled_by: Optional[UUID] = None
    handled_at: Optional[datetime] = None
    admin_notes: Optional[str] = None

    class Config:
        from_attributes = True


class BulkModerationResult(BaseModel):
    action: BulkAction
    processed: List[UUID] = []
    failed: List[UUID] = []


class ReviewStats(BaseModel):
    product_id: UUID
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[str, int]
    verified_reviews: int
    guest_reviews: int
    pending_reviews: int
    reported_reviews: int
