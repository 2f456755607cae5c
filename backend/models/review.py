"""
Review models
Includes: Review, ReviewHelpfulVote, ReviewReport, ReviewModerationLog
"""
from enum import Enum

from sqlalchemy import (
    Column, Boolean, ForeignKey, Text, Integer, String, DateTime,
    CheckConstraint, UniqueConstraint, Index, text
)
from sqlalchemy.orm import relationship
from core.database import BaseModel, CHAR_LENGTH, GUID


class ReportReason(str, Enum):
    SPAM = "SPAM"
    INAPPROPRIATE_CONTENT = "INAPPROPRIATE_CONTENT"
    FAKE_REVIEW = "FAKE_REVIEW"
    OFFENSIVE_LANGUAGE = "OFFENSIVE_LANGUAGE"
    IRRELEVANT = "IRRELEVANT"
    COPYRIGHT_VIOLATION = "COPYRIGHT_VIOLATION"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class ModerationAction(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PINNED = "PINNED"
    UNPINNED = "UNPINNED"
    EDITED = "EDITED"
    DELETED = "DELETED"


class Review(BaseModel):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        # One review per authenticated user and product
        UniqueConstraint("user_id", "product_id", name="uq_reviews_user_product"),
        # One review per guest email and product; user reviews are covered above
        Index(
            "uq_reviews_guest_email_product",
            "customer_email",
            "product_id",
            unique=True,
            postgresql_where=text("user_id IS NULL"),
            sqlite_where=text("user_id IS NULL"),
        ),
        {'extend_existing': True},
    )

    product_id = Column(GUID(), ForeignKey("products.id"), nullable=False, index=True)
    # Null for guest reviews
    user_id = Column(GUID(), ForeignKey("users.id"), nullable=True, index=True)
    order_id = Column(GUID(), ForeignKey("orders.id"), nullable=True)

    # Denormalized from the user for authenticated reviews, the identity itself for guests
    customer_email = Column(String(CHAR_LENGTH), nullable=False, index=True)
    customer_name = Column(String(CHAR_LENGTH), nullable=False)

    rating = Column(Integer, nullable=False)  # 1-5 stars
    title = Column(String(CHAR_LENGTH), nullable=True)
    content = Column(Text, nullable=True)

    is_verified = Column(Boolean, default=False, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False, index=True)
    is_pinned = Column(Boolean, default=False, nullable=False)

    # Recounted from child rows, never incremented in place
    helpful_count = Column(Integer, default=0, nullable=False)
    report_count = Column(Integer, default=0, nullable=False)

    moderator_notes = Column(Text, nullable=True)

    votes = relationship("ReviewHelpfulVote", back_populates="review",
                         cascade="all, delete-orphan", passive_deletes=True)
    reports = relationship("ReviewReport", back_populates="review",
                           cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


class ReviewHelpfulVote(BaseModel):
    """A helpful/unhelpful opinion, keyed by user or by IP address"""
    __tablename__ = "review_helpful_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "review_id", name="uq_helpful_votes_user_review"),
        UniqueConstraint("ip_address", "review_id", name="uq_helpful_votes_ip_review"),
        {'extend_existing': True},
    )

    review_id = Column(GUID(), ForeignKey("reviews.id", ondelete="CASCADE"),
                       nullable=False, index=True)
    user_id = Column(GUID(), ForeignKey("users.id"), nullable=True)
    ip_address = Column(String(64), nullable=True)
    is_helpful = Column(Boolean, nullable=False)

    review = relationship("Review", back_populates="votes")


class ReviewReport(BaseModel):
    """An abuse report; at most one per user and review"""
    __tablename__ = "review_reports"
    __table_args__ = (
        UniqueConstraint("user_id", "review_id", name="uq_review_reports_user_review"),
        {'extend_existing': True},
    )

    review_id = Column(GUID(), ForeignKey("reviews.id", ondelete="CASCADE"),
                       nullable=False, index=True)
    user_id = Column(GUID(), ForeignKey("users.id"), nullable=False)
    reason = Column(String(50), nullable=False)  # ReportReason value
    description = Column(Text, nullable=True)
    status = Column(String(50), default=ReportStatus.PENDING.value, nullable=False)

    handled_by = Column(GUID(), ForeignKey("users.id"), nullable=True)
    handled_at = Column(DateTime(timezone=True), nullable=True)
    admin_notes = Column(Text, nullable=True)

    review = relationship("Review", back_populates="reports")


class ReviewModerationLog(BaseModel):
    """Append-only audit trail of moderator actions"""
    __tablename__ = "review_moderation_logs"
    __table_args__ = {'extend_existing': True}

    # No foreign key: entries must survive the deletion of their review
    review_id = Column(GUID(), nullable=False, index=True)
    moderator_id = Column(GUID(), ForeignKey("users.id"), nullable=False)
    action = Column(String(50), nullable=False)  # ModerationAction value
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
