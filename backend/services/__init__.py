# Services package - Consolidated imports only

# Review lifecycle
from .review import ReviewService
from .review_feedback import ReviewFeedbackService
from .moderation import ModerationService
from .review_query import ReviewQueryService

# Building blocks
from .purchase_verification import PurchaseVerifier
from .content_filter import ProfanityFilter

__all__ = [
    # Review lifecycle
    "ReviewService",
    "ReviewFeedbackService",
    "ModerationService",
    "ReviewQueryService",

    # Building blocks
    "PurchaseVerifier",
    "ProfanityFilter",
]
