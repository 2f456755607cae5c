"""
Domain errors raised by the review services.

ReviewException covers failures the end user can fix by changing the request
(bad rating, duplicates, missing records, ownership). ModerationException
covers callers without moderation rights.
"""
from typing import Optional

from .api_exceptions import APIException


class ReviewException(APIException):
    """Base class for end-user caused review errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: Optional[str] = None
    ):
        super().__init__(
            status_code=status_code,
            message=message,
            error_code=error_code or "REVIEW_ERROR"
        )


class InvalidRatingException(ReviewException):
    def __init__(self, message: str = "Rating must be between 1 and 5"):
        super().__init__(message, status_code=400, error_code="INVALID_RATING")


class DuplicateReviewException(ReviewException):
    def __init__(self, message: str = "You have already reviewed this product"):
        super().__init__(message, status_code=400, error_code="DUPLICATE_REVIEW")


class DuplicateReportException(ReviewException):
    def __init__(self, message: str = "You have already reported this review"):
        super().__init__(message, status_code=400, error_code="DUPLICATE_REPORT")


class ReviewNotFoundException(ReviewException):
    def __init__(self, message: str = "Review not found"):
        super().__init__(message, status_code=404, error_code="REVIEW_NOT_FOUND")


class ProductNotFoundException(ReviewException):
    def __init__(self, message: str = "Product not found"):
        super().__init__(message, status_code=404, error_code="PRODUCT_NOT_FOUND")


class UserNotFoundException(ReviewException):
    def __init__(self, message: str = "User not found"):
        super().__init__(message, status_code=404, error_code="USER_NOT_FOUND")


class ReportNotFoundException(ReviewException):
    def __init__(self, message: str = "Report not found"):
        super().__init__(message, status_code=404, error_code="REPORT_NOT_FOUND")


class ReviewForbiddenException(ReviewException):
    """Ownership violations and self-votes"""

    def __init__(self, message: str = "You are not allowed to modify this review"):
        super().__init__(message, status_code=403, error_code="FORBIDDEN")


class ModerationException(APIException):
    """Raised when a caller without moderation rights reaches an admin operation"""

    def __init__(
        self,
        message: str = "Access denied - administrator privileges required",
        status_code: int = 403,
        error_code: Optional[str] = None
    ):
        super().__init__(
            status_code=status_code,
            message=message,
            error_code=error_code or "MODERATION_FORBIDDEN"
        )
