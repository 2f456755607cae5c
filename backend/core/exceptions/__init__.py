from .api_exceptions import (
    APIException,
    AuthenticationException,
    DatabaseException,
)

from .review_exceptions import (
    ReviewException,
    InvalidRatingException,
    DuplicateReviewException,
    DuplicateReportException,
    ReviewNotFoundException,
    ProductNotFoundException,
    UserNotFoundException,
    ReportNotFoundException,
    ReviewForbiddenException,
    ModerationException,
)

from .handlers import (
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
)

from .utils import (
    get_correlation_id,
    format_error_response
)

__all__ = [
    # Exceptions
    "APIException",
    "AuthenticationException",
    "DatabaseException",
    "ReviewException",
    "InvalidRatingException",
    "DuplicateReviewException",
    "DuplicateReportException",
    "ReviewNotFoundException",
    "ProductNotFoundException",
    "UserNotFoundException",
    "ReportNotFoundException",
    "ReviewForbiddenException",
    "ModerationException",

    # Handlers
    "api_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "sqlalchemy_exception_handler",

    # Utils
    "get_correlation_id",
    "format_error_response"
]
