# Models package - Consolidated imports only
from .user import User
from .product import Product
from .orders import Order, OrderItem
from .review import (
    Review,
    ReviewHelpfulVote,
    ReviewReport,
    ReviewModerationLog,
    ReportReason,
    ReportStatus,
    ModerationAction,
)

__all__ = [
    "User",
    "Product",
    "Order",
    "OrderItem",
    "Review",
    "ReviewHelpfulVote",
    "ReviewReport",
    "ReviewModerationLog",
    "ReportReason",
    "ReportStatus",
    "ModerationAction",
]
