# Consolidated route imports
from .review import router as review_router
from .admin_reviews import router as admin_reviews_router

# Export all routers for easy importing
__all__ = [
    "review_router",
    "admin_reviews_router",
]
