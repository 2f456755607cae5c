from sqlalchemy import Column, String, Boolean, Text, Float, JSON, Integer
from core.database import BaseModel, CHAR_LENGTH


def empty_rating_distribution() -> dict:
    """Percentage per star, keyed by the star as a string so it survives JSON storage."""
    return {str(star): 0 for star in range(1, 6)}


class Product(BaseModel):
    __tablename__ = "products"
    __table_args__ = {'extend_existing': True}

    name = Column(String(CHAR_LENGTH), nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, index=True)

    # Rating aggregate, derived from approved reviews only.
    # Written exclusively by services.rating_aggregator.
    rating = Column(Float, default=0.0, index=True)
    average_rating = Column(Float, default=0.0)
    review_count = Column(Integer, default=0)
    rating_distribution = Column(JSON, default=empty_rating_distribution)
