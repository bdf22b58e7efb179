"""Recommendation schemas"""

from pydantic import BaseModel, Field
from typing import Optional, List


class RecommendedProduct(BaseModel):
    """A product as shown in a recommendation list"""

    id: str
    title: str
    slug: str
    price: float
    compare_at_price: Optional[float] = None
    featured_image: Optional[str] = None
    average_rating: float
    total_reviews: int
    type: str
    reason: Optional[str] = None  # AI-powered path only

    class Config:
        from_attributes = True


class AIRecommendationRequest(BaseModel):
    """Body for requesting AI-powered recommendations"""

    context: Optional[str] = Field(None, max_length=500)
    limit: int = Field(default=6, ge=1, le=50)


class RecommendationListResponse(BaseModel):
    """Envelope for every recommendation read operation"""

    status: str = "success"
    message: str
    data: List[RecommendedProduct]
    log_id: Optional[str] = None  # AI picks only; referenced by feedback calls


class ClickFeedback(BaseModel):
    """Body for recording a click on a recommended product"""

    clicked_product_id: str = Field(..., min_length=1, max_length=64)
