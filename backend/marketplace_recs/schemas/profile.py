"""User preference profile schemas"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class UserPreferenceProfileResponse(BaseModel):
    """Schema for profile response"""

    user_id: str
    preferred_categories: List[str] = []
    preferred_types: List[str] = []
    price_range_min: Optional[float] = None
    price_range_max: Optional[float] = None
    browsing_history: List[str] = []
    purchase_history: List[str] = []
    last_computed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
