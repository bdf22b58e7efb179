"""User preference profile model"""

from sqlalchemy import Column, String, Numeric, DateTime, JSON
from .base import Base, TimestampMixin
from .product import generate_uuid


class UserPreferenceProfile(Base, TimestampMixin):
    """Derived shopping preferences, one row per user"""

    __tablename__ = "user_preference_profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(64), unique=True, nullable=False, index=True)
    preferred_categories = Column(JSON, default=list, nullable=False)  # category ids, most viewed first
    preferred_types = Column(JSON, default=list, nullable=False)
    price_range_min = Column(Numeric(10, 2, asdecimal=False))  # unset means no price filter
    price_range_max = Column(Numeric(10, 2, asdecimal=False))
    browsing_history = Column(JSON, default=list, nullable=False)  # most recent first
    purchase_history = Column(JSON, default=list, nullable=False)  # appended by checkout
    feature_vector = Column(JSON)  # reserved for embedding-based models
    last_computed_at = Column(DateTime)

    @property
    def has_price_band(self) -> bool:
        return self.price_range_min is not None and self.price_range_max is not None

    def __repr__(self):
        return f"<UserPreferenceProfile(user_id='{self.user_id}')>"
