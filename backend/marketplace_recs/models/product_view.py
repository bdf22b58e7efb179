"""Product view event model"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from .base import Base


class ProductView(Base):
    """A single product page view by a signed-in user"""

    __tablename__ = "product_views"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    product_id = Column(String(36), ForeignKey("digital_products.id", ondelete="CASCADE"), nullable=False)
    viewed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_product_view_user_viewed', 'user_id', 'viewed_at'),
    )

    def __repr__(self):
        return f"<ProductView(user_id='{self.user_id}', product_id='{self.product_id}')>"
