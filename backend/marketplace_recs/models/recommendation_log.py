"""Recommendation audit log model"""

from sqlalchemy import Column, String, Boolean, JSON, CheckConstraint, Index
from .base import Base, TimestampMixin
from .product import generate_uuid


class RecommendationType:
    """Kinds of recommendation responses that can be logged"""

    CONTENT_BASED = "content-based"
    COLLABORATIVE = "collaborative"
    AI_POWERED = "ai-powered"
    TRENDING = "trending"
    PERSONALIZED = "personalized"

    ALL = (CONTENT_BASED, COLLABORATIVE, AI_POWERED, TRENDING, PERSONALIZED)


class RecommendationLog(Base, TimestampMixin):
    """Products shown to a user, with later click/conversion feedback"""

    __tablename__ = "recommendation_logs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(64))
    session_id = Column(String(128))
    type = Column(String(32), nullable=False)
    source_product_id = Column(String(36))
    recommended_product_ids = Column(JSON, default=list, nullable=False)  # rank order
    clicked_product_id = Column(String(36))
    converted = Column(Boolean, default=False, nullable=False)
    # "metadata" is reserved on declarative classes
    extra_metadata = Column("metadata", JSON, default=dict)

    __table_args__ = (
        CheckConstraint('user_id IS NOT NULL OR session_id IS NOT NULL', name='ck_log_actor'),
        Index('ix_log_user_type', 'user_id', 'type'),
    )

    def __repr__(self):
        return f"<RecommendationLog(id='{self.id}', type='{self.type}')>"
