"""Precomputed product similarity model"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, Numeric, DateTime, UniqueConstraint, Index
from .base import Base


class ProductSimilarity(Base):
    """
    Pairwise similarity between two products

    Filled by the offline similarity job. A pair is stored once, so lookups
    must match the product on either side.
    """

    __tablename__ = "product_similarities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_a_id = Column(String(36), nullable=False)
    product_b_id = Column(String(36), nullable=False)
    overall_score = Column(Numeric(5, 4, asdecimal=False), nullable=False)
    content_score = Column(Numeric(5, 4, asdecimal=False), nullable=False, default=0)
    collaborative_score = Column(Numeric(5, 4, asdecimal=False), nullable=False, default=0)
    computed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('product_a_id', 'product_b_id', name='uq_similarity_pair'),
        Index('ix_similarity_b', 'product_b_id'),
    )

    def other_product_id(self, product_id: str) -> str:
        """Return the id on the opposite side of the pair"""
        return self.product_b_id if self.product_a_id == product_id else self.product_a_id

    def __repr__(self):
        return f"<ProductSimilarity(a='{self.product_a_id}', b='{self.product_b_id}', overall={self.overall_score})>"
