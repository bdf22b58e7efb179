"""Product catalog models"""

import uuid

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin


def generate_uuid() -> str:
    return str(uuid.uuid4())


class ProductStatus:
    """Publication states of a digital product"""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Category(Base, TimestampMixin):
    """Product category"""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category(id='{self.id}', name='{self.name}')>"


class Product(Base, TimestampMixin):
    """Digital product sold on the marketplace"""

    __tablename__ = "digital_products"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(500), nullable=False)
    slug = Column(String(500), nullable=False, unique=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    compare_at_price = Column(Numeric(10, 2, asdecimal=False))
    featured_image = Column(String(1000))
    average_rating = Column(Numeric(3, 2, asdecimal=False), nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)
    type = Column(String(50), nullable=False)  # excel_template, google_sheet, presentation, ...
    status = Column(String(20), nullable=False, default=ProductStatus.DRAFT)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"))

    category = relationship("Category", back_populates="products")

    __table_args__ = (
        Index('ix_product_status_rating', 'status', 'average_rating', 'total_reviews'),
        Index('ix_product_category', 'category_id'),
    )

    def __repr__(self):
        return f"<Product(id='{self.id}', title='{self.title}')>"
