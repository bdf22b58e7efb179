"""Database models"""

from .base import Base
from .product import Category, Product, ProductStatus
from .product_view import ProductView
from .product_similarity import ProductSimilarity
from .user_preference_profile import UserPreferenceProfile
from .recommendation_log import RecommendationLog, RecommendationType

__all__ = [
    "Base",
    "Category",
    "Product",
    "ProductStatus",
    "ProductView",
    "ProductSimilarity",
    "UserPreferenceProfile",
    "RecommendationLog",
    "RecommendationType",
]
