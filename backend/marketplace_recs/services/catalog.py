"""Product hydration helpers shared by the recommendation paths"""

from typing import List, Dict, Optional
from sqlalchemy.orm import Session

from ..models import Product
from ..schemas.recommendation import RecommendedProduct


def to_recommended(product: Product, reason: Optional[str] = None) -> RecommendedProduct:
    """Project a catalog row onto the recommendation response shape"""
    return RecommendedProduct(
        id=product.id,
        title=product.title,
        slug=product.slug,
        price=float(product.price),
        compare_at_price=float(product.compare_at_price) if product.compare_at_price else None,
        featured_image=product.featured_image,
        average_rating=float(product.average_rating or 0),
        total_reviews=product.total_reviews or 0,
        type=product.type,
        reason=reason,
    )


def get_product_details(
    db: Session, product_ids: List[str], reasons: Optional[Dict[str, str]] = None
) -> List[RecommendedProduct]:
    """
    Fetch full product records for a list of ids, preserving the input order

    Ids that no longer exist are dropped.

    Args:
        db: Database session
        product_ids: Ordered product ids
        reasons: Optional per-product reason strings to attach

    Returns:
        List of RecommendedProduct in the order of product_ids
    """

    if not product_ids:
        return []

    products = db.query(Product).filter(Product.id.in_(product_ids)).all()
    product_map = {product.id: product for product in products}
    reasons = reasons or {}

    return [
        to_recommended(product_map[product_id], reasons.get(product_id))
        for product_id in product_ids
        if product_id in product_map
    ]
