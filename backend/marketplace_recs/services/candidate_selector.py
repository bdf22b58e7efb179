"""Candidate source selection for recommendation requests"""

from typing import List, Iterable
from sqlalchemy import or_, func
from sqlalchemy.orm import Session, joinedload

from ..models import Product, ProductStatus, ProductSimilarity, ProductView
from ..utils.logging import get_logger

logger = get_logger(__name__)


class CandidateSelector:
    """
    Picks the product ids a recommendation is built from

    Sources, in order of preference:
    - the precomputed similarity table
    - a live content filter over the catalog (same category, best rated)
    - a rating-ordered catalog scan excluding what the user already saw
    """

    def __init__(self, db: Session):
        self.db = db

    def similar_product_ids(self, product_id: str, limit: int) -> List[str]:
        """
        Get ids of products similar to product_id

        Precomputed rows are used only when there are at least `limit` of
        them. A short precomputed list is discarded whole and replaced by the
        live category query, never topped up.

        Args:
            product_id: Source product ID
            limit: Maximum number of ids to return

        Returns:
            Unique product ids, most relevant first
        """

        product = self.db.query(Product).filter(Product.id == product_id).first()
        if product is None:
            logger.info("Similarity source product not found", product_id=product_id)
            return []

        similarities = (
            self.db.query(ProductSimilarity)
            .filter(
                or_(
                    ProductSimilarity.product_a_id == product_id,
                    ProductSimilarity.product_b_id == product_id,
                )
            )
            .order_by(ProductSimilarity.overall_score.desc())
            .limit(limit)
            .all()
        )

        if len(similarities) >= limit:
            return self._unique(
                s.other_product_id(product_id) for s in similarities
            )[:limit]

        logger.debug(
            "Not enough precomputed similarities, using live content filter",
            product_id=product_id,
            precomputed=len(similarities),
            limit=limit
        )
        return self._content_filter_ids(product, limit)

    def _content_filter_ids(self, product: Product, limit: int) -> List[str]:
        query = self.published().filter(Product.id != product.id)

        if product.category_id:
            query = query.filter(Product.category_id == product.category_id)

        results = self.by_popularity(query).limit(limit).all()
        return [p.id for p in results]

    def recent_view_ids(self, user_id: str, limit: int) -> List[str]:
        """Distinct product ids the user viewed, most recent first"""

        rows = (
            self.db.query(
                ProductView.product_id,
                func.max(ProductView.viewed_at).label("last_viewed_at")
            )
            .filter(ProductView.user_id == user_id)
            .group_by(ProductView.product_id)
            .order_by(func.max(ProductView.viewed_at).desc())
            .limit(limit)
            .all()
        )
        return [row.product_id for row in rows]

    def ai_candidate_pool(self, exclude_ids: Iterable[str], pool_size: int) -> List[Product]:
        """
        Best-rated published products the user has not seen or bought

        Args:
            exclude_ids: Viewed and purchased product ids
            pool_size: Maximum pool size

        Returns:
            Products ordered by rating, then review count
        """

        exclude_ids = set(exclude_ids)
        query = self.published().options(joinedload(Product.category))
        if exclude_ids:
            query = query.filter(Product.id.notin_(sorted(exclude_ids)))

        return self.by_popularity(query).limit(pool_size).all()

    def published(self):
        return self.db.query(Product).filter(Product.status == ProductStatus.PUBLISHED)

    @staticmethod
    def by_popularity(query):
        return query.order_by(Product.average_rating.desc(), Product.total_reviews.desc())

    @staticmethod
    def _unique(ids: Iterable[str]) -> List[str]:
        seen = set()
        ordered = []
        for product_id in ids:
            if product_id not in seen:
                seen.add(product_id)
                ordered.append(product_id)
        return ordered
