"""User preference profile computation"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Product, ProductView, UserPreferenceProfile
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ProfileBuilder:
    """
    Builds and maintains UserPreferenceProfile rows

    Profiles are derived from the user's product view events. Purchase
    history is appended by checkout and is never recomputed here.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, user_id: str) -> UserPreferenceProfile:
        """
        Get the user's profile, creating an empty one on first access

        Concurrent first access is settled by the unique constraint on
        user_id: the loser of the insert race rolls back and reads the
        winner's row.
        """

        profile = self._find(user_id)
        if profile is not None:
            return profile

        profile = UserPreferenceProfile(
            user_id=user_id,
            preferred_categories=[],
            preferred_types=[],
            browsing_history=[],
            purchase_history=[],
        )
        self.db.add(profile)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.debug("Profile created concurrently, re-reading", user_id=user_id)
            profile = self._find(user_id)
            if profile is None:
                raise
            return profile

        self.db.refresh(profile)
        logger.info("Created preference profile", user_id=user_id)
        return profile

    def recompute(self, user_id: str) -> UserPreferenceProfile:
        """
        Rebuild derived profile fields from the user's view history

        With no view history the category and type lists come out empty and
        the price band keeps whatever it had (unset for a new user).

        Args:
            user_id: User ID

        Returns:
            The persisted profile
        """

        profile = self.get_or_create(user_id)

        profile.preferred_categories = self._top_categories(user_id)
        profile.preferred_types = self._top_types(user_id)

        avg_price = self._average_viewed_price(user_id)
        if avg_price is not None:
            profile.price_range_min, profile.price_range_max = self.price_band(avg_price)

        profile.browsing_history = self._recent_views(user_id)
        profile.last_computed_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(profile)

        logger.info(
            "Recomputed preference profile",
            user_id=user_id,
            categories=len(profile.preferred_categories),
            types=len(profile.preferred_types),
            history=len(profile.browsing_history)
        )
        return profile

    @staticmethod
    def price_band(avg_price: float):
        """Price band around the average viewed price: half to double"""
        return max(0.0, avg_price * 0.5), avg_price * 2

    def stale_user_ids(self, limit: int) -> List[str]:
        """
        Users whose view history is newer than their profile

        Includes users with views but no profile at all.
        """

        last_view = func.max(ProductView.viewed_at)
        rows = (
            self.db.query(ProductView.user_id)
            .outerjoin(UserPreferenceProfile, UserPreferenceProfile.user_id == ProductView.user_id)
            .group_by(ProductView.user_id, UserPreferenceProfile.last_computed_at)
            .having(
                or_(
                    UserPreferenceProfile.last_computed_at.is_(None),
                    last_view > UserPreferenceProfile.last_computed_at,
                )
            )
            .order_by(last_view.desc())
            .limit(limit)
            .all()
        )
        return [row.user_id for row in rows]

    # Aggregations

    def _top_categories(self, user_id: str) -> List[str]:
        view_count = func.count(ProductView.id).label("view_count")
        rows = (
            self.db.query(Product.category_id, view_count)
            .select_from(ProductView)
            .join(Product, Product.id == ProductView.product_id)
            .filter(ProductView.user_id == user_id, Product.category_id.isnot(None))
            .group_by(Product.category_id)
            .order_by(view_count.desc())
            .limit(settings.PROFILE_TOP_CATEGORIES)
            .all()
        )
        return [row.category_id for row in rows]

    def _top_types(self, user_id: str) -> List[str]:
        view_count = func.count(ProductView.id).label("view_count")
        rows = (
            self.db.query(Product.type, view_count)
            .select_from(ProductView)
            .join(Product, Product.id == ProductView.product_id)
            .filter(ProductView.user_id == user_id)
            .group_by(Product.type)
            .order_by(view_count.desc())
            .limit(settings.PROFILE_TOP_TYPES)
            .all()
        )
        return [row.type for row in rows]

    def _average_viewed_price(self, user_id: str) -> Optional[float]:
        avg_price = (
            self.db.query(func.avg(Product.price))
            .select_from(ProductView)
            .join(Product, Product.id == ProductView.product_id)
            .filter(ProductView.user_id == user_id)
            .scalar()
        )
        return float(avg_price) if avg_price is not None else None

    def _recent_views(self, user_id: str) -> List[str]:
        rows = (
            self.db.query(ProductView.product_id)
            .filter(ProductView.user_id == user_id)
            .group_by(ProductView.product_id)
            .order_by(func.max(ProductView.viewed_at).desc())
            .limit(settings.PROFILE_BROWSING_HISTORY)
            .all()
        )
        return [row.product_id for row in rows]

    def _find(self, user_id: str) -> Optional[UserPreferenceProfile]:
        return (
            self.db.query(UserPreferenceProfile)
            .filter(UserPreferenceProfile.user_id == user_id)
            .first()
        )
