"""Ranking of recommendation candidates"""

import json
import re
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import UpstreamUnavailable
from ..models import (
    Category,
    Product,
    RecommendationLog,
    RecommendationType,
    UserPreferenceProfile,
)
from ..schemas.recommendation import RecommendedProduct
from ..utils.logging import get_logger
from ..utils.metrics import record_ai_fallback
from .candidate_selector import CandidateSelector
from .catalog import get_product_details, to_recommended

logger = get_logger(__name__)

CODE_FENCE_RE = re.compile(r"```(?:json)?\s*")


@dataclass
class AIRankingResult:
    """Outcome of an AI-powered ranking request"""

    products: List[RecommendedProduct] = field(default_factory=list)
    ai_succeeded: bool = False
    log_id: Optional[str] = None


class RankingEngine:
    """
    Orders candidates into recommendation lists

    Three paths:
    - similarity: keeps the order produced by the candidate selector
    - personalized feed: profile filters over the catalog, best rated first
    - AI-powered: an LLM picks from a rating-ordered pool and explains each
      pick; any LLM failure falls back to the top of the pool
    """

    def __init__(self, db: Session, llm_client, selector: Optional[CandidateSelector] = None):
        self.db = db
        self.llm_client = llm_client
        self.selector = selector or CandidateSelector(db)

    def similar(self, product_id: str, limit: int) -> List[RecommendedProduct]:
        """Hydrate similar-product candidates in selector order"""
        product_ids = self.selector.similar_product_ids(product_id, limit)
        return get_product_details(self.db, product_ids)

    def for_you(self, profile: UserPreferenceProfile, limit: int) -> List[RecommendedProduct]:
        """
        Personalized feed from profile filters

        Each filter applies only when its profile data is present: category
        allow-list, price band bounds, purchased-product exclusion.
        """

        query = self.selector.published()

        if profile.preferred_categories:
            query = query.filter(Product.category_id.in_(profile.preferred_categories))

        if profile.price_range_min is not None:
            query = query.filter(Product.price >= profile.price_range_min)
        if profile.price_range_max is not None:
            query = query.filter(Product.price <= profile.price_range_max)

        if profile.purchase_history:
            query = query.filter(Product.id.notin_(profile.purchase_history))

        results = self.selector.by_popularity(query).limit(limit).all()
        return [to_recommended(product) for product in results]

    def ai_powered(
        self,
        user_id: str,
        profile: UserPreferenceProfile,
        context: Optional[str],
        limit: int
    ) -> AIRankingResult:
        """
        Let the LLM choose `limit` products from the candidate pool

        Args:
            user_id: User ID
            profile: The user's preference profile
            context: Optional free-text description of what the user wants
            limit: Number of products to return

        Returns:
            AIRankingResult; products is empty only when the pool is empty
        """

        recent_ids = self.selector.recent_view_ids(user_id, settings.AI_EXCLUDED_RECENT_VIEWS)
        exclude_ids = set(recent_ids) | set(profile.purchase_history or [])
        candidates = self.selector.ai_candidate_pool(exclude_ids, settings.AI_CANDIDATE_POOL_SIZE)

        if not candidates:
            logger.info("AI candidate pool empty", user_id=user_id)
            return AIRankingResult()

        recent_products = get_product_details(
            self.db, recent_ids[:settings.AI_PROMPT_RECENT_VIEWS]
        )
        user_context = build_user_context(
            context,
            recent_products,
            self._category_names(profile.preferred_categories or []),
            profile
        )
        prompt_candidates = candidates[:settings.AI_PROMPT_CANDIDATES]
        user_message = build_user_message(user_context, build_catalog_summary(prompt_candidates), limit)

        try:
            raw_response = self.llm_client.complete(build_system_prompt(limit), user_message)
            picks = parse_ai_picks(raw_response)
            selected_ids, reasons = select_picks(picks, {p.id for p in prompt_candidates}, limit)
        except UpstreamUnavailable as e:
            record_ai_fallback(e.cause)
            logger.warning(
                "AI recommendation failed, falling back to heuristic",
                user_id=user_id,
                cause=e.cause,
                error=str(e)
            )
            return AIRankingResult(
                products=[to_recommended(product) for product in candidates[:limit]]
            )

        products = get_product_details(self.db, selected_ids, reasons)
        log_id = self._log_recommendation(
            user_id,
            [product.id for product in products],
            {"context": context, "aiResponse": picks}
        )
        return AIRankingResult(products=products, ai_succeeded=True, log_id=log_id)

    def _log_recommendation(self, user_id: str, product_ids: List[str], metadata: Dict[str, Any]) -> Optional[str]:
        """Persist the AI pick; a failed write never fails the response"""

        log = RecommendationLog(
            user_id=user_id,
            type=RecommendationType.AI_POWERED,
            recommended_product_ids=product_ids,
            extra_metadata=metadata,
        )
        try:
            self.db.add(log)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Failed to write recommendation log", user_id=user_id, error=str(e))
            return None

        return log.id

    def _category_names(self, category_ids: List[str]) -> List[str]:
        if not category_ids:
            return []

        categories = self.db.query(Category).filter(Category.id.in_(category_ids)).all()
        names = {category.id: category.name for category in categories}
        return [names[category_id] for category_id in category_ids if category_id in names]


# Prompt construction

def format_price(value) -> str:
    return f"${float(value):.2f}"


def build_user_context(
    context: Optional[str],
    recent_products: List[RecommendedProduct],
    category_names: List[str],
    profile: UserPreferenceProfile
) -> str:
    """Describe the user in one line per known fact; unknown facts are left out"""

    lines = []
    if context:
        lines.append(f"User is looking for: {context}")
    if recent_products:
        viewed = ", ".join(
            f'"{p.title}" ({p.type}, {format_price(p.price)})' for p in recent_products
        )
        lines.append(f"Recently viewed: {viewed}")
    if category_names:
        lines.append(f"Preferred categories: {', '.join(category_names)}")
    if profile.has_price_band:
        lines.append(
            f"Budget range: {format_price(profile.price_range_min)} - {format_price(profile.price_range_max)}"
        )
    return "\n".join(lines)


def build_catalog_summary(candidates: List[Product]) -> str:
    lines = []
    for index, product in enumerate(candidates, 1):
        line = (
            f'{index}. [{product.id}] "{product.title}" - {product.type}, {format_price(product.price)}, '
            f"Rating: {float(product.average_rating or 0)}/5 ({product.total_reviews or 0} reviews)"
        )
        if product.category is not None:
            line += f", Category: {product.category.name}"
        lines.append(line)
    return "\n".join(lines)


def build_system_prompt(limit: int) -> str:
    return (
        "You are the shopping recommendation assistant for a digital products marketplace "
        "selling spreadsheet templates, presentations, design assets and similar downloads.\n\n"
        f"Given the user's context and browsing history, select the {limit} best product "
        "recommendations from the catalog provided. For each one, give a one-line reason "
        "why it suits this user.\n\n"
        "Return ONLY a JSON array of objects in exactly this format:\n"
        '[{"id": "product-id", "reason": "Brief reason for recommendation"}]\n\n'
        "Do not include any other text, markdown, or explanation outside the JSON array."
    )


def build_user_message(user_context: str, catalog_summary: str, limit: int) -> str:
    return (
        "User Context:\n"
        f"{user_context or 'New user, no browsing history yet.'}\n\n"
        "Available Products:\n"
        f"{catalog_summary}\n\n"
        f"Select the {limit} best recommendations."
    )


# Response parsing

def parse_ai_picks(raw_response: str) -> List[Any]:
    """
    Decode the model's JSON array, tolerating markdown code fences

    Raises:
        UpstreamUnavailable: the payload is not a JSON array
    """

    cleaned = CODE_FENCE_RE.sub("", raw_response or "").strip()
    try:
        picks = json.loads(cleaned)
    except ValueError as e:
        raise UpstreamUnavailable("malformed_response", f"AI response is not JSON: {e}") from e

    if not isinstance(picks, list):
        raise UpstreamUnavailable("malformed_response", "AI response is not a JSON array")

    return picks


def select_picks(picks: List[Any], candidate_ids: set, limit: int):
    """
    Keep picks that name a pool candidate, in the model's order

    Unknown ids, duplicates and entries without an id are dropped, and the
    list is capped at limit.

    Returns:
        (ordered product ids, id -> reason)

    Raises:
        UpstreamUnavailable: no pick survives
    """

    selected_ids = []
    reasons = {}
    for pick in picks:
        if not isinstance(pick, dict):
            continue
        product_id = pick.get("id")
        if not isinstance(product_id, str) or product_id not in candidate_ids or product_id in reasons:
            continue

        reason = pick.get("reason")
        reasons[product_id] = reason if isinstance(reason, str) and reason else None
        selected_ids.append(product_id)
        if len(selected_ids) >= limit:
            break

    if not selected_ids:
        raise UpstreamUnavailable("no_usable_picks", "AI response named no candidate products")

    return selected_ids, {k: v for k, v in reasons.items() if v}
