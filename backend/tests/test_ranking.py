"""Tests for the ranking engine and its prompt/response helpers"""

import pytest

from marketplace_recs.exceptions import UpstreamUnavailable
from marketplace_recs.models import UserPreferenceProfile
from marketplace_recs.schemas.recommendation import RecommendedProduct
from marketplace_recs.services.ranking import (
    RankingEngine,
    build_catalog_summary,
    build_user_context,
    build_user_message,
    parse_ai_picks,
    select_picks,
)

from conftest import FakeLLM


def _profile(**kwargs):
    values = dict(
        user_id="u1",
        preferred_categories=[],
        preferred_types=[],
        browsing_history=[],
        purchase_history=[],
    )
    values.update(kwargs)
    return UserPreferenceProfile(**values)


# Response parsing

def test_parse_plain_json_array():
    picks = parse_ai_picks('[{"id": "p1", "reason": "Fits your budget"}]')

    assert picks == [{"id": "p1", "reason": "Fits your budget"}]


def test_parse_strips_markdown_fences():
    raw = '```json\n[{"id": "p2", "reason": "Popular"}]\n```'

    assert parse_ai_picks(raw) == [{"id": "p2", "reason": "Popular"}]


def test_parse_rejects_prose():
    with pytest.raises(UpstreamUnavailable) as exc_info:
        parse_ai_picks("Here are my picks: p1, p2")

    assert exc_info.value.cause == "malformed_response"


def test_parse_rejects_non_array():
    with pytest.raises(UpstreamUnavailable):
        parse_ai_picks('{"id": "p1"}')


def test_select_picks_keeps_model_order_and_drops_unknown():
    picks = [
        {"id": "p3", "reason": "Top rated"},
        {"id": "ghost", "reason": "Hallucinated"},
        {"id": "p1"},
        {"id": "p3", "reason": "Duplicate"},
        "p7",
        {"id": "p7", "reason": "Matches your category"},
    ]

    ids, reasons = select_picks(picks, {"p1", "p3", "p7"}, limit=5)

    assert ids == ["p3", "p1", "p7"]
    assert reasons == {"p3": "Top rated", "p7": "Matches your category"}


def test_select_picks_caps_at_limit():
    picks = [{"id": pid, "reason": "ok"} for pid in ["p1", "p2", "p3"]]

    ids, _ = select_picks(picks, {"p1", "p2", "p3"}, limit=2)

    assert ids == ["p1", "p2"]


def test_select_picks_without_usable_ids_fails():
    with pytest.raises(UpstreamUnavailable) as exc_info:
        select_picks([{"id": "ghost"}], {"p1"}, limit=3)

    assert exc_info.value.cause == "no_usable_picks"


# Prompt construction

def test_user_context_omits_missing_facts():
    assert build_user_context(None, [], [], _profile()) == ""


def test_user_context_includes_known_facts():
    viewed = [RecommendedProduct(
        id="p1", title="Budget Planner", slug="budget-planner", price=19.5,
        average_rating=4.5, total_reviews=3, type="excel_template"
    )]
    profile = _profile(price_range_min=10, price_range_max=40)

    context = build_user_context("monthly budgeting", viewed, ["Finance"], profile)

    assert context.splitlines() == [
        "User is looking for: monthly budgeting",
        'Recently viewed: "Budget Planner" (excel_template, $19.50)',
        "Preferred categories: Finance",
        "Budget range: $10.00 - $40.00",
    ]


def test_user_message_for_new_user():
    message = build_user_message("", "1. [p1] ...", 4)

    assert "New user, no browsing history yet." in message
    assert "Select the 4 best recommendations." in message


def test_catalog_summary_enumerates_candidates(db_session, catalog):
    summary = build_catalog_summary([catalog["p5"], catalog["p3"]])

    lines = summary.splitlines()
    assert lines[0].startswith('1. [p5] "Product p5" - presentation, $15.00')
    assert lines[0].endswith("Category: Marketing")
    assert "(50 reviews)" in lines[1]


# Personalized feed

def test_for_you_without_profile_data_is_catalog_by_rating(db_session, catalog):
    engine = RankingEngine(db_session, FakeLLM())

    products = engine.for_you(_profile(), limit=3)

    assert [p.id for p in products] == ["p5", "p3", "p2"]
    assert all(p.reason is None for p in products)


def test_for_you_applies_profile_filters(db_session, catalog):
    engine = RankingEngine(db_session, FakeLLM())
    profile = _profile(
        preferred_categories=["c1"],
        price_range_min=10,
        price_range_max=30,
        purchase_history=["p3"],
    )

    products = engine.for_you(profile, limit=10)

    # c1 published within 10..30, p3 purchased, p4 too expensive
    assert [p.id for p in products] == ["p2", "p1"]


def test_similar_hydrates_in_candidate_order(db_session, catalog):
    engine = RankingEngine(db_session, FakeLLM())

    products = engine.similar("p1", limit=5)

    assert [p.id for p in products] == ["p3", "p2", "p4"]
    assert products[0].title == "Product p3"
    assert products[0].price == 10.0
