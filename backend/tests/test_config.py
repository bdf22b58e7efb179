"""Tests for settings"""

from marketplace_recs.config import Settings


def test_database_url_names_psycopg2_driver():
    settings = Settings(POSTGRES_HOST="db.internal", POSTGRES_PORT=5432, POSTGRES_DB="shop")

    assert settings.DATABASE_URL.startswith("postgresql+psycopg2://")
    assert settings.DATABASE_URL.endswith("@db.internal:5432/shop")
