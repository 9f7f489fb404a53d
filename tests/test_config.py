"""Settings loading from the environment."""

import pytest
from pydantic import ValidationError

from app.config import Environment, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("MONGO_URI", "MONGODB_URI_STRING", "CORS_ORIGINS", "LOCAL_CORS_URLS", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Settings(_env_file=None)
    assert config.port == 42069
    assert config.mongo_db_name == "Recipe_Service"
    assert config.ingredients_collection == "Ingredients"
    assert config.recipes_collection == "recipes"
    assert config.is_development()


def test_mongo_uri_alias(monkeypatch):
    monkeypatch.setenv("MONGODB_URI_STRING", "mongodb://db.internal:27017")
    assert Settings(_env_file=None).mongo_uri == "mongodb://db.internal:27017"


def test_cors_origins_alias(monkeypatch):
    monkeypatch.setenv("LOCAL_CORS_URLS", "http://a.test, http://b.test,")
    assert Settings(_env_file=None).cors_origin_list() == ["http://a.test", "http://b.test"]


def test_environment_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "Production")
    config = Settings(_env_file=None)
    assert config.environment == Environment.PRODUCTION
    assert config.is_production()


def test_invalid_timeout_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, aggregation_timeout_sec=0)
