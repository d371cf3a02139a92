import pytest

from config import settings
from core import cache, tracing
from models import BusinessRecord
from analyzer.sentiment import make_review


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch):
    """Run every test with no live providers, no LLM, no tracing and a fresh memory store."""
    for key in (
        "ANTHROPIC_API_KEY",
        "BROWSERBASE_API_KEY",
        "BROWSERBASE_PROJECT_ID",
        "APIFY_API_TOKEN",
        "WANDB_API_KEY",
    ):
        monkeypatch.setattr(settings, key, "")
    monkeypatch.setattr(settings, "STORE_BACKEND", "memory")
    monkeypatch.setattr(cache, "_profile_store", None)
    monkeypatch.setattr(tracing, "_tracer", None)
    yield


@pytest.fixture
def memory_store():
    return cache.MemoryProfileStore()


@pytest.fixture
def business():
    return BusinessRecord(
        name="Blue Door Bakery",
        category="Bakery",
        rating=4.1,
        review_count=230,
        address="12 Orchard Ln, Portland, OR",
        phone="(503) 555-0188",
        source_url="https://maps.google.com/?cid=42",
        reviews=[
            make_review("Ana", 5, "a week ago", "Croissants are perfect."),
            make_review("Ben", 1, "2 weeks ago", "Waited 30 minutes and the order was wrong."),
            make_review("Cy", 3, "a month ago", "Fine, a bit expensive."),
        ],
    )
