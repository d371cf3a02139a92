import pytest
from unittest.mock import AsyncMock, patch

from config import settings
from models import Sentiment
from scrapers import selectors as sel
from scrapers.browserbase import scrape_with_browserbase
from scrapers.errors import ProviderFailure
from tests.fakes import FakeElement, FakeNode, FakePage


class FakeSession:
    def __init__(self, page=None, fail_on_open=None, session_id="sess_123"):
        self.page = page
        self.fail_on_open = fail_on_open
        self._id = session_id
        self.session_id = None
        self.session_url = None
        self.closed = False

    async def open(self):
        if self._id:
            self.session_id = self._id
            self.session_url = f"https://www.browserbase.com/sessions/{self._id}"
        if self.fail_on_open:
            raise self.fail_on_open
        return self.page

    async def live_view_url(self):
        return "https://live.example/sess_123"

    async def close(self):
        self.closed = True


def review_item(author, stars, text, date="a week ago"):
    nodes = {}
    if author:
        nodes[".d4r55"] = FakeNode(author)
    if stars:
        nodes['[role="img"][aria-label*="star"]'] = FakeNode("", {"aria-label": f"{stars} stars"})
    if text:
        nodes[".wiI7pd"] = FakeNode(text)
    nodes[".rsqaWe"] = FakeNode(date)
    return FakeElement(nodes=nodes)


def page_scripts(sort_available=False):
    def run(script, arg):
        if script == sel.PANEL_STATE:
            return {"reviews": 3, "height": 900}
        if script == sel.OPEN_REVIEWS_STRATEGIES[0][1]:
            return True
        if script == sel.OPEN_SORT_MENU:
            return sort_available
        if script == sel.PICK_LOWEST_RATING:
            return sort_available
        if script == sel.CLICK_FIRST_RESULT:
            return False
        return ""
    return run


@pytest.fixture
def fast_timings(monkeypatch):
    monkeypatch.setattr(settings, "REVIEW_POLL_ATTEMPTS", 2)
    monkeypatch.setattr(settings, "REVIEW_SCROLL_ITERATIONS", 1)
    monkeypatch.setattr(settings, "LOWEST_SORT_SCROLL_ITERATIONS", 1)


@pytest.fixture
def listing_page():
    return FakePage(
        nodes={
            "h1.DUwDvf": FakeNode("Blue Door Bakery"),
            'div.F7nice span[aria-hidden="true"]': FakeNode("4.6"),
            'div.F7nice span[aria-label*="review"]': FakeNode("", {"aria-label": "1,234 reviews"}),
            '[data-item-id="address"] .Io6YTe': FakeNode("12 Orchard Ln"),
        },
        scripts=page_scripts(),
        items=[
            review_item("Ana", 5, "Croissants are perfect."),
            review_item("Ben", 1, "Waited 30 minutes."),
            review_item("Ana", 5, "Croissants are perfect."),
            review_item("", 0, ""),
        ],
    )


@pytest.mark.asyncio
async def test_scrapes_listing_and_releases_session(fast_timings, listing_page):
    session = FakeSession(page=listing_page)
    on_session = AsyncMock()

    with patch("scrapers.browserbase.RemoteBrowserSession", return_value=session), \
         patch("scrapers.browserbase.dismiss_consent", new=AsyncMock()) as mock_consent:
        result = await scrape_with_browserbase("https://maps.google.com/?cid=42", on_session)

    assert session.closed
    mock_consent.assert_awaited_once()
    on_session.assert_awaited_once_with(
        "sess_123", "https://www.browserbase.com/sessions/sess_123", "https://live.example/sess_123"
    )

    assert result.provider == "browserbase"
    assert result.remote_session_id == "sess_123"
    business = result.business
    assert business.name == "Blue Door Bakery"
    assert business.rating == 4.6
    assert business.review_count == 1234
    assert business.address == "12 Orchard Ln"
    assert business.category == "Business"
    assert business.phone is None

    # Duplicate and empty items are dropped
    assert [r.author for r in business.reviews] == ["Ana", "Ben"]
    assert [r.sentiment for r in business.reviews] == [Sentiment.POSITIVE, Sentiment.NEGATIVE]
    listing_page.goto.assert_awaited_once()


@pytest.mark.asyncio
async def test_lowest_rating_pass_merges_without_duplicates(fast_timings):
    first_pass = [review_item("Ana", 5, "Great.")]
    second_pass = [review_item("Ana", 5, "Great."), review_item("Cy", 2, "Cold coffee.")]
    page = FakePage(
        nodes={"h1": FakeNode("Blue Door Bakery")},
        scripts=page_scripts(sort_available=True),
        items=first_pass,
    )

    original_wait = page.wait_for_timeout

    async def switch_items_after_sort(ms):
        # PICK_LOWEST_RATING is followed by a 3000ms wait
        if ms == 3000:
            page.items = second_pass
        await original_wait(ms)

    page.wait_for_timeout = switch_items_after_sort
    session = FakeSession(page=page)

    with patch("scrapers.browserbase.RemoteBrowserSession", return_value=session), \
         patch("scrapers.browserbase.dismiss_consent", new=AsyncMock()):
        result = await scrape_with_browserbase("https://maps.google.com/?cid=42")

    assert [r.author for r in result.business.reviews] == ["Ana", "Cy"]


@pytest.mark.asyncio
async def test_failure_carries_session_and_still_releases():
    session = FakeSession(fail_on_open=RuntimeError("CDP connect timeout"))

    with patch("scrapers.browserbase.RemoteBrowserSession", return_value=session):
        with pytest.raises(ProviderFailure) as exc_info:
            await scrape_with_browserbase("https://maps.google.com/?cid=42")

    failure = exc_info.value
    assert failure.provider == "browserbase"
    assert failure.session_id == "sess_123"
    assert failure.session_url == "https://www.browserbase.com/sessions/sess_123"
    assert failure.has_session
    assert isinstance(failure.cause, RuntimeError)
    assert session.closed


@pytest.mark.asyncio
async def test_failure_before_session_has_no_session():
    session = FakeSession(fail_on_open=RuntimeError("401"), session_id=None)

    with patch("scrapers.browserbase.RemoteBrowserSession", return_value=session):
        with pytest.raises(ProviderFailure) as exc_info:
            await scrape_with_browserbase("https://maps.google.com/?cid=42")

    assert not exc_info.value.has_session
