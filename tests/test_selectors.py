import pytest

from scrapers import selectors as sel
from scrapers.selectors import Strategy, extract_fields, extract_first
from tests.fakes import FakeElement, FakeNode


class Exploding(FakeElement):
    async def query_selector(self, selector):
        if selector == ".boom":
            raise RuntimeError("detached")
        return await super().query_selector(selector)


@pytest.mark.asyncio
async def test_first_non_empty_strategy_wins():
    root = Exploding(nodes={".empty": FakeNode("   "), ".name": FakeNode(" Blue Door ")})
    strategies = [
        Strategy(selector=".boom"),
        Strategy(selector=".missing"),
        Strategy(selector=".empty"),
        Strategy(selector=".name"),
    ]
    assert await extract_first(root, strategies) == "Blue Door"


@pytest.mark.asyncio
async def test_attribute_and_pattern():
    root = FakeElement(nodes={"button": FakeNode("", {"aria-label": "Address: 12 Orchard Ln "})})
    value = await extract_first(
        root, [Strategy(selector="button", attribute="aria-label", pattern=r"Address:\s*(.+)")]
    )
    assert value == "12 Orchard Ln"


@pytest.mark.asyncio
async def test_pattern_miss_falls_through_to_script():
    root = FakeElement(
        nodes={".rating": FakeNode("no digits here")},
        scripts=lambda script, arg: "4.5" if script == "scan" else "",
    )
    value = await extract_first(
        root, [Strategy(selector=".rating", pattern=r"(\d+)"), Strategy(script="scan")]
    )
    assert value == "4.5"


@pytest.mark.asyncio
async def test_missing_fields_are_none():
    values = await extract_fields(FakeElement(), sel.BUSINESS_FIELDS)
    assert set(values) == set(sel.BUSINESS_FIELDS)
    assert all(v is None for v in values.values())


def test_value_parsers():
    assert sel.parse_float("4,6") == 4.6
    assert sel.parse_float("n/a") == 0.0
    assert sel.parse_int("1,234 reviews") == 1234
    assert sel.parse_int(None) == 0
    assert sel.truncate_hours("x" * 250) == "x" * 200 + "..."
    assert sel.truncate_hours("") is None


def test_review_key_uses_text_prefix():
    text = "a" * 80
    assert sel.review_key("Ana", text) == sel.review_key("Ana", text[:50] + "different tail")
    assert sel.review_key("Ana", text) != sel.review_key("Ben", text)
