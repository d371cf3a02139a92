"""
Selector cascades for Maps listing pages.

The listing markup is unversioned and its class names drift, so every field
has an ordered list of extraction strategies. The first strategy that yields
a non-empty value wins; a field with no match is simply left empty.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    """
    One way of reading a value from a page or element.

    Exactly one of selector or script is used. With a selector, the matched
    element's text (or attribute, when given) is read. A script is evaluated
    with the root element as its argument. The optional pattern is applied to
    the raw value and its first group (or whole match) is kept.
    """

    selector: str = ""
    attribute: Optional[str] = None
    script: Optional[str] = None
    pattern: Optional[str] = None


async def run_strategy(root: Any, strategy: Strategy) -> Optional[str]:
    """Apply one strategy to a Playwright Page or ElementHandle."""
    if strategy.script:
        value = await root.evaluate(strategy.script)
    else:
        element = await root.query_selector(strategy.selector)
        if element is None:
            return None
        if strategy.attribute:
            value = await element.get_attribute(strategy.attribute)
        else:
            value = await element.text_content()

    text = str(value).strip() if value is not None else ""
    if text and strategy.pattern:
        match = re.search(strategy.pattern, text, re.IGNORECASE)
        if not match:
            return None
        text = (match.group(1) if match.groups() else match.group(0)).strip()
    return text or None


async def extract_first(root: Any, strategies: List[Strategy]) -> Optional[str]:
    """Return the first non-empty value produced by the strategies, in order."""
    for strategy in strategies:
        try:
            value = await run_strategy(root, strategy)
        except Exception as e:
            logger.debug(f"Strategy {strategy} failed: {e}")
            continue
        if value:
            return value
    return None


async def extract_fields(root: Any, table: Dict[str, List[Strategy]]) -> Dict[str, Optional[str]]:
    """Run every field's cascade and return raw string values keyed by field."""
    return {field: await extract_first(root, strategies) for field, strategies in table.items()}


# ======================
# Business fields
# ======================

_REVIEW_COUNT_SCAN = """() => {
    for (const el of document.querySelectorAll('button, span, a')) {
        const m = (el.textContent || '').match(/([\\d,]+)\\s*reviews?/i);
        if (m) return m[1];
    }
    return '';
}"""

_CATEGORY_SCAN = """() => {
    const re = /^(Coffee shop|Restaurant|Cafe|Bar|Bakery|Hotel|Store|Shop|Gym|Salon|Spa|Clinic|Dentist|Agency|Studio)/i;
    for (const el of document.querySelectorAll('span, button')) {
        const t = (el.textContent || '').trim();
        if (t.length < 60 && re.test(t)) return t;
    }
    return '';
}"""

BUSINESS_FIELDS: Dict[str, List[Strategy]] = {
    "name": [
        Strategy(selector="h1.DUwDvf"),
        Strategy(selector="h1"),
        Strategy(selector='meta[property="og:title"]', attribute="content", pattern=r"^([^·]+)"),
    ],
    "rating": [
        Strategy(selector='div.F7nice span[aria-hidden="true"]', pattern=r"(\d+(?:[.,]\d+)?)"),
        Strategy(selector='[role="img"][aria-label*="star"]', attribute="aria-label",
                 pattern=r"(\d+(?:[.,]\d+)?)"),
    ],
    "review_count": [
        Strategy(selector='div.F7nice span[aria-label*="review"]', attribute="aria-label",
                 pattern=r"([\d,]+)"),
        Strategy(selector='button[jsaction*="reviewChart"]', pattern=r"([\d,]+)"),
        Strategy(script=_REVIEW_COUNT_SCAN),
    ],
    "category": [
        Strategy(selector='button[jsaction*="category"]'),
        Strategy(selector="span.DkEaL"),
        Strategy(script=_CATEGORY_SCAN),
    ],
    "address": [
        Strategy(selector='[data-item-id="address"] .Io6YTe'),
        Strategy(selector='button[data-item-id="address"]', attribute="aria-label",
                 pattern=r"Address:\s*(.+)"),
        Strategy(selector='button[data-item-id="address"]'),
    ],
    "phone": [
        Strategy(selector='[data-item-id*="phone"] .Io6YTe'),
        Strategy(selector='button[data-item-id*="phone"]', attribute="aria-label",
                 pattern=r"Phone:\s*(.+)"),
        Strategy(selector='button[data-item-id*="phone"]'),
    ],
    "website": [
        Strategy(selector='a[data-item-id="authority"]', attribute="href"),
        Strategy(selector='a[aria-label*="Website"]', attribute="href"),
    ],
    "hours": [
        Strategy(selector='[aria-label*="Monday"]', attribute="aria-label"),
        Strategy(selector="table.eK4R0e", attribute="aria-label"),
        Strategy(selector='[data-item-id="oh"]', attribute="aria-label"),
    ],
    "price_level": [
        Strategy(selector='span[aria-label*="Price"]'),
        Strategy(selector='[aria-label*="Price"]'),
        Strategy(selector="span.mgr77e", pattern=r"(\$+|€+|£+)"),
    ],
}

HOURS_MAX_LENGTH = 200


# ======================
# Review fields
# ======================

REVIEW_ITEM_SELECTOR = "div.jftiEf, div[data-review-id][aria-label]"

# Last resort for the body: longest leaf text inside the star element's review card
_LONGEST_TEXT_NEAR_STARS = """(el) => {
    const star = el.querySelector('[role="img"][aria-label*="star"]');
    const scope = (star && star.closest('[data-review-id], .jftiEf')) || el;
    let best = '';
    scope.querySelectorAll('span, div').forEach(node => {
        if (node.children.length > 0) return;
        const t = (node.textContent || '').trim();
        if (t.length > best.length) best = t;
    });
    return best;
}"""

REVIEW_FIELDS: Dict[str, List[Strategy]] = {
    "author": [
        Strategy(selector=".d4r55"),
        Strategy(selector='button[aria-label^="Photo of"]', attribute="aria-label",
                 pattern=r"Photo of (.+)"),
        Strategy(script="(el) => el.getAttribute('aria-label') || ''"),
    ],
    "rating": [
        Strategy(selector='[role="img"][aria-label*="star"]', attribute="aria-label", pattern=r"(\d)"),
        Strategy(selector="span.kvMYJc", attribute="aria-label", pattern=r"(\d)"),
        Strategy(selector="span.fzvQIb", pattern=r"(\d)\s*/\s*5"),
    ],
    "date": [
        Strategy(selector=".rsqaWe"),
        Strategy(selector=".xRkPPb"),
        Strategy(selector=".DU9Pgb span"),
    ],
    "text": [
        Strategy(selector=".wiI7pd"),
        Strategy(selector=".MyEned"),
        Strategy(selector="[data-expandable-section]"),
        Strategy(script=_LONGEST_TEXT_NEAR_STARS),
    ],
}

DEDUP_TEXT_PREFIX = 50


def review_key(author: str, text: str) -> str:
    return f"{author}|{text[:DEDUP_TEXT_PREFIX]}"


# ======================
# Page actions
# ======================

# Title heuristic: a place page title looks like "<Name> - Google Maps"
PLACE_TITLE_SUFFIX = " - Google Maps"
SEARCH_PAGE_TITLE = "Google Maps"

CLICK_FIRST_RESULT = """() => {
    const first = document.querySelector('[role="feed"] > div a, .Nv2PK a, a[href*="/maps/place/"]');
    if (first) { first.click(); return true; }
    return false;
}"""

# Ordered click strategies for opening the reviews panel
OPEN_REVIEWS_STRATEGIES: List[tuple] = [
    ("exact_text", """() => {
        for (const el of document.querySelectorAll('[role="tab"], button')) {
            if (/^Reviews$/i.test((el.textContent || '').trim())) { el.click(); return true; }
        }
        return false;
    }"""),
    ("aria_label", """() => {
        const el = document.querySelector('[role="tab"][aria-label*="review" i], button[aria-label*="review" i]');
        if (el) { el.click(); return true; }
        return false;
    }"""),
    ("jsaction", """() => {
        const el = document.querySelector('[jsaction*="review"]');
        if (el) { el.click(); return true; }
        return false;
    }"""),
    ("star_rating", """() => {
        const el = document.querySelector('[role="img"][aria-label*="star"]');
        if (!el) return false;
        (el.closest('button') || el).click();
        return true;
    }"""),
]

REVIEW_CONTAINER_SELECTORS = [
    ".m6QErb.DxyBCb",
    ".m6QErb.XiKgde",
    '[tabindex="-1"].m6QErb',
]

PANEL_STATE = """(args) => {
    const [itemSelector, containerSelectors] = args;
    let height = 0;
    for (const sel of containerSelectors) {
        const el = document.querySelector(sel);
        if (el) height = Math.max(height, el.scrollHeight);
    }
    return { reviews: document.querySelectorAll(itemSelector).length, height };
}"""

SCROLL_REVIEWS = """(containerSelectors) => {
    for (const sel of containerSelectors) {
        const el = document.querySelector(sel);
        if (el) { el.scrollTop = el.scrollHeight; return true; }
    }
    return false;
}"""

EXPAND_REVIEWS = """() => {
    const buttons = document.querySelectorAll('button.w8nwRe, button.M77dve, button[aria-label="See more"]');
    buttons.forEach(b => b.click());
    return buttons.length;
}"""

OPEN_SORT_MENU = """() => {
    const btn = document.querySelector('[aria-label*="Sort"], button[data-value="sort"]');
    if (btn) { btn.click(); return true; }
    for (const b of document.querySelectorAll('button')) {
        if (/most relevant|sort/i.test(b.textContent || '')) { b.click(); return true; }
    }
    return false;
}"""

PICK_LOWEST_RATING = """() => {
    for (const el of document.querySelectorAll('[role="menuitemradio"], [data-index]')) {
        if (/lowest/i.test(el.textContent || '')) { el.click(); return true; }
    }
    return false;
}"""


# ======================
# Value parsing
# ======================

def parse_float(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        return float(value.replace(",", "."))
    except ValueError:
        return 0.0


def parse_int(value: Optional[str]) -> int:
    if not value:
        return 0
    digits = re.sub(r"[^\d]", "", value)
    return int(digits) if digits else 0


def truncate_hours(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value if len(value) <= HOURS_MAX_LENGTH else value[:HOURS_MAX_LENGTH] + "..."
