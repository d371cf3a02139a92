"""
Static fallback data for the discovery pipeline.

MOCK_BUSINESS is returned when no live provider is configured or every live
provider failed. CANNED_REVIEWS fill in a sample when a provider reports a
non-zero review count but no review text could be scraped.
"""

from typing import List

from analyzer.sentiment import make_review
from models import BusinessRecord, Review, generate_business_id, utc_now


MOCK_BUSINESS = {
    "name": "Golden Hour Coffee Co.",
    "category": "Coffee shop",
    "rating": 4.3,
    "review_count": 412,
    "address": "1180 Valencia St, San Francisco, CA 94110",
    "phone": "(415) 555-0142",
    "website": "https://goldenhourcoffee.example",
    "hours": "Monday 6:30 AM-6 PM, Tuesday 6:30 AM-6 PM, Wednesday 6:30 AM-6 PM, "
    "Thursday 6:30 AM-6 PM, Friday 6:30 AM-7 PM, Saturday 7 AM-7 PM, Sunday 7 AM-5 PM",
    "price_level": "$$",
}

MOCK_REVIEWS = [
    ("Priya S.", 5, "2 weeks ago",
     "Best oat latte in the Mission. Baristas remember my order and the pastries are always fresh."),
    ("Marcus T.", 2, "a month ago",
     "Waited 25 minutes for a drip coffee on a Saturday morning. Only one register open and the line was out the door."),
    ("Dana K.", 4, "3 weeks ago",
     "Great space to work from, good wifi. Wish there were more outlets near the window seats."),
    ("Leo M.", 1, "2 months ago",
     "Ordered ahead on the app, showed up and they had no record of it. Staff shrugged and told me to reorder."),
    ("Hannah W.", 5, "a week ago",
     "Cardamom bun is unreal. Friendly staff even during the rush."),
    ("Omar R.", 3, "a month ago",
     "Coffee is solid but prices went up again. $7 for a cortado is hard to justify."),
    ("Sofia L.", 2, "3 months ago",
     "Tables were sticky and the trash was overflowing by noon. Nobody seemed to be cleaning."),
    ("Jake P.", 4, "5 days ago",
     "Reliable morning stop. Would love earlier weekend hours."),
]

CANNED_REVIEWS = [
    ("Local Guide", 5, "recently",
     "Friendly staff and consistently good quality. One of my regular spots."),
    ("Anonymous", 2, "recently",
     "Long wait during the busy hours and nobody explained the delay."),
    ("Anonymous", 3, "recently",
     "Decent overall but a bit pricey for what you get."),
    ("Local Guide", 4, "recently",
     "Clean, welcoming, and the owner clearly cares. Parking can be tricky."),
    ("Anonymous", 1, "recently",
     "Called twice to ask about hours and nobody picked up the phone."),
]


def _build_reviews(rows) -> List[Review]:
    return [make_review(author, rating, date, text) for author, rating, date, text in rows]


def mock_reviews() -> List[Review]:
    return _build_reviews(MOCK_REVIEWS)


def canned_reviews() -> List[Review]:
    return _build_reviews(CANNED_REVIEWS)


def mock_business(source_url: str) -> BusinessRecord:
    """
    Synthesize the fallback business record.

    The input URL is only used for source_url; everything else is fixed.
    """
    return BusinessRecord(
        id=generate_business_id(),
        source_url=source_url,
        scraped_at=utc_now(),
        reviews=mock_reviews(),
        **MOCK_BUSINESS,
    )
