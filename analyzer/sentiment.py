"""
Review sentiment classification.

Sentiment is derived from the numeric star rating only and is assigned once,
when a provider ingests a review.
"""

from typing import Iterable, List

from models import Review, Sentiment


def classify(rating: int) -> Sentiment:
    """
    Map a star rating to a sentiment label.

    A rating of 0 means the rating was not readable and is neutral.
    Otherwise 4-5 stars are positive, 1-2 stars negative, 3 stars neutral.
    """
    if rating == 0:
        return Sentiment.NEUTRAL
    if rating >= 4:
        return Sentiment.POSITIVE
    if rating <= 2:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def make_review(author: str, rating: int, date: str, text: str) -> Review:
    """Build a Review with its sentiment already set."""
    review = Review(author=author, rating=rating, date=date or "", text=text or "")
    return review.model_copy(update={"sentiment": classify(review.rating)})


def classify_reviews(reviews: Iterable[Review]) -> List[Review]:
    """Return copies of the reviews with sentiment recomputed from rating."""
    return [r.model_copy(update={"sentiment": classify(r.rating)}) for r in reviews]


def count_by_sentiment(reviews: Iterable[Review]) -> dict:
    counts = {s.value: 0 for s in Sentiment}
    for review in reviews:
        counts[classify(review.rating).value] += 1
    return counts
