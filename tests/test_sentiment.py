import pytest

from analyzer.sentiment import classify, classify_reviews, count_by_sentiment, make_review
from models import Review, Sentiment


@pytest.mark.parametrize(
    "rating, expected",
    [
        (5, Sentiment.POSITIVE),
        (4, Sentiment.POSITIVE),
        (3, Sentiment.NEUTRAL),
        (2, Sentiment.NEGATIVE),
        (1, Sentiment.NEGATIVE),
        (0, Sentiment.NEUTRAL),
    ],
)
def test_classify_rule(rating, expected):
    assert classify(rating) == expected


def test_make_review_clamps_rating_before_classifying():
    review = make_review("Dee", 9, "today", "Amazing")
    assert review.rating == 5
    assert review.sentiment == Sentiment.POSITIVE

    review = make_review("", -3, "", "")
    assert review.rating == 0
    assert review.author == "Anonymous"
    assert review.sentiment == Sentiment.NEUTRAL


def test_classify_reviews_is_pure_and_idempotent():
    raw = [Review(author="A", rating=1, text="bad"), Review(author="B", rating=4, text="good")]
    once = classify_reviews(raw)
    twice = classify_reviews(once)

    assert [r.sentiment for r in once] == [Sentiment.NEGATIVE, Sentiment.POSITIVE]
    assert once == twice
    # Inputs are untouched
    assert all(r.sentiment == Sentiment.NEUTRAL for r in raw)


def test_count_by_sentiment():
    reviews = [make_review("a", r, "", "") for r in (5, 4, 3, 2, 0)]
    assert count_by_sentiment(reviews) == {"positive": 2, "negative": 1, "neutral": 2}
