# Analyzer package - review classification and LLM analysis
from .sentiment import classify, classify_reviews

__all__ = [
    "classify",
    "classify_reviews",
]
