"""
Sentiment module - Client for the remote sentiment-analysis API.
"""

from .client import SentimentClient, extract_sentiment, guess_mime_type

__all__ = ["SentimentClient", "extract_sentiment", "guess_mime_type"]
