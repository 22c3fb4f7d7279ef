"""API clients for external services."""

from .amazon import AmazonClient
from .brave import BraveSearchClient, SearchError
from .gemini import GeminiClient, GeminiError
from .webhook import WebhookClient

__all__ = [
    "AmazonClient",
    "BraveSearchClient",
    "GeminiClient",
    "GeminiError",
    "SearchError",
    "WebhookClient",
]
