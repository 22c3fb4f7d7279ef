"""Data models."""

from .article import Article, ComparedProduct, ComparisonArticle, PageMeta
from .product import Product, RankingCandidate, ValidationResult
from .queue import BatchItem, Progress, QueueItem
from .search import SearchResult
from .site import SiteLayout

__all__ = [
    "Article",
    "BatchItem",
    "ComparedProduct",
    "ComparisonArticle",
    "PageMeta",
    "Product",
    "Progress",
    "QueueItem",
    "RankingCandidate",
    "SearchResult",
    "SiteLayout",
    "ValidationResult",
]
