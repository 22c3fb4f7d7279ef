"""Business logic services."""

from .article import ArticleGenerationError, ArticleService
from .comparison import ComparisonService
from .deploy import DeployError, GitPublisher
from .ogp import OgpError, OgpRenderer
from .pipeline import ArticlePipeline
from .research import ResearchService

__all__ = [
    "ArticleGenerationError",
    "ArticlePipeline",
    "ArticleService",
    "ComparisonService",
    "DeployError",
    "GitPublisher",
    "OgpError",
    "OgpRenderer",
    "ResearchService",
]
