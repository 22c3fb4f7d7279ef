"""Article generation service - pattern-aware nine-section review articles."""

import logging
import re
from pathlib import Path

from ..clients.gemini import GeminiClient
from ..models import Article, Product, SearchResult
from ..models.category import category_name
from ..models.patterns import get_focus, get_pattern, generate_title
from ..models.sections import get_section_prompt
from ..utils import strip_tags
from .research import format_context

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

TITLE_RE = re.compile(r"<title>([^<]+)</title>")
EXCERPT_RE = re.compile(r"<excerpt>([^<]+)</excerpt>")
CONTENT_RE = re.compile(r"<content>(.*?)</content>", re.DOTALL)


class ArticleGenerationError(Exception):
    """Failed to generate an article."""
    pass


class ResponseParseError(Exception):
    """Failed to parse model output."""
    def __init__(self, message: str, raw_output: str):
        self.raw_output = raw_output
        super().__init__(message)


def load_prompt(name: str) -> str:
    """Load a prompt file from the package prompts directory."""
    path = PROMPTS_DIR / f"{name}.txt"
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")
    return path.read_text(encoding="utf-8").strip()


def parse_response(text: str, product_name: str) -> Article:
    """Extract <title>, <excerpt> and <content> from a model response.

    Missing tags fall back to generic copy; missing <content> keeps the whole text.
    """
    title_match = TITLE_RE.search(text)
    excerpt_match = EXCERPT_RE.search(text)
    content_match = CONTENT_RE.search(text)

    title = title_match.group(1).strip() if title_match else f"{product_name}を徹底解説"
    excerpt = excerpt_match.group(1).strip() if excerpt_match else f"{product_name}の選び方と注意点をまとめました"
    content = content_match.group(1).strip() if content_match else text

    return Article(
        title=title,
        excerpt=excerpt,
        content=content,
        char_count=len(strip_tags(content)),
    )


class ArticleService:
    """Write review articles with Gemini."""

    def __init__(self, gemini: GeminiClient):
        self.gemini = gemini

    def generate(
        self,
        product_name: str,
        category: str,
        search_results: list[SearchResult],
        pattern_key: str | None = None,
        custom_title: str | None = None,
    ) -> Article:
        """Generate one article for a product and (optional) pattern."""
        system_prompt = load_prompt("article_writer")
        user_message = self._build_user_message(
            product_name, category, search_results, pattern_key, custom_title
        )

        try:
            text = self.gemini.call(
                user_message,
                system_prompt=system_prompt,
                label="ARTICLE",
                temperature=0.85,
                max_output_tokens=16000,
            )
        except Exception as e:
            raise ArticleGenerationError(f"Gemini call failed for {product_name}: {e}") from e

        article = parse_response(text, product_name)
        if not article.content.strip():
            raise ArticleGenerationError(f"Empty article body for {product_name}")

        print(f"  {article.char_count} characters generated", flush=True)
        return article

    def _build_user_message(
        self,
        product_name: str,
        category: str,
        search_results: list[SearchResult],
        pattern_key: str | None,
        custom_title: str | None,
    ) -> str:
        """Build the per-article message: product, angle, research and section layout."""
        lines = [
            "【商品情報】",
            f"商品名: {product_name}",
            f"カテゴリー: {category_name(category)}",
        ]

        if pattern_key:
            pattern = get_pattern(category, pattern_key)
            lines.extend(["", "【記事の切り口（パターン）】", f"パターン: {pattern_key}"])
            if pattern:
                lines.append(f"狙い: {pattern.prompt}")
            focus = get_focus(pattern_key)
            if focus:
                lines.append(f"重視ポイント: {focus}")
            lines.append("このパターンの視点を記事全体に反映させること")

        suggested = custom_title or (
            generate_title(category, pattern_key, product_name) if pattern_key else None
        )
        if suggested:
            lines.extend(["", "【参考タイトル例】", suggested])

        lines.extend([
            "",
            "【参考情報】",
            format_context(search_results) or "（検索結果なし）",
            "",
            "【記事構成（9セクション・5000-7000文字）】",
            get_section_prompt(pattern_key, product_name),
        ])
        return "\n".join(lines)

    def check_pattern_relevance(self, product: Product, pattern_key: str) -> bool:
        """Ask Gemini whether a product/pattern pair makes a worthwhile article.

        Any failure counts as suitable.
        """
        pattern = get_pattern(product.category, pattern_key)
        pattern_name = pattern.name if pattern else pattern_key
        question = "\n".join([
            f"{load_prompt('pattern_check')}",
            "",
            f"製品: {product.name}",
            f"カテゴリー: {product.category} / {product.subcat}",
            f"記事パターン: {pattern_key} ({pattern_name})",
            "",
            "この組み合わせで価値のある記事が書けますか？",
        ])
        try:
            return self.gemini.ask_yes_no(question)
        except Exception as e:
            logger.warning(f"Relevance check failed for {product.name} x {pattern_key}: {e}")
            return True
