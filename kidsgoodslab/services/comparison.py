"""Comparison service - side-by-side articles for 2-3 products."""

import json
import re
import time
from dataclasses import dataclass, field

from ..clients.gemini import GeminiClient
from ..models import ComparisonArticle, SearchResult
from ..models.category import category_name
from .article import ArticleGenerationError, ResponseParseError, load_prompt
from .research import COMPARISON_QUERIES, ResearchService, format_context

CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


@dataclass
class ProductResearch:
    """Search context and ASIN for one compared product."""

    search: list[SearchResult] = field(default_factory=list)
    asin: str | None = None


def extract_json_object(text: str) -> dict:
    """Pull a JSON object out of model output (fenced block or outer braces)."""
    block = CODE_BLOCK_RE.search(text)
    candidate = block.group(1) if block else text

    start = candidate.find("{")
    end = candidate.rfind("}") + 1
    if start == -1 or end == 0:
        raise ResponseParseError("No JSON object found in response", raw_output=text)

    try:
        return json.loads(candidate[start:end])
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in response: {e}", raw_output=text) from e


class ComparisonService:
    """Research products and write a comparison article."""

    def __init__(self, gemini: GeminiClient, research: ResearchService, product_interval: float = 0.5):
        self.gemini = gemini
        self.research = research
        self.product_interval = product_interval

    def research_products(self, products: list[str]) -> dict[str, ProductResearch]:
        results: dict[str, ProductResearch] = {}
        for name in products:
            data = ProductResearch()
            data.search = self.research.research(name, queries=COMPARISON_QUERIES, count=3)
            data.asin = self.research.find_asin(name, count=2)
            results[name] = data
            print(f"  {name} (ASIN: {data.asin or 'N/A'})", flush=True)
            time.sleep(self.product_interval)
        return results

    def generate(
        self,
        products: list[str],
        category: str,
        research: dict[str, ProductResearch],
    ) -> ComparisonArticle:
        """Ask Gemini for the comparison JSON and parse it."""
        if len(products) < 2:
            raise ValueError("At least 2 products are needed for a comparison")

        lines = [
            "# 比較する商品",
            "、".join(products),
            f"カテゴリー: {category_name(category)}",
            "",
            "# リサーチ結果",
        ]
        for name, data in research.items():
            lines.append(f"## {name}")
            lines.append(format_context(data.search))

        try:
            text = self.gemini.call(
                "\n".join(lines),
                system_prompt=load_prompt("comparison_writer"),
                label="COMPARISON",
                temperature=0.7,
                max_output_tokens=10000,
            )
            data = extract_json_object(text)
        except ResponseParseError as e:
            raise ArticleGenerationError(f"Could not parse comparison response: {e}") from e
        except Exception as e:
            raise ArticleGenerationError(f"Gemini call failed: {e}") from e

        article = ComparisonArticle.from_dict(data)
        if not article.products:
            raise ArticleGenerationError("Comparison response listed no products")
        return article
