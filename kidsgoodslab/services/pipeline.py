"""Article pipeline - research, write, render and publish review articles."""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import requests

from ..clients import AmazonClient, SearchError
from ..models import Article, Product, Progress, QueueItem, SiteLayout
from ..models.category import DEFAULT_CATEGORY, category_name
from ..models.patterns import get_pattern, get_patterns_for_category, is_pattern_suitable_by_rule
from ..utils import comparison_slug, to_slug, today_dotted
from .article import ArticleGenerationError, ArticleService
from .comparison import ComparisonService
from .deploy import DeployError, GitPublisher
from .index import add_card, rebuild_index
from .ogp import OgpError, OgpRenderer
from .render import render_article, render_card, render_comparison
from .research import ResearchService
from .sitemap import update_sitemap
from .store import load_batch_queue, load_done, mark_done, save_progress

logger = logging.getLogger(__name__)

NEW_ARTICLE_RATING = "4.5"

# Failures that skip one item in a multi-article run
ITEM_ERRORS = (ArticleGenerationError, SearchError, requests.RequestException, OSError)


def commit_message(count: int) -> str:
    return f"記事{count}件追加（自動生成）"


@dataclass
class AutoPlan:
    """Product x pattern pairs still to be written."""

    queue: list[QueueItem] = field(default_factory=list)
    products: dict[str, Product] = field(default_factory=dict)
    skipped_by_rule: int = 0
    skipped_by_ai: int = 0


class ArticlePipeline:
    """Orchestrates article generation for the site.

    Steps per article:
    1. Research the product with Brave Search
    2. Look up the ASIN when none is known
    3. Write the article with Gemini
    4. Render the OGP image (failure does not stop the article)
    5. Render and save the HTML page
    """

    def __init__(
        self,
        research: ResearchService,
        articles: ArticleService,
        ogp: OgpRenderer,
        layout: SiteLayout,
        amazon: AmazonClient | None = None,
        publisher: GitPublisher | None = None,
        comparisons: ComparisonService | None = None,
    ):
        self.research = research
        self.articles = articles
        self.ogp = ogp
        self.layout = layout
        self.amazon = amazon
        self.publisher = publisher
        self.comparisons = comparisons

        self.auto_search_wait = 1.1
        self.auto_item_wait = 1.0
        self.ai_check_wait = 0.5
        self.rebuild_wait = 8.0
        self.rebuild_error_wait = 5.0
        self.batch_wait = 10.0

    # =========================================================================
    # Single article
    # =========================================================================

    def _render_ogp(self, product_name: str, title: str, category: str, slug: str, asin: str | None) -> bool:
        """Render the OGP image. Returns False (after logging) when it fails."""
        product_image = None
        if self.amazon and asin:
            product_image = self.amazon.download_image(asin)
        try:
            self.ogp.generate(product_name, title, category, slug, product_image)
        except OgpError as e:
            logger.warning(f"OGP image failed, writing article without it: {e}")
            return False
        return True

    def _save_article(
        self,
        slug: str,
        product_name: str,
        category: str,
        article: Article,
        asin: str | None,
    ) -> Path:
        has_ogp = self._render_ogp(product_name, article.title, category, slug, asin)
        path = self.layout.article_path(slug)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            render_article(slug, product_name, category, article, asin, has_ogp=has_ogp),
            encoding="utf-8",
        )
        print(f"  Saved: products/{slug}.html", flush=True)
        return path

    def _add_cards(self, slug: str, category: str, article: Article) -> None:
        has_ogp = self.layout.ogp_path(slug).exists()
        for index_path, in_products_dir in ((self.layout.index_html, False), (self.layout.products_index, True)):
            if not index_path.exists():
                logger.warning(f"Index page not found: {index_path}")
                continue
            card = render_card(
                slug=slug,
                title=article.title[:50],
                category_label=category_name(category),
                excerpt=article.excerpt[:60],
                rating=NEW_ARTICLE_RATING,
                date_str=today_dotted(),
                has_ogp=has_ogp,
                in_products_dir=in_products_dir,
            )
            if not add_card(index_path, card):
                logger.warning(f"Could not find the product grid in {index_path}")

    def generate_one(
        self,
        product_name: str,
        category: str,
        custom_title: str | None = None,
        asin: str | None = None,
        pattern_key: str | None = None,
    ) -> Path:
        """Write one new article and add it to both index pages."""
        print(f"Generating article: {product_name}", flush=True)
        search_results = self.research.research(product_name)
        if asin:
            print(f"  ASIN given: {asin}", flush=True)
        else:
            asin = self.research.find_asin(product_name)

        article = self.articles.generate(
            product_name, category, search_results,
            pattern_key=pattern_key, custom_title=custom_title,
        )

        slug = to_slug(product_name, pattern_key)
        is_new = not self.layout.article_path(slug).exists()
        path = self._save_article(slug, product_name, category, article, asin)
        if is_new:
            self._add_cards(slug, category, article)
        return path

    def generate_comparison(self, products: list[str], category: str) -> Path:
        """Research and write a comparison page for two or more products."""
        if self.comparisons is None:
            raise ValueError("Comparison service is not configured")

        print(f"Comparing: {' vs '.join(products)}", flush=True)
        research = self.comparisons.research_products(products)
        article = self.comparisons.generate(products, category, research)

        slug = comparison_slug(products)
        asins = {name: data.asin for name, data in research.items()}
        path = self.layout.article_path(slug)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_comparison(slug, category, article, asins), encoding="utf-8")
        print(f"  Saved: products/{slug}.html", flush=True)
        return path

    # =========================================================================
    # Automatic product x pattern generation
    # =========================================================================

    def plan_auto(self, products: list[Product], existing_slugs: set[str], use_ai: bool = False) -> AutoPlan:
        """Every new product x pattern pair that passes the filters."""
        plan = AutoPlan()
        for product in products:
            patterns = get_patterns_for_category(product.category)
            if not patterns:
                continue

            for pattern_key in patterns:
                slug = to_slug(product.name, pattern_key)
                if slug in existing_slugs:
                    continue

                if not is_pattern_suitable_by_rule(product.subcat, pattern_key):
                    plan.skipped_by_rule += 1
                    continue

                if use_ai:
                    if not self.articles.check_pattern_relevance(product, pattern_key):
                        plan.skipped_by_ai += 1
                        continue
                    time.sleep(self.ai_check_wait)

                plan.queue.append(QueueItem(
                    slug=slug,
                    product_name=product.name,
                    category=product.category,
                    asin=product.asin or None,
                    pattern_key=pattern_key,
                ))
                plan.products[slug] = product

        print(
            f"Skipped by rule: {plan.skipped_by_rule}"
            + (f", by AI: {plan.skipped_by_ai}" if use_ai else ""),
            flush=True,
        )
        print(f"Articles available: {len(plan.queue)} (existing: {len(existing_slugs)})", flush=True)
        return plan

    def run_auto(self, products: list[Product], limit: int = 10, use_ai: bool = False, deploy: bool = True) -> int:
        """Generate up to limit new articles, rebuild the index and deploy. Returns the count generated."""
        plan = self.plan_auto(products, self.layout.existing_slugs(), use_ai=use_ai)
        if not plan.queue:
            print("Nothing to generate", flush=True)
            return 0

        to_generate = plan.queue[:limit]
        print(f"Generating {len(to_generate)} articles", flush=True)

        generated = 0
        for i, item in enumerate(to_generate, start=1):
            print(f"[{i}/{len(to_generate)}] {item.product_name} x {item.pattern_key}", flush=True)
            pattern = get_pattern(item.category, item.pattern_key)
            pattern_name = pattern.name if pattern else item.pattern_key

            search_results = self.research.search_once(f"{item.product_name} {pattern_name}")
            time.sleep(self.auto_search_wait)

            try:
                article = self.articles.generate(
                    item.product_name, item.category, search_results, pattern_key=item.pattern_key
                )
                self._save_article(item.slug, item.product_name, item.category, article, item.asin)
            except ITEM_ERRORS as e:
                logger.warning(f"Generation failed for {item.slug}: {e}")
                continue

            generated += 1
            time.sleep(self.auto_item_wait)

        print(f"Generated {generated} articles", flush=True)
        rebuild_index(self.layout)

        if generated and deploy:
            self._deploy(commit_message(generated))
        return generated

    # =========================================================================
    # Regeneration of existing articles
    # =========================================================================

    def rebuild_all(
        self,
        queue: list[QueueItem],
        progress: Progress,
        start: int = 0,
        limit: int | None = None,
        dry_run: bool = False,
    ) -> tuple[int, int]:
        """Regenerate queued articles in place, saving progress after each one.

        Returns (succeeded, failed).
        """
        done = set(progress.completed)
        remaining = [item for item in queue if item.slug not in done]
        end = None if limit is None else start + limit
        to_process = remaining[start:end]

        print(f"Total: {len(queue)}, completed: {len(progress.completed)}, failed: {len(progress.failed)}", flush=True)
        print(f"This run: {len(to_process)} (from #{start})", flush=True)

        if dry_run:
            for i, item in enumerate(to_process, start=1):
                print(f"[{i}] {item.slug} | {item.product_name} | {item.category} | {item.pattern_key}", flush=True)
            return 0, 0

        succeeded = failed = 0
        for i, item in enumerate(to_process):
            print(f"[{len(progress.completed) + 1}/{len(queue)}] {item.product_name}", flush=True)
            category = item.category or DEFAULT_CATEGORY
            try:
                search_results = self.research.research(item.product_name)
                article = self.articles.generate(
                    item.product_name, category, search_results, pattern_key=item.pattern_key
                )
                self._save_article(item.slug, item.product_name, category, article, item.asin)
            except ITEM_ERRORS as e:
                logger.warning(f"Rebuild failed for {item.slug}: {e}")
                progress.failed.append({"slug": item.slug, "error": str(e), "time": datetime.now().isoformat()})
                save_progress(self.layout, progress)
                failed += 1
                time.sleep(self.rebuild_error_wait)
                continue

            progress.completed.append(item.slug)
            save_progress(self.layout, progress)
            succeeded += 1
            if i < len(to_process) - 1:
                time.sleep(self.rebuild_wait)

        print(f"Succeeded: {succeeded}, failed: {failed}", flush=True)
        print(f"Overall: {len(progress.completed)}/{len(queue)}", flush=True)
        return succeeded, failed

    # =========================================================================
    # Batch queue
    # =========================================================================

    def run_batch(self, limit: int = 3, deploy: bool = True) -> int:
        """Generate pending products from the batch queue. Returns the count generated."""
        queue = load_batch_queue(self.layout)
        done = load_done(self.layout)
        done_names = {entry.get("name") for entry in done}
        pending = [item for item in queue if item.name not in done_names]
        if not pending:
            print("All queued products are done", flush=True)
            return 0

        to_process = pending[:limit]
        print(f"Pending: {len(pending)}, this run: {len(to_process)}", flush=True)

        generated = 0
        for i, item in enumerate(to_process):
            print(f"[{i + 1}/{len(to_process)}] {item.name}", flush=True)
            try:
                path = self.generate_one(
                    item.name, item.category,
                    custom_title=item.title, asin=item.asin, pattern_key=item.pattern,
                )
            except ITEM_ERRORS as e:
                logger.warning(f"Batch item failed: {item.name}: {e}")
                continue

            mark_done(self.layout, done, item, path.stem)
            generated += 1
            if i < len(to_process) - 1:
                time.sleep(self.batch_wait)

        rebuild_index(self.layout)
        update_sitemap(self.layout)
        if generated and deploy:
            self._deploy(commit_message(generated))
        return generated

    def _deploy(self, message: str) -> bool:
        if self.publisher is None:
            return False
        try:
            return self.publisher.publish(message)
        except DeployError as e:
            logger.warning(f"Deploy failed: {e}\n{e.output}")
            return False
