"""Command line entry point for the site jobs."""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import config
from .clients import AmazonClient, BraveSearchClient, GeminiClient
from .config import ConfigError, require
from .models import SiteLayout
from .models.category import CATEGORY_NAMES
from .models.patterns import list_all_patterns
from .services import (
    ArticlePipeline,
    ArticleService,
    ComparisonService,
    DeployError,
    GitPublisher,
    OgpError,
    OgpRenderer,
    ResearchService,
)
from .services import catalog, links, store
from .services.assets import install_assets
from .services.index import rebuild_index
from .services.ogp import generate_all
from .services.sitemap import update_sitemap


def _gemini() -> GeminiClient:
    key = require("GEMINI_API_KEY")["GEMINI_API_KEY"]
    return GeminiClient(api_key=key, model=config.GEMINI_MODEL)


def _brave() -> BraveSearchClient:
    key = require("BRAVE_API_KEY")["BRAVE_API_KEY"]
    return BraveSearchClient(api_key=key)


def _ogp(layout: SiteLayout) -> OgpRenderer:
    return OgpRenderer(layout.ogp_dir, font_path=config.OGP_FONT_PATH)


def _pipeline(layout: SiteLayout, with_comparisons: bool = False) -> ArticlePipeline:
    gemini = _gemini()
    research = ResearchService(_brave())
    return ArticlePipeline(
        research=research,
        articles=ArticleService(gemini),
        ogp=_ogp(layout),
        layout=layout,
        amazon=AmazonClient(),
        publisher=GitPublisher(layout.root),
        comparisons=ComparisonService(gemini, research) if with_comparisons else None,
    )


def _print_token_totals(pipeline: ArticlePipeline) -> None:
    input_tokens, output_tokens = pipeline.articles.gemini.get_token_totals()
    print(f"Gemini tokens: input={input_tokens}, output={output_tokens}", flush=True)


# =============================================================================
# Commands
# =============================================================================

def cmd_generate(args, layout):
    pipeline = _pipeline(layout)
    path = pipeline.generate_one(
        args.name, args.category,
        custom_title=args.title, asin=args.asin, pattern_key=args.pattern,
    )
    print(f"Done: {path}", flush=True)
    _print_token_totals(pipeline)


def cmd_auto(args, layout):
    products = catalog.load_verified_products(layout)
    if not products:
        print(f"No verified products in {layout.data_file(store.VERIFIED_PRODUCTS_FILE)}", flush=True)
        return 1
    pipeline = _pipeline(layout)
    pipeline.run_auto(products, limit=args.limit, use_ai=args.ai, deploy=not args.no_deploy)
    _print_token_totals(pipeline)


def cmd_rebuild(args, layout):
    queue = store.load_rebuild_queue(layout)
    if not queue:
        print("Rebuild queue is empty; run 'rebuild-queue' first", flush=True)
        return 1
    progress = store.load_progress(layout)
    if args.dry_run:
        ArticlePipeline(None, None, None, layout).rebuild_all(
            queue, progress, start=args.start, limit=args.limit, dry_run=True
        )
        return 0
    pipeline = _pipeline(layout)
    pipeline.rebuild_all(queue, progress, start=args.start, limit=args.limit)
    if len(progress.completed) >= len(queue):
        print("All articles regenerated. Next: index, sitemap, deploy", flush=True)
    _print_token_totals(pipeline)


def cmd_batch(args, layout):
    pipeline = _pipeline(layout)
    pipeline.run_batch(limit=args.limit, deploy=not args.no_deploy)
    _print_token_totals(pipeline)


def cmd_compare(args, layout):
    pipeline = _pipeline(layout, with_comparisons=True)
    path = pipeline.generate_comparison(args.products, args.category)
    print(f"Done: {path}", flush=True)
    _print_token_totals(pipeline)


def cmd_ogp(args, layout):
    product_image = AmazonClient().download_image(args.asin) if args.asin else None
    try:
        path = _ogp(layout).generate(args.name, args.title, args.category, args.slug, product_image)
    except OgpError as e:
        print(f"Error: {e}", flush=True)
        return 1
    print(f"Done: {path}", flush=True)


def cmd_ogp_all(args, layout):
    generate_all(layout, _ogp(layout))


def cmd_index(args, layout):
    rebuild_index(layout)


def cmd_sitemap(args, layout):
    update_sitemap(layout)


def cmd_patterns(args, layout):
    for line in list_all_patterns():
        print(line)


def cmd_rebuild_queue(args, layout):
    queue = store.build_rebuild_queue(layout)
    path = store.write_rebuild_queue(layout, queue)
    print(f"Queued {len(queue)} articles: {path}", flush=True)


def cmd_rankings(args, layout):
    candidates = catalog.fetch_rankings(_brave())
    path = catalog.save_rankings(layout, candidates)
    print(f"Saved: {path}", flush=True)


def cmd_candidates(args, layout):
    rankings = catalog.load_rankings(layout)
    candidates = catalog.select_candidates(rankings, catalog.existing_link_asins(layout))
    print(f"Candidates: {len(candidates)}", flush=True)
    for i, c in enumerate(candidates, start=1):
        print(f"{i}. {c.name}")
        print(f"   ASIN: {c.asin} | {c.category}")
        print(f"   {c.title[:100]}")


def cmd_validate_asins(args, layout):
    catalog.validate_asins(layout, AmazonClient())


def cmd_validate_pages(args, layout):
    catalog.validate_pages(layout, AmazonClient())


def cmd_cleanup(args, layout):
    verified = catalog.load_verified_products(layout)
    _, delete = catalog.plan_cleanup(layout, verified)
    if args.execute:
        catalog.execute_cleanup(layout, delete)
    else:
        print("Dry run; pass --execute to delete", flush=True)


def cmd_match(args, layout):
    verified = catalog.load_verified_products(layout)
    matched, unmatched = catalog.match_articles(layout, verified)
    if args.execute:
        updated, deleted = catalog.apply_matches(layout, matched, unmatched)
        print(f"Updated {updated} ASINs, deleted {deleted} articles", flush=True)
    else:
        print("Dry run; pass --execute to apply", flush=True)


def cmd_link_affiliates(args, layout):
    items = json.loads(Path(args.items).read_text(encoding="utf-8"))
    links.link_affiliates(layout, items, _gemini())


def cmd_add_images(args, layout):
    asin_map = json.loads(Path(args.asin_map).read_text(encoding="utf-8"))
    links.add_missing_images(layout, asin_map)


def cmd_install_assets(args, layout):
    install_assets(layout)


def cmd_deploy(args, layout):
    try:
        GitPublisher(layout.root).publish(args.message)
    except DeployError as e:
        print(f"Deploy failed: {e}\n{e.output}", flush=True)
        return 1


# =============================================================================
# Parser
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kidsgoodslab", description="キッズグッズラボ site jobs")
    parser.add_argument("--root", type=Path, default=None, help="Site root (default: SITE_ROOT)")
    sub = parser.add_subparsers(dest="command", required=True)
    categories = sorted(CATEGORY_NAMES)

    p = sub.add_parser("generate", help="Write one review article")
    p.add_argument("name")
    p.add_argument("category", choices=categories)
    p.add_argument("--title")
    p.add_argument("--asin")
    p.add_argument("--pattern")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("auto", help="Write articles for verified products x patterns")
    p.add_argument("--limit", type=int, default=10)
    p.add_argument("--ai", action="store_true", help="Ask Gemini whether each pattern fits")
    p.add_argument("--no-deploy", action="store_true")
    p.set_defaults(func=cmd_auto)

    p = sub.add_parser("rebuild", help="Regenerate queued articles in place")
    p.add_argument("--start", type=int, default=0)
    p.add_argument("--limit", type=int, default=None)
    p.add_argument("--dry-run", action="store_true")
    p.set_defaults(func=cmd_rebuild)

    p = sub.add_parser("batch", help="Write articles from the products queue")
    p.add_argument("--limit", type=int, default=3)
    p.add_argument("--no-deploy", action="store_true")
    p.set_defaults(func=cmd_batch)

    p = sub.add_parser("compare", help="Write a comparison article")
    p.add_argument("category", choices=categories)
    p.add_argument("products", nargs="+")
    p.set_defaults(func=cmd_compare)

    p = sub.add_parser("ogp", help="Render one OGP image")
    p.add_argument("name")
    p.add_argument("title")
    p.add_argument("category", choices=categories)
    p.add_argument("slug")
    p.add_argument("--asin")
    p.set_defaults(func=cmd_ogp)

    sub.add_parser("ogp-all", help="Render missing OGP images and wire them in").set_defaults(func=cmd_ogp_all)
    sub.add_parser("index", help="Rebuild the index grids").set_defaults(func=cmd_index)
    sub.add_parser("sitemap", help="Rewrite sitemap.xml").set_defaults(func=cmd_sitemap)
    sub.add_parser("patterns", help="List article patterns").set_defaults(func=cmd_patterns)
    sub.add_parser("rebuild-queue", help="Queue every article for regeneration").set_defaults(func=cmd_rebuild_queue)
    sub.add_parser("rankings", help="Find popular Amazon products").set_defaults(func=cmd_rankings)
    sub.add_parser("candidates", help="Filter ranking results to new products").set_defaults(func=cmd_candidates)
    sub.add_parser("validate-asins", help="Check product images exist").set_defaults(func=cmd_validate_asins)
    sub.add_parser("validate-pages", help="Check product pages are selling").set_defaults(func=cmd_validate_pages)

    p = sub.add_parser("cleanup", help="Delete articles whose ASIN is not verified")
    p.add_argument("--execute", action="store_true")
    p.set_defaults(func=cmd_cleanup)

    p = sub.add_parser("match", help="Match articles to verified products")
    p.add_argument("--execute", action="store_true")
    p.set_defaults(func=cmd_match)

    p = sub.add_parser("link-affiliates", help="Fill placeholder affiliate links")
    p.add_argument("items", help="JSON file with [{file, name}]")
    p.set_defaults(func=cmd_link_affiliates)

    p = sub.add_parser("add-images", help="Replace placeholder product images")
    p.add_argument("asin_map", help="JSON file with {file: asin}")
    p.set_defaults(func=cmd_add_images)

    sub.add_parser("install-assets", help="Copy the site script").set_defaults(func=cmd_install_assets)

    p = sub.add_parser("deploy", help="Commit and push the site")
    p.add_argument("--message", default="サイト更新")
    p.set_defaults(func=cmd_deploy)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    layout = SiteLayout(args.root or config.SITE_ROOT)

    try:
        return args.func(args, layout) or 0
    except ConfigError as e:
        print(f"Error: {e}", flush=True)
        for name in e.missing:
            print(f"  {name} is not set", flush=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
