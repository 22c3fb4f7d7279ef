"""Affiliate link and product image repair for existing article pages."""

import json
import logging
import re
import time
from pathlib import Path

from google.genai import errors as genai_errors

from ..clients import GeminiClient, GeminiError
from ..clients.amazon import image_url, product_url
from ..models import SiteLayout
from .article import load_prompt
from .store import save_json

logger = logging.getLogger(__name__)

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
SPONSORED_PLACEHOLDER_RE = re.compile(r'href="#"([^>]*rel="noopener sponsored")')
AFFILIATE_BUTTON_PLACEHOLDER = 'href="#" class="affiliate-btn"'

SPAN_PLACEHOLDER_RE = re.compile(r'<div class="product-image"[^>]*>\s*<span[^>]*>📦</span>\s*</div>', re.DOTALL)
BARE_PLACEHOLDER_RE = re.compile(r'<div class="product-image"[^>]*>\s*📦\s*</div>', re.DOTALL)
AMAZON_IMAGE_MARKER = "m.media-amazon.com/images/P/"

AFFILIATE_LINKS_FILE = "amazon-links.json"


class LinkLookupError(Exception):
    """Gemini's answer held no usable Amazon URL."""
    pass


def find_amazon_url(gemini: GeminiClient, product_name: str) -> str:
    """Ask Gemini for the product's Amazon.co.jp URL."""
    text = gemini.call(
        f"商品名: {product_name}",
        system_prompt=load_prompt("link_finder"),
        label="Link lookup",
        temperature=0.3,
        max_output_tokens=1024,
    )
    match = JSON_OBJECT_RE.search(text)
    if not match:
        raise LinkLookupError(f"No JSON in response for {product_name}")
    url = json.loads(match.group(0)).get("amazonUrl")
    if not url:
        raise LinkLookupError(f"No amazonUrl in response for {product_name}")
    return url


def replace_placeholder_links(page: str, url: str) -> str:
    page = SPONSORED_PLACEHOLDER_RE.sub(lambda m: f'href="{url}"{m.group(1)}', page)
    return page.replace(AFFILIATE_BUTTON_PLACEHOLDER, f'href="{url}" class="affiliate-btn"')


def link_affiliates(
    layout: SiteLayout,
    items: list[dict],
    gemini: GeminiClient,
    interval: float = 1.5,
) -> list[dict]:
    """Fill href="#" affiliate links for each {file, name} item.

    Returns the {product, url} pairs that were applied; also written to amazon-links.json.
    """
    results = []
    for i, item in enumerate(items, start=1):
        print(f"[{i}/{len(items)}] {item['name']}", flush=True)
        path = layout.products_dir / item["file"]
        try:
            url = find_amazon_url(gemini, item["name"])
            page = path.read_text(encoding="utf-8")
            path.write_text(replace_placeholder_links(page, url), encoding="utf-8")
        except (GeminiError, LinkLookupError, genai_errors.APIError, ValueError, OSError) as e:
            logger.warning(f"Link update failed for {item['file']}: {e}")
            continue

        results.append({"product": item["name"], "url": url})
        print(f"  {url}", flush=True)
        time.sleep(interval)

    print(f"Updated {len(results)} articles", flush=True)
    save_json(layout.data_file(AFFILIATE_LINKS_FILE), results)
    return results


def image_block(asin: str) -> str:
    return (
        '<div class="product-image" style="border-radius: var(--radius-md); overflow: hidden;">\n'
        f'            <a href="{product_url(asin)}" target="_blank" rel="noopener sponsored">\n'
        f'              <img src="{image_url(asin)}" alt="" '
        'style="max-width:100%;height:auto;display:block;margin:0 auto;" '
        "onerror=\"this.parentElement.innerHTML='📦';\">\n"
        "            </a>\n"
        "          </div>"
    )


def replace_image_placeholder(page: str, asin: str) -> str | None:
    """Page with the 📦 product image swapped for the Amazon image, or None when no placeholder exists."""
    block = image_block(asin)
    for pattern in (SPAN_PLACEHOLDER_RE, BARE_PLACEHOLDER_RE):
        if pattern.search(page):
            return pattern.sub(lambda m: block, page, count=1)
    return None


def add_missing_images(layout: SiteLayout, asin_map: dict[str, str]) -> int:
    """Give articles without a product image the Amazon image for their ASIN.

    asin_map maps article file names to ASINs. Returns the number of pages updated.
    """
    updated = 0
    for file_name, asin in asin_map.items():
        path: Path = layout.products_dir / file_name
        if not path.exists():
            logger.warning(f"File not found: {file_name}")
            continue

        page = path.read_text(encoding="utf-8")
        if AMAZON_IMAGE_MARKER in page:
            print(f"Already has image: {file_name}", flush=True)
            continue

        new_page = replace_image_placeholder(page, asin)
        if new_page is None:
            logger.warning(f"No image placeholder in {file_name}")
            continue

        path.write_text(new_page, encoding="utf-8")
        print(f"Updated: {file_name} with ASIN {asin}", flush=True)
        updated += 1

    print(f"Total updated: {updated} files", flush=True)
    return updated
