"""Amazon.co.jp product page and image checks."""

from urllib.parse import quote

import requests

from ..config import AFFILIATE_TAG

PAGE_MISSING_MARKERS = (
    "お探しの商品は見つかりませんでした",
    "この商品は現在お取り扱いできません",
    "ページが見つかりません",
    "何かお探しですか",
)
PAGE_SELLING_MARKERS = ("カートに入れる", "今すぐ買う", "¥")

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
    "Accept-Language": "ja-JP,ja;q=0.9",
}


def image_url(asin: str, size: str = "09") -> str:
    return f"https://m.media-amazon.com/images/P/{asin}.{size}.LZZZZZZZ.jpg"


def product_url(asin: str | None, product_name: str = "") -> str:
    """Affiliate link to the product page, or to a search when the ASIN is unknown."""
    if asin:
        return f"https://www.amazon.co.jp/dp/{asin}?tag={AFFILIATE_TAG}"
    return f"https://www.amazon.co.jp/s?k={quote(product_name)}&tag={AFFILIATE_TAG}"


class AmazonClient:
    """Lightweight checks against Amazon's public pages."""

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    def image_exists(self, asin: str) -> bool:
        """True when the product image URL answers 200 without redirecting."""
        try:
            response = requests.head(image_url(asin, "01"), timeout=self.timeout, allow_redirects=False)
        except requests.RequestException:
            return False
        return response.status_code == 200

    def check_product_page(self, asin: str) -> tuple[bool, str]:
        """Fetch the product page and classify it. Returns (valid, reason)."""
        try:
            response = requests.get(
                f"https://www.amazon.co.jp/dp/{asin}",
                headers=BROWSER_HEADERS,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return False, f"エラー: {e}"

        text = response.text
        if any(marker in text for marker in PAGE_MISSING_MARKERS):
            return False, "商品ページなし/取り扱い終了"
        if any(marker in text for marker in PAGE_SELLING_MARKERS):
            return True, "販売中"
        return False, "不明なページ状態"

    def download_image(self, asin: str) -> bytes | None:
        """Download the product image, or None when unavailable."""
        try:
            response = requests.get(image_url(asin), timeout=self.timeout)
        except requests.RequestException:
            return None
        if response.status_code != 200 or not response.content:
            return None
        return response.content
