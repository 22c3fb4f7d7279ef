from kidsgoodslab.services.extract import (
    extract_asin,
    extract_category,
    extract_link_asin,
    extract_page_meta,
    extract_product_name,
    extract_title,
)

from conftest import write_article


def test_page_meta_from_rendered_article(site):
    path = write_article(site, "merries-reviews", title="メリーズ & グーン比較", product_name="メリーズ",
                         category="consumable", date_str="2025.03.04")
    meta = extract_page_meta(path)
    assert meta.file == "merries-reviews.html"
    assert meta.slug == "merries-reviews"
    assert meta.title == "メリーズ & グーン比較"
    assert meta.category == "消耗品"
    assert meta.date == "2025.03.04"
    assert meta.rating == "4.0"
    assert meta.asin == "B000000001"


def test_page_meta_truncates_title_and_excerpt(site):
    path = write_article(site, "long", title="あ" * 70)
    meta = extract_page_meta(path)
    assert meta.title == "あ" * 50
    assert len(meta.excerpt) <= 60


def test_page_without_title(site):
    path = site.products_dir / "broken.html"
    path.write_text("<html><body>no title</body></html>", encoding="utf-8")
    assert extract_page_meta(path) is None


def test_product_name_sources():
    assert extract_product_name('<p style="font-weight:600;margin-bottom:8px;">メリーズ</p>', "s") == "メリーズ"
    assert extract_product_name("<dt>商品名</dt>\n<dd>グーン</dd>", "s") == "グーン"
    assert extract_product_name("<b>商品名</b>：ムーニー<br>", "s") == "ムーニー"
    json_ld = '<script type="application/ld+json">{"@type": "Product", "name": "レゴ"}</script>'
    assert extract_product_name(json_ld, "s") == "レゴ"
    assert extract_product_name("<title>トミカ - キッズグッズラボ</title>", "s") == "トミカ"
    assert extract_product_name("<p>nothing</p>", "fallback-slug") == "fallback-slug"


def test_asin_prefers_image():
    page = (
        '<a href="https://www.amazon.co.jp/dp/B0000LINK1">'
        '<img src="https://m.media-amazon.com/images/P/B000IMAGE1.09.LZZZZZZZ.jpg"></a>'
    )
    assert extract_asin(page) == "B000IMAGE1"
    assert extract_link_asin(page) == "B0000LINK1"
    assert extract_asin('<a href="https://www.amazon.co.jp/dp/B0000LINK1">') == "B0000LINK1"
    assert extract_asin("<p>none</p>") is None


def test_title_and_category_unescape():
    page = '<h1 class="article-title">A &amp; B</h1><span class="article-category">食品</span>'
    assert extract_title(page) == "A & B"
    assert extract_category(page) == "食品"
