import time

import pytest

from kidsgoodslab.models import Article, SiteLayout
from kidsgoodslab.services.render import render_article

HOME_PAGE = """<!DOCTYPE html>
<html><body>
  <section class="products">
    <div class="container">
      <div class="products-grid">
        <article class="product-card" data-category="baby">old card</article>
      </div>
    </div>
  </section>

  <!-- About Section -->
  <section class="about"></section>
</body></html>
"""

LISTING_PAGE = """<!DOCTYPE html>
<html><body>
  <section class="products">
    <div class="container">
      <div class="products-grid">
        <article class="product-card" data-category="baby">old card</article>
      </div>
    </div>
  </section>

  <!-- Footer -->
  <footer></footer>
</body></html>
"""


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


@pytest.fixture
def site(tmp_path) -> SiteLayout:
    layout = SiteLayout(tmp_path)
    layout.products_dir.mkdir()
    layout.index_html.write_text(HOME_PAGE, encoding="utf-8")
    layout.products_index.write_text(LISTING_PAGE, encoding="utf-8")
    return layout


def write_article(
    layout: SiteLayout,
    slug: str,
    title: str = "テスト記事",
    product_name: str = "テスト商品",
    category: str = "baby",
    asin: str | None = "B000000001",
    date_str: str = "2025.01.01",
    content: str = "<h2>見出し</h2><p>本文</p>",
):
    article = Article(title=title, excerpt=f"{product_name}の解説", content=content)
    page = render_article(slug, product_name, category, article, asin, has_ogp=False, date_str=date_str)
    path = layout.article_path(slug)
    path.write_text(page, encoding="utf-8")
    return path
