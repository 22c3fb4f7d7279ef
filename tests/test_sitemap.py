import xml.etree.ElementTree as ET

from kidsgoodslab.services.sitemap import STATIC_PAGES, update_sitemap

from conftest import write_article

NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


def test_update_sitemap(site):
    write_article(site, "merries-reviews")
    write_article(site, "goon-regret")

    assert update_sitemap(site) == len(STATIC_PAGES) + 2

    root = ET.fromstring(site.sitemap.read_bytes())
    locs = [el.text for el in root.findall("sm:url/sm:loc", NS)]
    assert locs[0] == "https://kidsgoodslab.com/"
    assert "https://kidsgoodslab.com/products/goon-regret.html" in locs
    assert "https://kidsgoodslab.com/products/index.html" not in locs
    article = root.findall("sm:url", NS)[-1]
    assert article.find("sm:lastmod", NS) is not None
    assert article.find("sm:priority", NS).text == "0.8"


def test_update_sitemap_without_articles(tmp_path):
    from kidsgoodslab.models import SiteLayout

    layout = SiteLayout(tmp_path)
    assert update_sitemap(layout) == len(STATIC_PAGES)
    assert layout.sitemap.exists()
