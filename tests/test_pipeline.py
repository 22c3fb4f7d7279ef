import json

import pytest

from kidsgoodslab.models import Article, ComparedProduct, ComparisonArticle, Product, Progress, QueueItem
from kidsgoodslab.services.article import ArticleGenerationError
from kidsgoodslab.services.comparison import ProductResearch
from kidsgoodslab.services.ogp import OgpError
from kidsgoodslab.services.pipeline import ArticlePipeline, commit_message
from kidsgoodslab.services.store import BATCH_DONE_FILE, BATCH_QUEUE_FILE, REBUILD_PROGRESS_FILE, save_json

from conftest import write_article


class FakeResearch:
    def __init__(self, asin="B0FOUND001"):
        self.asin = asin
        self.researched = []
        self.queries = []

    def research(self, product_name, queries=None, count=5):
        self.researched.append(product_name)
        return []

    def search_once(self, query, count=5):
        self.queries.append(query)
        return []

    def find_asin(self, product_name, count=3):
        return self.asin


class FakeArticles:
    def __init__(self, fail_for=(), relevant=True):
        self.fail_for = set(fail_for)
        self.relevant = relevant
        self.generated = []
        self.checked = []

    def generate(self, product_name, category, search_results, pattern_key=None, custom_title=None):
        if product_name in self.fail_for:
            raise ArticleGenerationError(f"failed: {product_name}")
        self.generated.append((product_name, pattern_key))
        title = custom_title or f"{product_name}の記事"
        return Article(title=title, excerpt=f"{product_name}のまとめ", content="<h2>見出し</h2><p>本文</p>")

    def check_pattern_relevance(self, product, pattern_key):
        self.checked.append(pattern_key)
        return self.relevant


class FakeOgp:
    def __init__(self, layout, fail=False):
        self.layout = layout
        self.fail = fail
        self.rendered = []

    def generate(self, product_name, title, category, slug, product_image=None):
        if self.fail:
            raise OgpError("no font")
        self.rendered.append(slug)
        path = self.layout.ogp_path(slug)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"png")
        return path


class FakePublisher:
    def __init__(self):
        self.messages = []

    def publish(self, message):
        self.messages.append(message)
        return True


def _pipeline(site, articles=None, ogp_fail=False, publisher=None, comparisons=None):
    return ArticlePipeline(
        research=FakeResearch(),
        articles=articles or FakeArticles(),
        ogp=FakeOgp(site, fail=ogp_fail),
        layout=site,
        publisher=publisher,
        comparisons=comparisons,
    )


def test_commit_message():
    assert commit_message(3) == "記事3件追加（自動生成）"


def test_generate_one_writes_article_and_cards(site):
    pipeline = _pipeline(site)

    path = pipeline.generate_one("メリーズ", "consumable", pattern_key="lowest-price")

    assert path == site.article_path("merries-lowest-price")
    page = path.read_text(encoding="utf-8")
    assert "メリーズの記事" in page
    assert "amazon.co.jp/dp/B0FOUND001" in page
    assert '<img src="../images/ogp/merries-lowest-price.png"' in page
    home = site.index_html.read_text(encoding="utf-8")
    assert 'href="products/merries-lowest-price.html"' in home
    assert "★★★★☆" in home
    assert 'href="merries-lowest-price.html"' in site.products_index.read_text(encoding="utf-8")


def test_generate_one_uses_given_asin_and_survives_ogp_failure(site):
    pipeline = _pipeline(site, ogp_fail=True)
    pipeline.research.asin = None

    path = pipeline.generate_one("メリーズ", "consumable", asin="B0GIVEN001", custom_title="独自タイトル")

    page = path.read_text(encoding="utf-8")
    assert path.name == "merries.html"
    assert "独自タイトル" in page
    assert "B0GIVEN001" in page
    assert '<img src="../images/ogp/' not in page


def test_generate_one_existing_article_adds_no_card(site):
    write_article(site, "merries")
    pipeline = _pipeline(site)
    pipeline.generate_one("メリーズ", "consumable")
    assert "products/merries.html" not in site.index_html.read_text(encoding="utf-8")


def test_plan_auto_filters(site):
    products = [
        Product(name="メリーズ", asin="B0MERRIES1", category="consumable", subcat="diapers"),
        Product(name="ストライダー", asin="B0STRIDER1", category="toy"),
        Product(name="和光堂", asin="B0WAKODO01", category="food", subcat="babyfood"),
    ]
    existing = {"merries-where-to-buy"}

    plan = _pipeline(site).plan_auto(products, existing)

    slugs = [item.slug for item in plan.queue]
    assert slugs == [
        "merries-lowest-price",
        "merries-skin-trouble",
        "wakodo-where-to-buy",
        "wakodo-when-to-start",
        "wakodo-safety",
        "wakodo-tips",
    ]
    assert plan.skipped_by_rule == 0
    assert plan.products["wakodo-tips"].asin == "B0WAKODO01"


def test_plan_auto_rule_and_ai_skips(site):
    products = [Product(name="グーン", asin="", category="food", subcat="babyfood")]
    articles = FakeArticles(relevant=False)

    plan = _pipeline(site, articles=articles).plan_auto(products, set(), use_ai=True)

    assert plan.queue == []
    assert plan.skipped_by_ai == 4
    assert articles.checked == ["where-to-buy", "when-to-start", "safety", "tips"]


def test_plan_auto_subcategory_exclusion(site):
    products = [Product(name="グーン", asin="", category="consumable", subcat="feeding")]
    plan = _pipeline(site).plan_auto(products, set())
    assert plan.skipped_by_rule == 1
    assert [item.pattern_key for item in plan.queue] == ["where-to-buy", "lowest-price"]
    assert plan.queue[0].asin is None


def test_plan_auto_unknown_name_is_not_requeued(site):
    products = [Product(name="すくすく チェア", asin="", category="food")]

    first = _pipeline(site).plan_auto(products, set())
    slugs = [item.slug for item in first.queue]
    assert slugs
    assert all(slug.startswith("product-") for slug in slugs)

    second = _pipeline(site).plan_auto(products, set(slugs))
    assert second.queue == []


def test_run_auto(site):
    products = [Product(name="メリーズ", asin="B0MERRIES1", category="consumable", subcat="diapers")]
    articles = FakeArticles()
    publisher = FakePublisher()
    pipeline = _pipeline(site, articles=articles, publisher=publisher)

    assert pipeline.run_auto(products, limit=2) == 2

    assert articles.generated == [("メリーズ", "where-to-buy"), ("メリーズ", "lowest-price")]
    assert pipeline.research.queries == ["メリーズ 売ってる場所", "メリーズ 最安値比較"]
    assert site.existing_slugs() == {"merries-where-to-buy", "merries-lowest-price"}
    home = site.index_html.read_text(encoding="utf-8")
    assert "old card" not in home
    assert "products/merries-lowest-price.html" in home
    assert publisher.messages == ["記事2件追加（自動生成）"]


def test_run_auto_nothing_to_do(site):
    write_article(site, "merries-where-to-buy")
    products = [Product(name="メリーズ", asin="", category="baby", subcat="")]
    publisher = FakePublisher()
    pipeline = _pipeline(site, publisher=publisher)
    for key in ("regret", "how-to-use"):
        write_article(site, f"merries-{key}")

    assert pipeline.run_auto(products) == 0
    assert publisher.messages == []


def test_run_auto_skips_failures_without_deploy(site):
    products = [Product(name="メリーズ", asin="", category="consumable")]
    publisher = FakePublisher()
    pipeline = _pipeline(site, articles=FakeArticles(fail_for={"メリーズ"}), publisher=publisher)

    assert pipeline.run_auto(products) == 0
    assert publisher.messages == []


def _queue():
    return [
        QueueItem(slug="a-reviews", product_name="A", category="baby", asin="B0AAAAAAA1", pattern_key="reviews"),
        QueueItem(slug="b-regret", product_name="B", category=None, asin=None, pattern_key="regret"),
        QueueItem(slug="c-reviews", product_name="C", category="food", asin=None, pattern_key="reviews"),
    ]


def test_rebuild_all_records_progress(site):
    pipeline = _pipeline(site, articles=FakeArticles(fail_for={"B"}))
    progress = Progress()

    assert pipeline.rebuild_all(_queue(), progress) == (2, 1)

    assert progress.completed == ["a-reviews", "c-reviews"]
    assert progress.failed[0]["slug"] == "b-regret"
    saved = json.loads(site.data_file(REBUILD_PROGRESS_FILE).read_text(encoding="utf-8"))
    assert saved["completed"] == ["a-reviews", "c-reviews"]
    assert site.article_path("c-reviews").exists()
    assert not site.article_path("b-regret").exists()


def test_rebuild_all_resumes_with_start_and_limit(site):
    articles = FakeArticles()
    pipeline = _pipeline(site, articles=articles)
    progress = Progress(completed=["a-reviews"])

    assert pipeline.rebuild_all(_queue(), progress, start=1, limit=1) == (1, 0)
    assert articles.generated == [("C", "reviews")]
    assert progress.completed == ["a-reviews", "c-reviews"]


def test_rebuild_all_dry_run(site):
    articles = FakeArticles()
    pipeline = _pipeline(site, articles=articles)
    assert pipeline.rebuild_all(_queue(), Progress(), dry_run=True) == (0, 0)
    assert articles.generated == []
    assert not site.data_file(REBUILD_PROGRESS_FILE).exists()


def test_run_batch(site):
    save_json(site.data_file(BATCH_QUEUE_FILE), [
        {"name": "メリーズ", "category": "consumable"},
        {"name": "グーン", "category": "consumable", "pattern": "regret", "asin": "B0GOON0001"},
        {"name": "ムーニー", "category": "consumable"},
    ])
    save_json(site.data_file(BATCH_DONE_FILE), [{"name": "メリーズ", "slug": "merries"}])
    publisher = FakePublisher()
    pipeline = _pipeline(site, publisher=publisher)

    assert pipeline.run_batch(limit=5) == 2

    done = json.loads(site.data_file(BATCH_DONE_FILE).read_text(encoding="utf-8"))
    assert [d["slug"] for d in done] == ["merries", "goon-regret", "moony"]
    assert site.sitemap.exists()
    assert publisher.messages == ["記事2件追加（自動生成）"]


def test_run_batch_all_done(site):
    save_json(site.data_file(BATCH_QUEUE_FILE), [{"name": "メリーズ", "category": "consumable"}])
    save_json(site.data_file(BATCH_DONE_FILE), [{"name": "メリーズ"}])
    assert _pipeline(site).run_batch() == 0


class FakeComparisons:
    def research_products(self, names):
        return {name: ProductResearch(asin="B0COMPARE1" if i == 0 else None) for i, name in enumerate(names)}

    def generate(self, products, category, research):
        return ComparisonArticle(
            title="比較記事", meta_description="比較", excerpt="どっち", introduction="", comparison_table="",
            products=[ComparedProduct(name=name) for name in products],
            selection_guide="", conclusion="", winner=products[0],
        )


def test_generate_comparison(site):
    pipeline = _pipeline(site, comparisons=FakeComparisons())
    path = pipeline.generate_comparison(["パンパース", "メリーズ"], "consumable")
    assert path.name == "pampers-vs-merries.html"
    page = path.read_text(encoding="utf-8")
    assert "比較記事" in page
    assert "amazon.co.jp/dp/B0COMPARE1" in page


def test_generate_comparison_requires_service(site):
    with pytest.raises(ValueError):
        _pipeline(site).generate_comparison(["パンパース", "メリーズ"], "consumable")
