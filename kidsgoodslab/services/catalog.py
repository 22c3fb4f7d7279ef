"""Product catalog maintenance - ranking discovery, ASIN validation and article cleanup."""

import logging
import re
import time
from collections import Counter
from pathlib import Path

from ..clients import AmazonClient, BraveSearchClient, SearchError
from ..clients.brave import extract_asin
from ..models import Product, RankingCandidate, SiteLayout, ValidationResult
from .extract import LINK_ASIN_RE, extract_image_asin, extract_title
from .index import rebuild_index
from .store import VERIFIED_PRODUCTS_FILE, load_json, save_json

logger = logging.getLogger(__name__)

RANKING_QUERIES = (
    "site:amazon.co.jp おむつ ベストセラー パンパース メリーズ",
    "site:amazon.co.jp 抱っこ紐 人気 エルゴ ベビービョルン",
    "site:amazon.co.jp ベビーカー 人気 コンビ アップリカ",
    "site:amazon.co.jp チャイルドシート 人気 新生児",
    "site:amazon.co.jp 哺乳瓶 人気 ピジョン 母乳実感",
    "site:amazon.co.jp 粉ミルク 液体ミルク アイクレオ ほほえみ",
    "site:amazon.co.jp 知育玩具 人気 1歳 2歳",
    "site:amazon.co.jp バウンサー ハイローチェア 人気",
    "site:amazon.co.jp ベビーゲート 安全柵 階段",
    "site:amazon.co.jp ストライダー キッズバイク 三輪車",
    "site:amazon.co.jp ベビーモニター 見守りカメラ",
    "site:amazon.co.jp ベビーバス 沐浴",
    "site:amazon.co.jp おしりふき 人気",
    "site:amazon.co.jp 離乳食 ベビーフード 人気",
)

# Keyword to category key, first hit wins
CATEGORY_KEYWORDS = (
    ("おむつ", "consumable"),
    ("パンパース", "consumable"),
    ("メリーズ", "consumable"),
    ("ムーニー", "consumable"),
    ("グーン", "consumable"),
    ("抱っこ紐", "baby"),
    ("エルゴ", "baby"),
    ("ベビービョルン", "baby"),
    ("ベビーカー", "furniture"),
    ("コンビ", "baby"),
    ("アップリカ", "baby"),
    ("チャイルドシート", "furniture"),
    ("哺乳瓶", "baby"),
    ("粉ミルク", "consumable"),
    ("ピジョン", "baby"),
    ("知育", "educational"),
    ("おもちゃ", "educational"),
    ("バウンサー", "baby"),
    ("ハイローチェア", "baby"),
    ("ベビーゲート", "safety"),
    ("ストライダー", "outdoor"),
    ("三輪車", "outdoor"),
)

EXCLUDED_NAMES = ("Amazon.co.jp", "Amazon")
EXCLUDED_TITLE_WORDS = (
    "お試しセット",
    "お試しパック",
    "よだれカバー",
    "よだれパッド",
    "振り子",
    "寝かしつけ おもちゃ",
    "安全ネット",
    "落下防止",
)

# Article keywords (file name or title) to verified product name
MATCH_RULES = [
    (re.compile(pattern, re.IGNORECASE), product)
    for pattern, product in (
        (r"パンパース.*さらさら|pampers.*sarasara", "パンパース さらさらケア"),
        (r"パンパース.*肌|pampers.*hada", "パンパース 肌へのいちばん"),
        (r"メリーズ|merries", "メリーズ さらさらエアスルー"),
        (r"ムーニー.*エアフィット|moony.*air", "ムーニー エアフィット"),
        (r"ナチュラルムーニー|natural.*moony", "ナチュラルムーニー オーガニック"),
        (r"グーン|goon", "グーン プラス"),
        (r"マミーポコ|mamypoko", "マミーポコ パンツ"),
        (r"ほほえみ|hohoemi", "ほほえみ らくらくキューブ"),
        (r"はいはい|haihai", "はいはい 粉ミルク"),
        (r"アイクレオ|icreo", "アイクレオ バランスミルク"),
        (r"すこやか|sukoyaka", "すこやかM1"),
        (r"キューピー|kewpie", "キューピー ベビーフード"),
        (r"和光堂|wakodo", "和光堂 グーグーキッチン"),
        (r"母乳実感|pigeon.*bonyu", "ピジョン 母乳実感"),
        (r"テテオ|teteo", "コンビ テテオ 哺乳びん"),
        (r"搾乳|pigeon.*handy", "ピジョン 搾乳器 電動"),
        (r"エルゴ.*omni|ergobaby.*omni", "エルゴベビー OMNI Breeze"),
        (r"エルゴ.*adapt|ergobaby.*adapt", "エルゴベビー ADAPT"),
        (r"コニー|konny", "コニー 抱っこ紐"),
        (r"ベビービョルン.*mini|babybjorn.*mini", "ベビービョルン MINI"),
        (r"アップリカ.*コアラ|aprica.*koala", "アップリカ コアラ ウルトラメッシュ"),
        (r"スゴカル|sugocal", "コンビ スゴカルSwitch"),
        (r"ラクーナ|rakuna", "アップリカ ラクーナ クッション"),
        (r"サイベックス.*メリオ|cybex.*melio", "サイベックス メリオ カーボン"),
        (r"ランフィ|runfee", "ピジョン ランフィ"),
        (r"クルムーヴ|culmove", "コンビ クルムーヴ スマート"),
        (r"フラディア|fladea", "アップリカ フラディア グロウ"),
        (r"joie.*チルト|joie.*tilt", "Joie チルト"),
        (r"サイベックス.*シローナ|cybex.*sirona", "サイベックス シローナ"),
        (r"ベビービョルン.*バウンサー|babybjorn.*bliss", "ベビービョルン バウンサー Bliss"),
        (r"ネムリラ|nemulila", "コンビ ネムリラ AUTO SWING"),
        (r"ユラリズム|yurarizm", "アップリカ ユラリズム"),
        (r"ファルスカ|farska", "ファルスカ ベッドインベッド"),
        (r"サンデシカ|sandesica", "サンデシカ 抱っこ布団"),
        (r"リッチェル.*ふかふか|richell.*fuwafuwa", "リッチェル ふかふかベビーバス"),
        (r"スイマーバ|swimava", "スイマーバ うきわ首リング"),
        (r"スマートゲイト|smartgate", "日本育児 スマートゲイト2"),
        (r"コーナー.*ガード|corner.*guard", "コーナーガード"),
        (r"レゴ.*デュプロ|lego.*duplo", "レゴ デュプロ コンテナ"),
        (r"アンパンマン.*ブロック|anpanman.*block", "アンパンマン ブロックラボ"),
        (r"くるくるチャイム|kurukuru", "くもん くるくるチャイム"),
        (r"フィッシャープライス|fisher.*price", "フィッシャープライス バイリンガル"),
        (r"マグフォーマー|magformers", "ボーネルンド マグフォーマー"),
        (r"ストライダー.*スポーツ|strider.*sport", "ストライダー スポーツモデル"),
        (r"ストライダー.*14", "ストライダー 14x"),
        (r"よくばりビジーカー|busycar", "アンパンマン よくばりビジーカー"),
        (r"intex.*プール|インテックス", "INTEX プール"),
        (r"トミカ|tomica", "トミカ ベーシック道路セット"),
        (r"プラレール|plarail", "プラレール ベーシックセット"),
        (r"シルバニア|sylvanian", "シルバニアファミリー 赤い屋根の大きなお家"),
        (r"メルちゃん|mell.*chan", "メルちゃん お人形セット"),
    )
]

RANKINGS_FILE = "brave-amazon-results.json"
INVALID_ASINS_FILE = "invalid-asins.json"
PAGE_VALIDATION_FILE = "product-page-validation.json"
CLEANUP_FILE = "articles-to-delete.json"
MATCH_RESULTS_FILE = "match-results.json"


def load_products(path: Path) -> list[Product]:
    """Verified products from a JSON list."""
    return [Product.from_dict(d) for d in load_json(path, default=[])]


def load_verified_products(layout: SiteLayout) -> list[Product]:
    return load_products(layout.data_file(VERIFIED_PRODUCTS_FILE))


# =============================================================================
# Rankings
# =============================================================================

def clean_product_name(title: str) -> str:
    """Strip Amazon suffixes and bracketed noise from a search result title."""
    name = re.sub(r"\s*[-|]\s*Amazon\.co\.jp.*$", "", title, flags=re.IGNORECASE)
    name = re.sub(r"\s*\|.*$", "", name)
    name = re.sub(r"【[^】]*】", "", name)
    name = re.sub(r"\([^)]*\)", "", name)
    name = name.strip()

    if len(name) > 40:
        name = " ".join(name.split()[:4])
    return name


def guess_category(title: str, query: str) -> str:
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in query or keyword in title:
            return category
    return "baby"


def fetch_rankings(
    brave: BraveSearchClient,
    queries=RANKING_QUERIES,
    query_interval: float = 1.5,
) -> list[RankingCandidate]:
    """Amazon product pages found through site search, unique by ASIN."""
    found = []
    for query in queries:
        print(f"Searching: {query}", flush=True)
        try:
            results = brave.search(query, count=10)
        except SearchError as e:
            logger.warning(f"Ranking query failed: {query}: {e}")
            continue

        for result in results:
            if "amazon.co.jp" not in result.url:
                continue
            asin = extract_asin(result.url)
            if not asin:
                continue
            candidate = RankingCandidate(
                name=clean_product_name(result.title),
                title=result.title,
                url=result.url,
                asin=asin,
                category=guess_category(result.title, query),
                description=result.description,
                query=query,
            )
            print(f"  {candidate.name} (ASIN: {asin}, {candidate.category})", flush=True)
            found.append(candidate)

        time.sleep(query_interval)

    unique = []
    seen = set()
    for candidate in found:
        if candidate.asin in seen:
            continue
        seen.add(candidate.asin)
        unique.append(candidate)

    print(f"Found {len(found)} products, {len(unique)} unique", flush=True)
    for category, count in Counter(c.category for c in unique).items():
        print(f"  {category}: {count}", flush=True)
    return unique


def save_rankings(layout: SiteLayout, candidates: list[RankingCandidate]) -> Path:
    path = layout.data_file(RANKINGS_FILE)
    save_json(path, [c.to_dict() for c in candidates])
    return path


def load_rankings(layout: SiteLayout) -> list[RankingCandidate]:
    return [RankingCandidate.from_dict(d) for d in load_json(layout.data_file(RANKINGS_FILE), default=[])]


def existing_link_asins(layout: SiteLayout) -> set[str]:
    """First /dp/ ASIN of every article."""
    asins = set()
    for path in layout.article_files():
        match = LINK_ASIN_RE.search(path.read_text(encoding="utf-8"))
        if match:
            asins.add(match.group(1))
    return asins


def should_exclude(candidate: RankingCandidate, existing_asins: set[str]) -> bool:
    name = candidate.name
    if name in EXCLUDED_NAMES or len(name) < 5:
        return True
    if any(word in candidate.title for word in EXCLUDED_TITLE_WORDS):
        return True
    return candidate.asin in existing_asins


def select_candidates(candidates: list[RankingCandidate], existing_asins: set[str]) -> list[RankingCandidate]:
    return [c for c in candidates if not should_exclude(c, existing_asins)]


# =============================================================================
# Validation
# =============================================================================

def _articles_with_asin(layout: SiteLayout):
    for path in layout.article_files():
        asin = extract_image_asin(path.read_text(encoding="utf-8"))
        if asin:
            yield path, asin
        else:
            logger.warning(f"{path.name}: no product image ASIN")


def validate_asins(layout: SiteLayout, amazon: AmazonClient, interval: float = 0.15) -> list[ValidationResult]:
    """Check every article's product image still exists. Writes the invalid ones to a report."""
    results = []
    for path, asin in _articles_with_asin(layout):
        valid = amazon.image_exists(asin)
        results.append(ValidationResult(file=path.name, asin=asin, valid=valid, reason="" if valid else "画像なし"))
        print(f"  {'OK' if valid else 'INVALID'} {path.name}: {asin}", flush=True)
        time.sleep(interval)

    invalid = [r for r in results if not r.valid]
    print(f"Valid: {len(results) - len(invalid)}, invalid: {len(invalid)}", flush=True)
    save_json(layout.data_file(INVALID_ASINS_FILE), [{"file": r.file, "asin": r.asin} for r in invalid])
    return results


def validate_pages(layout: SiteLayout, amazon: AmazonClient, interval: float = 2.0) -> list[ValidationResult]:
    """Check every article's Amazon product page is still selling."""
    results = []
    for path, asin in _articles_with_asin(layout):
        print(f"Checking {path.name} ({asin})...", flush=True)
        valid, reason = amazon.check_product_page(asin)
        results.append(ValidationResult(file=path.name, asin=asin, valid=valid, reason=reason))
        print(f"  {'OK' if valid else 'INVALID'}: {reason}", flush=True)
        time.sleep(interval)

    invalid = [r for r in results if not r.valid]
    print(f"Valid: {len(results) - len(invalid)}, invalid: {len(invalid)}", flush=True)
    for r in invalid:
        print(f"  {r.file}: {r.asin} - {r.reason}", flush=True)
    save_json(layout.data_file(PAGE_VALIDATION_FILE), [r.to_dict() for r in results])
    return results


# =============================================================================
# Cleanup and matching
# =============================================================================

def plan_cleanup(layout: SiteLayout, verified: list[Product]) -> tuple[list[dict], list[dict]]:
    """Split articles into (keep, delete) by whether their image ASIN is verified."""
    verified_asins = {p.asin for p in verified}
    keep, delete = [], []
    for path in layout.article_files():
        page = path.read_text(encoding="utf-8")
        asin = extract_image_asin(page)
        entry = {"file": path.name, "asin": asin, "title": (extract_title(page) or path.name)[:40]}
        if asin and asin in verified_asins:
            keep.append(entry)
        else:
            delete.append(entry)

    print(f"Keep: {len(keep)}, delete: {len(delete)}", flush=True)
    save_json(layout.data_file(CLEANUP_FILE), delete)
    return keep, delete


def execute_cleanup(layout: SiteLayout, delete: list[dict]) -> int:
    """Delete the planned articles and rebuild the index."""
    for entry in delete:
        path = layout.products_dir / entry["file"]
        if path.exists():
            path.unlink()
            print(f"Deleted: {entry['file']}", flush=True)
    rebuild_index(layout)
    return len(delete)


def match_product(search_text: str, verified_by_name: dict[str, Product]) -> Product | None:
    """First matching rule's verified product, or None."""
    for pattern, product_name in MATCH_RULES:
        if pattern.search(search_text):
            return verified_by_name.get(product_name)
    return None


def match_articles(layout: SiteLayout, verified: list[Product]) -> tuple[list[dict], list[dict]]:
    """Match articles to verified products by file name and title. Returns (matched, unmatched)."""
    by_name = {p.name: p for p in verified}
    matched, unmatched = [], []
    for path in layout.article_files():
        title = extract_title(path.read_text(encoding="utf-8")) or path.name
        product = match_product(f"{path.name} {title}", by_name)
        if product:
            matched.append({"file": path.name, "title": title, "product": product.to_dict()})
            print(f"  {path.name} -> {product.name} ({product.asin})", flush=True)
        else:
            unmatched.append({"file": path.name, "title": title})

    print(f"Matched: {len(matched)}, unmatched: {len(unmatched)}", flush=True)
    save_json(layout.data_file(MATCH_RESULTS_FILE), {"matched": matched, "unmatched": unmatched})
    return matched, unmatched


def apply_matches(layout: SiteLayout, matched: list[dict], unmatched: list[dict]) -> tuple[int, int]:
    """Swap in verified ASINs, delete unmatched articles, rebuild the index.

    Returns (updated, deleted).
    """
    updated = 0
    for entry in matched:
        path = layout.products_dir / entry["file"]
        page = path.read_text(encoding="utf-8")
        old_asin = extract_image_asin(page)
        new_asin = entry["product"]["asin"]
        if old_asin and new_asin and old_asin != new_asin:
            path.write_text(page.replace(old_asin, new_asin), encoding="utf-8")
            print(f"Updated: {entry['file']} ({old_asin} -> {new_asin})", flush=True)
            updated += 1

    deleted = 0
    for entry in unmatched:
        path = layout.products_dir / entry["file"]
        if path.exists():
            path.unlink()
            print(f"Deleted: {entry['file']}", flush=True)
            deleted += 1

    rebuild_index(layout)
    return updated, deleted
