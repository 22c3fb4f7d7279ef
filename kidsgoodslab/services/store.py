"""JSON state files - queues, progress and job reports under data/."""

import json
from datetime import datetime
from pathlib import Path

from ..models import BatchItem, Progress, QueueItem, SiteLayout
from ..models.category import category_key
from ..models.patterns import pattern_from_slug
from .extract import extract_asin, extract_category, extract_product_name

REBUILD_QUEUE_FILE = "rebuild-queue.json"
REBUILD_PROGRESS_FILE = "rebuild-progress.json"
BATCH_QUEUE_FILE = "products-queue.json"
BATCH_DONE_FILE = "products-done.json"
VERIFIED_PRODUCTS_FILE = "verified-products.json"

SAMPLE_BATCH_QUEUE = [
    {"name": "パンパース さらさらケア", "category": "consumable", "pattern": "reviews"},
    {"name": "エルゴベビー OMNI Breeze", "category": "baby", "pattern": "reviews"},
    {"name": "ストライダー スポーツモデル", "category": "outdoor", "pattern": "reviews"},
]


def load_json(path: Path, default=None):
    """Parsed JSON from path, or default when the file does not exist."""
    if not path.exists():
        return default
    return json.loads(path.read_text(encoding="utf-8"))


def save_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def build_rebuild_queue(layout: SiteLayout) -> list[QueueItem]:
    """One queue entry per existing article."""
    queue = []
    for path in layout.article_files():
        page = path.read_text(encoding="utf-8")
        slug = path.stem
        category = extract_category(page)
        queue.append(QueueItem(
            slug=slug,
            product_name=extract_product_name(page, slug),
            category=category_key(category) if category else None,
            asin=extract_asin(page),
            pattern_key=pattern_from_slug(slug),
        ))
    return queue


def write_rebuild_queue(layout: SiteLayout, queue: list[QueueItem]) -> Path:
    path = layout.data_file(REBUILD_QUEUE_FILE)
    save_json(path, [item.to_dict() for item in queue])
    return path


def load_rebuild_queue(layout: SiteLayout) -> list[QueueItem]:
    data = load_json(layout.data_file(REBUILD_QUEUE_FILE), default=[])
    return [QueueItem.from_dict(d) for d in data]


def load_progress(layout: SiteLayout) -> Progress:
    return Progress.from_dict(load_json(layout.data_file(REBUILD_PROGRESS_FILE), default={}))


def save_progress(layout: SiteLayout, progress: Progress) -> None:
    save_json(layout.data_file(REBUILD_PROGRESS_FILE), progress.to_dict())


def load_batch_queue(layout: SiteLayout) -> list[BatchItem]:
    """Pending products for the batch job. Writes a sample queue when none exists."""
    path = layout.data_file(BATCH_QUEUE_FILE)
    if not path.exists():
        save_json(path, SAMPLE_BATCH_QUEUE)
        print(f"Created sample queue: {path}", flush=True)
    return [BatchItem.from_dict(d) for d in load_json(path, default=[])]


def save_batch_queue(layout: SiteLayout, queue: list[BatchItem]) -> None:
    save_json(layout.data_file(BATCH_QUEUE_FILE), [item.to_dict() for item in queue])


def load_done(layout: SiteLayout) -> list[dict]:
    return load_json(layout.data_file(BATCH_DONE_FILE), default=[])


def mark_done(layout: SiteLayout, done: list[dict], item: BatchItem, slug: str) -> None:
    """Record a generated batch item with its timestamp and persist the list."""
    entry = item.to_dict()
    entry["slug"] = slug
    entry["generatedAt"] = datetime.now().isoformat()
    done.append(entry)
    save_json(layout.data_file(BATCH_DONE_FILE), done)
