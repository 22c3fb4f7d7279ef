"""Queue and progress models for the regeneration jobs."""

from dataclasses import dataclass, field, asdict


@dataclass
class QueueItem:
    """An article scheduled for (re)generation."""

    slug: str
    product_name: str
    category: str | None
    asin: str | None
    pattern_key: str

    @classmethod
    def from_dict(cls, data: dict) -> "QueueItem":
        return cls(
            slug=data["slug"],
            product_name=data["productName"],
            category=data.get("category"),
            asin=data.get("asin"),
            pattern_key=data.get("patternKey") or "reviews",
        )

    def to_dict(self) -> dict:
        return {
            "slug": self.slug,
            "productName": self.product_name,
            "category": self.category,
            "asin": self.asin,
            "patternKey": self.pattern_key,
        }


@dataclass
class BatchItem:
    """A product entry in products-queue.json."""

    name: str
    category: str
    pattern: str | None = None
    title: str | None = None
    asin: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "BatchItem":
        return cls(
            name=data["name"],
            category=data.get("category") or "baby",
            pattern=data.get("pattern") or None,
            title=data.get("title") or None,
            asin=data.get("asin") or None,
        )

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class Progress:
    """Completed and failed slugs of a rebuild run."""

    completed: list[str] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)  # {"slug", "error", "time"}

    @classmethod
    def from_dict(cls, data: dict) -> "Progress":
        return cls(
            completed=list(data.get("completed") or []),
            failed=list(data.get("failed") or []),
        )

    def to_dict(self) -> dict:
        return {"completed": self.completed, "failed": self.failed}
