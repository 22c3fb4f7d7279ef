"""Product models - verified catalog entries and ranking candidates."""

from dataclasses import dataclass, asdict


@dataclass
class Product:
    """A verified product from verified-products.json."""

    name: str
    asin: str
    category: str  # English category key, e.g. "consumable"
    subcat: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            name=data["name"],
            asin=data.get("asin") or "",
            category=data.get("category") or "baby",
            subcat=data.get("subcat") or "",
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RankingCandidate:
    """An Amazon product page found through site search."""

    name: str
    title: str
    url: str
    asin: str
    category: str
    description: str = ""
    query: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "RankingCandidate":
        return cls(
            name=data.get("name", ""),
            title=data.get("title", ""),
            url=data.get("url", ""),
            asin=data.get("asin", ""),
            category=data.get("category", "baby"),
            description=data.get("description", ""),
            query=data.get("query", ""),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ValidationResult:
    """Outcome of checking an article's ASIN against Amazon."""

    file: str
    asin: str
    valid: bool
    reason: str = ""

    def to_dict(self) -> dict:
        return asdict(self)
