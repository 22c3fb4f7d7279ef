"""Article models - generated content and metadata scraped back from pages."""

from dataclasses import dataclass, field


@dataclass
class Article:
    """A generated article body with its headline fields."""

    title: str
    excerpt: str
    content: str
    char_count: int = 0


@dataclass
class PageMeta:
    """Fields extracted from a rendered article page."""

    file: str
    title: str
    category: str  # Japanese category name as shown on the page
    excerpt: str = ""
    rating: str = "4.0"
    date: str = ""
    asin: str | None = None
    mtime: float = 0.0

    @property
    def slug(self) -> str:
        return self.file.removesuffix(".html")


@dataclass
class ComparedProduct:
    """One product section of a comparison article."""

    name: str
    rating: str = "4.0"
    price: str = ""
    target_age: str = ""
    summary: str = ""
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    best_for: str = ""
    detail_html: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ComparedProduct":
        return cls(
            name=data.get("name", ""),
            rating=str(data.get("rating", "4.0")),
            price=data.get("price", ""),
            target_age=data.get("targetAge", ""),
            summary=data.get("summary", ""),
            pros=list(data.get("pros") or []),
            cons=list(data.get("cons") or []),
            best_for=data.get("bestFor", ""),
            detail_html=data.get("detailHTML", ""),
        )


@dataclass
class ComparisonArticle:
    """A multi-product comparison article."""

    title: str
    meta_description: str
    excerpt: str
    introduction: str
    comparison_table: str
    products: list[ComparedProduct]
    selection_guide: str
    conclusion: str
    winner: str

    @classmethod
    def from_dict(cls, data: dict) -> "ComparisonArticle":
        return cls(
            title=data.get("title", ""),
            meta_description=data.get("metaDescription", ""),
            excerpt=data.get("excerpt", ""),
            introduction=data.get("introduction", ""),
            comparison_table=data.get("comparisonTable", ""),
            products=[ComparedProduct.from_dict(p) for p in data.get("products") or []],
            selection_guide=data.get("selectionGuide", ""),
            conclusion=data.get("conclusion", ""),
            winner=data.get("winner", ""),
        )
