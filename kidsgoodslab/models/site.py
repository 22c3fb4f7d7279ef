"""Site directory layout."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SiteLayout:
    """Well-known paths under the site root."""

    root: Path

    @property
    def index_html(self) -> Path:
        return self.root / "index.html"

    @property
    def products_dir(self) -> Path:
        return self.root / "products"

    @property
    def products_index(self) -> Path:
        return self.products_dir / "index.html"

    @property
    def ogp_dir(self) -> Path:
        return self.root / "images" / "ogp"

    @property
    def sitemap(self) -> Path:
        return self.root / "sitemap.xml"

    @property
    def data_dir(self) -> Path:
        return self.root / "data"

    @property
    def main_js(self) -> Path:
        return self.root / "js" / "main.js"

    def data_file(self, name: str) -> Path:
        return self.data_dir / name

    def article_path(self, slug: str) -> Path:
        return self.products_dir / f"{slug}.html"

    def ogp_path(self, slug: str) -> Path:
        return self.ogp_dir / f"{slug}.png"

    def article_files(self) -> list[Path]:
        """Article pages in products/, sorted by name, excluding the listing page."""
        if not self.products_dir.is_dir():
            return []
        return sorted(
            p for p in self.products_dir.glob("*.html") if p.name != "index.html"
        )

    def existing_slugs(self) -> set[str]:
        return {p.stem for p in self.article_files()}
