"""Search result model."""

from dataclasses import dataclass


@dataclass
class SearchResult:
    """A single Brave web search hit."""

    title: str
    description: str
    url: str

    def as_context_line(self) -> str:
        return f"- {self.title}: {self.description}"
