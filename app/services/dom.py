"""Document-tree querying used by the extractors.

Extractors only talk to :class:`DocumentQuery`, so the HTML library backing
it can be swapped without touching the selector logic.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from bs4 import BeautifulSoup, Tag


class DocumentQuery(Protocol):
    """Minimal CSS-selector capability over a parsed document."""

    def parse(self, markup: str) -> Any:
        """Return the root node of ``markup``."""

    def find_all(self, root: Any, selector: str) -> Sequence[Any]:
        """Return every node under ``root`` matching ``selector``."""

    def find_one(self, node: Any, selector: str) -> Any | None:
        """Return the first node under ``node`` matching ``selector``."""

    def text(self, node: Any | None) -> str:
        """Return the stripped text content of ``node`` (``""`` for ``None``)."""

    def attr(self, node: Any | None, name: str) -> str | None:
        """Return an attribute value, or ``None`` when absent."""


class SoupQuery:
    """:class:`DocumentQuery` backed by BeautifulSoup and soupsieve."""

    def __init__(self, features: str = "html.parser") -> None:
        self._features = features

    def parse(self, markup: str) -> BeautifulSoup:
        return BeautifulSoup(markup or "", self._features)

    def find_all(self, root: Tag, selector: str) -> list[Tag]:
        return root.select(selector)

    def find_one(self, node: Tag, selector: str) -> Tag | None:
        return node.select_one(selector)

    def text(self, node: Tag | None) -> str:
        if node is None:
            return ""
        return node.get_text().strip()

    def attr(self, node: Tag | None, name: str) -> str | None:
        if node is None:
            return None
        value = node.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            # Multi-valued attributes such as ``class`` come back as lists.
            return " ".join(value)
        return str(value)
