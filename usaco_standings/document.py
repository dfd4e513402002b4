"""Thin adapter over a BeautifulSoup tree.

Every lookup returns ``None`` or an empty list when the element is not
there, so callers deal with absence as ordinary data. Malformed or
truncated HTML is repaired by lxml; the worst case is an empty tree.
"""

from dataclasses import dataclass

from bs4 import BeautifulSoup, NavigableString, Tag

from usaco_standings.utils.text import normalize_text

HEADING_TAGS = ("h1", "h2", "h3", "h4")


@dataclass(frozen=True)
class TextRun:
    """A bare text node plus the element immediately before it, if any."""

    text: str
    preceding: "Node | None"


class Node:
    """An element of the parsed page."""

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def name(self) -> str:
        return self._tag.name or ""

    @property
    def text(self) -> str:
        """Normalized text content of the element and its descendants."""
        return normalize_text(self._tag.get_text(" "))

    @property
    def html(self) -> str:
        return str(self._tag)

    def attr(self, name: str, default: str | None = None) -> str | None:
        value = self._tag.get(name)
        if value is None:
            return default
        # BS4 returns a list for multi-valued attributes such as class
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    @property
    def classes(self) -> list[str]:
        return (self.attr("class") or "").split()

    @property
    def colspan(self) -> int:
        raw = (self.attr("colspan") or "").strip()
        if raw.isdigit() and int(raw) > 0:
            return int(raw)
        return 1

    def select(self, selector: str) -> list["Node"]:
        return [Node(t) for t in self._tag.select(selector)]

    def select_one(self, selector: str) -> "Node | None":
        found = self._tag.select_one(selector)
        return Node(found) if found is not None else None

    def find_all(self, *names: str) -> list["Node"]:
        return [Node(t) for t in self._tag.find_all(list(names))]

    def rows(self) -> list["Node"]:
        return self.find_all("tr")

    def cells(self) -> list["Node"]:
        """Direct ``td``/``th`` children of a row."""
        return [Node(t) for t in self._tag.find_all(["td", "th"], recursive=False)]

    def cell(self, index: int) -> "Node | None":
        cells = self.cells()
        if 0 <= index < len(cells):
            return cells[index]
        return None

    @property
    def is_header_row(self) -> bool:
        cells = self.cells()
        return bool(cells) and all(c.name == "th" for c in cells)

    def has_ancestor(self, name: str) -> bool:
        return self._tag.find_parent(name) is not None

    def text_runs(self) -> list[TextRun]:
        """Direct text children, each paired with its preceding sibling element."""
        runs = []
        for child in self._tag.children:
            # comments, CDATA and the like are NavigableString subclasses
            if type(child) is not NavigableString:
                continue
            prev = child.previous_sibling
            runs.append(
                TextRun(
                    text=str(child),
                    preceding=Node(prev) if isinstance(prev, Tag) else None,
                )
            )
        return runs

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Node) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"Node({self.html[:80]!r})"


class Document:
    """A parsed HTML page.

    Args:
        html: Raw page text. None or empty text gives an empty document.
    """

    def __init__(self, html: str | bytes | None) -> None:
        self._soup = BeautifulSoup(html or "", "lxml")

    @property
    def root(self) -> Node:
        return Node(self._soup)

    @property
    def is_empty(self) -> bool:
        return self._soup.find(True) is None

    def tables(self) -> list[Node]:
        return self.root.find_all("table")

    def select(self, selector: str) -> list[Node]:
        return self.root.select(selector)

    def select_one(self, selector: str) -> Node | None:
        return self.root.select_one(selector)

    def find_all(self, *names: str) -> list[Node]:
        return self.root.find_all(*names)
