import logging
from dataclasses import dataclass

from usaco_standings.diagnostics import DiagnosticsCollector
from usaco_standings.document import HEADING_TAGS, Document, Node
from usaco_standings.models import (
    FinalistEntry,
    InviteCategory,
    PageKind,
    ParseResult,
    Season,
)
from usaco_standings.resolver import PageDescriptor, PageShape, resolve
from usaco_standings.utils.text import is_year, parse_int

_MARKER_TAGS = (*HEADING_TAGS, "strong", "b", "p")
_BLOCK_TAGS = (*_MARKER_TAGS, "table", "ul", "ol")
# a paragraph only counts as a marker when it reads like a heading
_MAX_PARAGRAPH_MARKER_WORDS = 6


@dataclass
class Section:
    """A run of entries (table or list) and the category it was matched to."""

    label: str  # "finalists", "egoi" or "table N"
    category: InviteCategory
    node: Node


def marker_category(text: str) -> InviteCategory | None:
    """Category named by a heading, or None if the heading names neither."""
    lowered = text.lower()
    if "egoi" in lowered:
        return InviteCategory.EGOI
    if "finalist" in lowered:
        return InviteCategory.FINALIST
    return None


class FinalistsParser:
    """Parses a finalist announcement page, such as
    https://usaco.org/index.php?page=finalists24.

    Sections are matched independently. A heading naming "EGOI" or
    "finalists" claims the first table or list after it. Tables that no
    heading claims fall back to their position on the page: the first is
    the general finalist list, the second the EGOI list.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)

    def parse(self, html: str | bytes | None, season: Season) -> ParseResult[FinalistEntry]:
        descriptor = PageDescriptor(kind=PageKind.FINALISTS, season=season)
        diagnostics = DiagnosticsCollector(descriptor.page_id)
        shape = resolve(season, None, PageKind.FINALISTS)

        doc = Document(html)
        sections = self._match_sections(doc, shape, diagnostics)

        entries: list[FinalistEntry] = []
        for section in sections:
            if section.node.name == "table":
                entries.extend(self._parse_table(section, diagnostics))
            else:
                entries.extend(self._parse_list(section, diagnostics))

        labels = {s.label for s in sections}
        if "finalists" not in labels:
            diagnostics.absent("finalist list not found", column="finalists")
        if shape.egoi_category_recognized and "egoi" not in labels:
            diagnostics.absent("EGOI finalist list not found", column="egoi")

        return ParseResult(items=tuple(entries), diagnostics=diagnostics.drain())

    def _match_sections(
        self, doc: Document, shape: PageShape, diagnostics: DiagnosticsCollector
    ) -> list[Section]:
        sections: list[Section] = []
        pending: InviteCategory | None = None
        table_index = 0

        for block in doc.find_all(*_BLOCK_TAGS):
            if block.has_ancestor("table"):
                continue

            if block.name in _MARKER_TAGS:
                if block.name == "p" and len(block.text.split()) > _MAX_PARAGRAPH_MARKER_WORDS:
                    continue
                category = marker_category(block.text)
                if category is not None:
                    pending = category
                continue

            if block.name in ("ul", "ol"):
                if block.has_ancestor("ul") or block.has_ancestor("ol"):
                    continue
                # lists only count when a heading claims them; menus are lists too
                if pending is not None:
                    sections.append(self._section(pending, block, shape, diagnostics))
                    pending = None
                continue

            if not self._is_data_table(block):
                continue

            caption = block.select_one("caption")
            claimed = marker_category(caption.text) if caption else None
            if claimed is None:
                claimed, pending = pending, None

            if claimed is not None:
                sections.append(self._section(claimed, block, shape, diagnostics))
            elif table_index == 0:
                sections.append(Section("finalists", InviteCategory.FINALIST, block))
            elif table_index == 1 and shape.egoi_category_recognized:
                sections.append(Section("egoi", InviteCategory.EGOI, block))
            else:
                label = f"table {table_index + 1}"
                diagnostics.mismatch(
                    f"unexpected extra table {table_index + 1} on finalist page",
                    column=label,
                )
                sections.append(Section(label, InviteCategory.UNSPECIFIED, block))
            table_index += 1

        return sections

    @staticmethod
    def _section(
        category: InviteCategory,
        node: Node,
        shape: PageShape,
        diagnostics: DiagnosticsCollector,
    ) -> Section:
        if category is InviteCategory.EGOI and not shape.egoi_category_recognized:
            diagnostics.mismatch(
                f"EGOI section on a {shape.season} page, before EGOI invitations",
                column="egoi",
            )
            return Section("egoi", InviteCategory.UNSPECIFIED, node)
        label = "egoi" if category is InviteCategory.EGOI else "finalists"
        return Section(label, category, node)

    @staticmethod
    def _is_data_table(table: Node) -> bool:
        return any(len(row.cells()) >= 2 for row in table.rows())

    def _parse_table(
        self, section: Section, diagnostics: DiagnosticsCollector
    ) -> list[FinalistEntry]:
        entries = []
        rows = section.node.rows()
        for index, row in enumerate(rows, start=1):
            if row.is_header_row:
                continue
            cells = [c.text for c in row.cells()]
            # a lone empty <td> shows up on some pages
            if not any(cells):
                continue
            if index == 1 and any(c.lower() == "name" for c in cells):
                continue

            try:
                entry = self._parse_row(cells, section, index, diagnostics)
            except Exception as e:
                self.logger.warning(f"Error parsing finalist row {index}: {e}", exc_info=True)
                diagnostics.unrecognized(
                    f"row could not be read: {e}", row=index, column=section.label
                )
                continue
            if entry is not None:
                entries.append(entry)
        return entries

    @staticmethod
    def _parse_row(
        cells: list[str],
        section: Section,
        index: int,
        diagnostics: DiagnosticsCollector,
    ) -> FinalistEntry | None:
        if len(cells) == 4:
            year_text, name, school, state = cells
            graduation_year = parse_int(year_text)
            if year_text and graduation_year is None:
                diagnostics.unrecognized(
                    f"graduation year '{year_text}' is not a number",
                    row=index,
                    column=section.label,
                )
            if not name:
                diagnostics.absent("row skipped, name cell is empty", row=index, column=section.label)
                return None
            return FinalistEntry(
                name=name,
                category=section.category,
                graduation_year=graduation_year,
                school=school or None,
                state=state or None,
            )

        name = next((c for c in cells if c and not is_year(c)), None)
        if name is None:
            diagnostics.mismatch(
                f"row skipped, no name among {len(cells)} cells",
                row=index,
                column=section.label,
            )
            return None
        diagnostics.mismatch(
            f"row has {len(cells)} cells, expected 4",
            row=index,
            column=section.label,
        )
        graduation_year = next((parse_int(c) for c in cells if is_year(c)), None)
        return FinalistEntry(
            name=name, category=section.category, graduation_year=graduation_year
        )

    @staticmethod
    def _parse_list(
        section: Section, diagnostics: DiagnosticsCollector
    ) -> list[FinalistEntry]:
        entries = []
        for index, item in enumerate(section.node.find_all("li"), start=1):
            if not item.text:
                diagnostics.absent("list item is empty", row=index, column=section.label)
                continue
            entries.append(FinalistEntry(name=item.text, category=section.category))
        return entries


def parse_finalists_page(
    html: str | bytes | None, season: Season
) -> ParseResult[FinalistEntry]:
    return FinalistsParser().parse(html, season)
