import logging
import re

from usaco_standings.diagnostics import DiagnosticsCollector
from usaco_standings.document import Document, Node, TextRun
from usaco_standings.models import (
    Competition,
    HistoryEntry,
    Medal,
    PageKind,
    ParseResult,
)
from usaco_standings.resolver import PageDescriptor, egoi_expected
from usaco_standings.utils.text import is_year, normalize_text, parse_int

_MEDAL_RE = re.compile(r"medal_(none|bronze|silver|gold)\b", re.I)
_MEDALS = {
    "none": Medal.NO_MEDAL,
    "bronze": Medal.BRONZE,
    "silver": Medal.SILVER,
    "gold": Medal.GOLD,
}
_VISA_PREFIX = "(*)"


class HistoryParser:
    """Parses the combined IOI/EGOI history page,
    https://usaco.org/index.php?page=history.

    The page has one block per competition, each holding a panel per year.
    Inside a panel every contestant is a text node right after an ``<img>``
    naming their medal.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)

    def parse(self, html: str | bytes | None) -> ParseResult[HistoryEntry]:
        descriptor = PageDescriptor(kind=PageKind.HISTORY)
        diagnostics = DiagnosticsCollector(descriptor.page_id)
        doc = Document(html)

        found: dict[Competition, list[HistoryEntry]] = {}
        for block in doc.select(".content > div"):
            heading = block.select_one("h2")
            if heading is None:
                continue

            competition = self._competition(heading.text, diagnostics)
            if competition is None:
                continue

            if competition in found:
                diagnostics.mismatch(
                    f"{competition.name} section appears twice, keeping the last one",
                    column=competition.name,
                )
            found[competition] = self._parse_section(block, competition, diagnostics)

        if Competition.IOI not in found:
            diagnostics.absent("IOI section not found", column="IOI")
        if Competition.EGOI not in found:
            ioi_years = {e.year for e in found.get(Competition.IOI, [])}
            if any(egoi_expected(year) for year in ioi_years):
                diagnostics.absent("EGOI section not found", column="EGOI")

        entries: list[HistoryEntry] = []
        for competition in Competition:
            # stable, so contestants keep their listed order within a year
            entries.extend(sorted(found.get(competition, []), key=lambda e: e.year))

        return ParseResult(items=tuple(entries), diagnostics=diagnostics.drain())

    @staticmethod
    def _competition(
        heading: str, diagnostics: DiagnosticsCollector
    ) -> Competition | None:
        is_ioi = "IOI" in heading
        is_egoi = "EGOI" in heading
        if is_ioi and is_egoi:
            diagnostics.mismatch(f"section heading '{heading}' names both IOI and EGOI")
            return None
        if is_ioi:
            return Competition.IOI
        if is_egoi:
            return Competition.EGOI
        return None

    def _parse_section(
        self,
        block: Node,
        competition: Competition,
        diagnostics: DiagnosticsCollector,
    ) -> list[HistoryEntry]:
        results = []
        for panel_index, panel in enumerate(block.select("div.panel.historypanel"), start=1):
            year = parse_int(panel.text[:4])
            if year is None:
                diagnostics.unrecognized(
                    f"year panel '{panel.text[:40]}' does not start with a year",
                    row=panel_index,
                    column=competition.name,
                )
                continue

            if competition is Competition.EGOI and not egoi_expected(year):
                diagnostics.mismatch(
                    f"EGOI results listed for {year}, before the US took part",
                    column=f"{competition.name} {year}",
                )

            row = 0
            for run in panel.text_runs():
                name = normalize_text(run.text)
                if not name or (row == 0 and is_year(name)):
                    continue
                row += 1
                try:
                    entry = self._parse_contestant(name, run, year, competition, row, diagnostics)
                except Exception as e:
                    self.logger.warning(f"Error parsing {competition.name} {year} row {row}: {e}")
                    diagnostics.unrecognized(
                        f"contestant could not be read: {e}",
                        row=row,
                        column=f"{competition.name} {year}",
                    )
                    continue
                if entry is not None:
                    results.append(entry)
        return results

    @staticmethod
    def _parse_contestant(
        name: str,
        run: TextRun,
        year: int,
        competition: Competition,
        row: int,
        diagnostics: DiagnosticsCollector,
    ) -> HistoryEntry | None:
        column = f"{competition.name} {year}"

        if name.startswith(_VISA_PREFIX):
            return HistoryEntry(
                year=year,
                competition=competition,
                name=name[len(_VISA_PREFIX) :].strip(),
                medal=Medal.VISA_ISSUE,
            )

        detail = None
        # e.g. "Rain Jiang (5th place)"
        if name.endswith("place)") and "(" in name:
            cut = name.rfind("(")
            detail = name[cut + 1 : -1].strip()
            name = name[:cut].strip()
        if not name:
            diagnostics.absent("contestant has no name", row=row, column=column)
            return None

        medal = None
        image = run.preceding
        if image is None or image.name != "img":
            diagnostics.absent(
                f"no medal image before '{name}'", row=row, column=column
            )
        else:
            src = image.attr("src", "")
            match = _MEDAL_RE.search(src)
            if match:
                medal = _MEDALS[match.group(1).lower()]
            else:
                diagnostics.unrecognized(
                    f"unexpected medal image '{src}'", row=row, column=column
                )

        return HistoryEntry(
            year=year, competition=competition, name=name, medal=medal, detail=detail
        )


def parse_history_page(html: str | bytes | None) -> ParseResult[HistoryEntry]:
    return HistoryParser().parse(html)
