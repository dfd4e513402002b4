import logging
import re
from dataclasses import dataclass

from usaco_standings.diagnostics import DiagnosticsCollector
from usaco_standings.document import Document, Node
from usaco_standings.exceptions import ScraperError
from usaco_standings.models import (
    ParseResult,
    ProblemResult,
    StudentResult,
    TestcaseResult,
)
from usaco_standings.resolver import PageDescriptor, resolve
from usaco_standings.utils.text import normalize_text, parse_int

_PROBLEM_LABEL_RE = re.compile(r"^(p(roblem)?\s*#?\s*)?\d+$", re.I)
_NOT_PROMOTED = {"", "no", "n", "-", "0", "false"}


@dataclass(frozen=True)
class Column:
    """One header cell of a results table and the body cells it spans."""

    role: str  # country, year, name, total, promotion, problem, separator, other
    start: int
    width: int
    label: str

    @property
    def end(self) -> int:
        return self.start + self.width


@dataclass(frozen=True)
class TableLayout:
    columns: tuple[Column, ...]

    @property
    def width(self) -> int:
        return self.columns[-1].end if self.columns else 0

    @property
    def problems(self) -> tuple[Column, ...]:
        return tuple(c for c in self.columns if c.role == "problem")

    @property
    def observers(self) -> bool:
        # observer tables omit the graduation year column
        return self.find("year") is None

    @property
    def has_promotion_column(self) -> bool:
        return self.find("promotion") is not None

    def find(self, role: str) -> Column | None:
        return next((c for c in self.columns if c.role == role), None)


class ResultsParser:
    """Parses a contest results page, such as
    https://usaco.org/current/data/open24_platinum_results.html.

    The page may hold several tables (pre-college global, US, observers).
    Each one is read header first; body cells are then mapped onto the
    header columns by position, honoring ``colspan``. Anything that does
    not fit is reported as a diagnostic and the rest of the row is kept.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)

    def parse(
        self, html: str | bytes | None, descriptor: PageDescriptor
    ) -> ParseResult[StudentResult]:
        """Parses one contest-division results page.

        Args:
            html: Raw page HTML.
            descriptor: Which contest/division the page belongs to.

        Returns:
            The parsed rows plus diagnostics. Never raises on page content.
        """
        diagnostics = DiagnosticsCollector(descriptor.page_id)

        season = descriptor.season or (
            descriptor.contest.season if descriptor.contest else None
        )
        if season is None:
            diagnostics.absent("page descriptor has no season")
            return ParseResult(diagnostics=diagnostics.drain())
        try:
            shape = resolve(season, descriptor.division, descriptor.kind)
        except ScraperError as e:
            diagnostics.mismatch(e.message)
            return ParseResult(diagnostics=diagnostics.drain())

        doc = Document(html)
        students: list[StudentResult] = []
        seen: set[StudentResult] = set()
        reported_problem_counts: set[int] = set()
        has_markers = False
        found_table = False
        row_number = 0

        for table_number, table in enumerate(doc.tables(), start=1):
            rows = table.rows()
            layout = self._parse_header(rows[0]) if rows else None
            if layout is None:
                self.logger.debug(f"Skipping table {table_number} on {descriptor.page_id}")
                diagnostics.absent(
                    f"table {table_number} has no Name header, skipped",
                    column=f"table {table_number}",
                )
                continue
            found_table = True
            has_markers = has_markers or layout.has_promotion_column
            if layout.find("total") is None:
                diagnostics.absent("table has no total score column", column="total")

            problem_count = len(layout.problems)
            if (
                problem_count != shape.expected_problem_count
                and problem_count not in reported_problem_counts
            ):
                reported_problem_counts.add(problem_count)
                diagnostics.mismatch(
                    f"table lists {problem_count} problems, "
                    f"expected {shape.expected_problem_count}",
                    column="problems",
                )

            for row in rows[1:]:
                if row.is_header_row:
                    continue
                row_number += 1
                try:
                    student = self._parse_row(row, layout, row_number, diagnostics)
                except Exception as e:
                    self.logger.warning(f"Error parsing row {row_number}: {e}", exc_info=True)
                    diagnostics.unrecognized(f"row could not be read: {e}", row=row_number)
                    continue
                if student is None:
                    continue
                if self._row_marks_promotion(row):
                    has_markers = True
                # the same student can appear in the global and the US table
                if student in seen:
                    continue
                seen.add(student)
                students.append(student)

        if not found_table:
            diagnostics.absent("results table not found")
        elif shape.promotions_expected and not has_markers:
            diagnostics.absent(
                f"no promotion markers on a {shape.division.value} page "
                f"for season {shape.season}",
                column="promotion",
            )

        return ParseResult(items=tuple(students), diagnostics=diagnostics.drain())

    def _parse_header(self, header: Node) -> TableLayout | None:
        """Classifies the header cells. Returns None if this is not a results table."""
        columns = []
        position = 0
        seen_total = False
        for cell in header.cells():
            label = cell.text
            role = self._classify_header(label.lower(), cell.colspan, seen_total)
            if role == "total":
                seen_total = True
            columns.append(Column(role=role, start=position, width=cell.colspan, label=label))
            position += cell.colspan

        if not any(c.role == "name" for c in columns):
            return None
        return TableLayout(columns=tuple(columns))

    @staticmethod
    def _classify_header(text: str, colspan: int, seen_total: bool) -> str:
        if "country" in text:
            return "country"
        if text.startswith("year") or text in ("grad", "grad year", "graduation"):
            return "year"
        if text.startswith("name"):
            return "name"
        if "promot" in text:
            return "promotion"
        if not seen_total and text in ("score", "total", "total score"):
            return "total"
        if _PROBLEM_LABEL_RE.match(text):
            return "problem"
        if seen_total:
            if not text and colspan == 1:
                return "separator"
            return "problem"
        return "other"

    @staticmethod
    def _expand_cells(row: Node) -> list[str]:
        """Row cell texts laid out by position, padding colspans with blanks."""
        positions: list[str] = []
        for cell in row.cells():
            positions.append(cell.text)
            positions.extend([""] * (cell.colspan - 1))
        return positions

    @staticmethod
    def _row_marks_promotion(row: Node) -> bool:
        return any("promot" in cls.lower() for cls in row.classes)

    def _parse_row(
        self,
        row: Node,
        layout: TableLayout,
        row_number: int,
        diagnostics: DiagnosticsCollector,
    ) -> StudentResult | None:
        positions = self._expand_cells(row)

        def texts(column: Column | None) -> list[str] | None:
            if column is None or column.start >= len(positions):
                return None
            return positions[column.start : column.end]

        def joined(column: Column | None) -> str | None:
            values = texts(column)
            if values is None:
                return None
            return normalize_text(" ".join(values))

        shape_note = None
        if len(positions) != layout.width:
            shape_note = f"row spans {len(positions)} cells, header spans {layout.width}"

        name = joined(layout.find("name"))
        if not name:
            if shape_note:
                diagnostics.mismatch(f"row skipped, no name: {shape_note}", row=row_number)
            else:
                diagnostics.absent("row skipped, name cell is empty", row=row_number, column="name")
            return None

        if shape_note:
            diagnostics.mismatch(shape_note, row=row_number)

        graduation_year = None
        year_text = joined(layout.find("year"))
        if year_text:
            graduation_year = parse_int(year_text)
            if graduation_year is None:
                diagnostics.unrecognized(
                    f"graduation year '{year_text}' is not a number",
                    row=row_number,
                    column="year",
                )

        total = None
        total_text = joined(layout.find("total"))
        if total_text is not None:
            total = parse_int(total_text)
            if total is None:
                diagnostics.unrecognized(
                    f"total score '{total_text}' is not a number",
                    row=row_number,
                    column="total",
                )

        problems = tuple(
            self._parse_problem(texts(column), index, row_number, diagnostics)
            for index, column in enumerate(layout.problems, start=1)
        )

        scores = [p.score for p in problems]
        if total is not None and problems and all(s is not None for s in scores):
            printed_sum = sum(s for s in scores if s is not None)
            if printed_sum != total:
                diagnostics.mismatch(
                    f"total {total} differs from problem score sum {printed_sum}",
                    row=row_number,
                    column="total",
                )

        promoted = self._row_marks_promotion(row)
        promotion_text = joined(layout.find("promotion"))
        if promotion_text is not None and promotion_text.lower() not in _NOT_PROMOTED:
            promoted = True

        country = joined(layout.find("country")) or None

        return StudentResult(
            name=name,
            problems=problems,
            total=total,
            promoted=promoted,
            country=country,
            graduation_year=graduation_year,
            observer=layout.observers,
        )

    @staticmethod
    def _parse_problem(
        values: list[str] | None,
        index: int,
        row_number: int,
        diagnostics: DiagnosticsCollector,
    ) -> ProblemResult:
        column = f"problem {index}"
        if not values:
            return ProblemResult(submitted=False)

        values = list(values)
        # each problem span ends with a blank cell
        while values and not values[-1]:
            values.pop()
        if not values:
            return ProblemResult(submitted=False)

        if len(values) == 1:
            score = parse_int(values[0])
            if score is not None:
                return ProblemResult(submitted=True, score=score)

        symbols: list[str] = []
        for value in values:
            compact = value.replace(" ", "")
            if len(compact) > 1 and all(TestcaseResult.from_symbol(ch) for ch in compact):
                symbols.extend(compact)
            else:
                symbols.append(compact)

        testcases = [TestcaseResult.from_symbol(s) for s in symbols]
        if any(t is None for t in testcases):
            unknown = next(s for s, t in zip(symbols, testcases) if t is None)
            diagnostics.unrecognized(
                f"unrecognized testcase result '{unknown}'",
                row=row_number,
                column=column,
            )
            return ProblemResult(submitted=True)

        return ProblemResult(
            submitted=True,
            testcases=tuple(t for t in testcases if t is not None),
        )


def parse_results_page(
    html: str | bytes | None, descriptor: PageDescriptor
) -> ParseResult[StudentResult]:
    return ResultsParser().parse(html, descriptor)
