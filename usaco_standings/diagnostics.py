"""Structured parse warnings.

Parsers never raise on page content. Everything they cannot interpret is
recorded as a ``Diagnostic`` in the ``DiagnosticsCollector`` owned by that
parse call, and handed back next to the partial result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

import structlog

logger = structlog.get_logger(__name__)


class DiagnosticKind(Enum):
    # An expected page element (table, section, column) is missing.
    STRUCTURAL_ABSENCE = "structural_absence"
    # A row or header disagrees with the shape expected for its season/division.
    ROW_SHAPE_MISMATCH = "row_shape_mismatch"
    # A cell's text cannot be read as the expected type.
    UNRECOGNIZED_CONTENT = "unrecognized_content"


@dataclass(frozen=True)
class Diagnostic:
    """One advisory record about a page the parser could not fully read."""

    page: str
    kind: DiagnosticKind
    reason: str
    row: int | None = None
    column: str | None = None

    def __str__(self) -> str:
        where = self.page
        if self.row is not None:
            where += f" row {self.row}"
        if self.column:
            where += f" [{self.column}]"
        return f"{where}: {self.reason}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "kind": self.kind.value,
            "reason": self.reason,
            "row": self.row,
            "column": self.column,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Diagnostic":
        return cls(
            page=data["page"],
            kind=DiagnosticKind(data["kind"]),
            reason=data["reason"],
            row=data.get("row"),
            column=data.get("column"),
        )


class DiagnosticsCollector:
    """Append-only sink for the diagnostics of one page parse.

    Records keep their emission order. Each record is also logged when it
    is emitted; where the log ends up is the caller's business.
    """

    def __init__(self, page: str) -> None:
        self.page = page
        self._records: list[Diagnostic] = []

    def emit(
        self,
        kind: DiagnosticKind,
        reason: str,
        row: int | None = None,
        column: str | None = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            page=self.page, kind=kind, reason=reason, row=row, column=column
        )
        self._records.append(diagnostic)
        logger.warning(
            "parse_diagnostic",
            page=self.page,
            kind=kind.value,
            reason=reason,
            row=row,
            column=column,
        )
        return diagnostic

    def absent(self, reason: str, row: int | None = None, column: str | None = None) -> Diagnostic:
        return self.emit(DiagnosticKind.STRUCTURAL_ABSENCE, reason, row, column)

    def mismatch(self, reason: str, row: int | None = None, column: str | None = None) -> Diagnostic:
        return self.emit(DiagnosticKind.ROW_SHAPE_MISMATCH, reason, row, column)

    def unrecognized(
        self, reason: str, row: int | None = None, column: str | None = None
    ) -> Diagnostic:
        return self.emit(DiagnosticKind.UNRECOGNIZED_CONTENT, reason, row, column)

    def drain(self) -> tuple[Diagnostic, ...]:
        """Returns everything collected so far and empties the collector."""
        records = tuple(self._records)
        self._records.clear()
        return records

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)
