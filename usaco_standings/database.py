"""Per-participant view of the scraped dataset.

Contest rows and camp invitations are grouped by a best-effort identity
(name, graduation year, country) so a person's history can be looked up
by name.
"""

import re
from dataclasses import dataclass, field, replace

from usaco_standings.models import (
    Contest,
    Division,
    HistoryEntry,
    IntlHistory,
    InviteCategory,
    Season,
    UsacoData,
)
from usaco_standings.utils.country import get_country_name
from usaco_standings.utils.text import normalize_text

# Finalist pages only list US students.
CAMP_COUNTRY = "USA"

# e.g. the "(Ben) " in "Benjamin (Ben) Qi"
_PREFERRED_NAME_RE = re.compile(r"\(.+\) ")


@dataclass(frozen=True)
class ParticipantId:
    name: str
    graduation_year: int | None
    country: str

    @property
    def sort_key(self) -> tuple[int, str, str]:
        # observers have no graduation year and sort last
        return (self.graduation_year or 10_000, self.country, self.name)


@dataclass(frozen=True)
class ContestRecord:
    contest: Contest
    division: Division
    total: int | None
    promoted: bool


@dataclass(frozen=True)
class CampRecord:
    season: Season
    category: InviteCategory


@dataclass
class Participant:
    id: ParticipantId
    contests: list[ContestRecord] = field(default_factory=list)
    camps: list[CampRecord] = field(default_factory=list)


@dataclass
class NameQueryResult:
    participants: list[Participant] = field(default_factory=list)
    ioi: list[HistoryEntry] = field(default_factory=list)
    egoi: list[HistoryEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.participants or self.ioi or self.egoi)


def normalize_name(name: str) -> str:
    """Case-insensitive, whitespace-collapsed form used for lookups."""
    return normalize_text(name).lower()


def strip_preferred_name(name: str) -> str:
    """Drops a parenthesized preferred name, "Benjamin (Ben) Qi" -> "Benjamin Qi"."""
    return _PREFERRED_NAME_RE.sub("", name, count=1)


class UsacoDatabase:
    """Answers name queries over a ``UsacoData`` snapshot."""

    def __init__(self, data: UsacoData):
        participants: dict[ParticipantId, Participant] = {}

        for page in data.contests:
            for student in page.students:
                pid = ParticipantId(
                    name=student.name,
                    graduation_year=student.graduation_year,
                    country=student.country or "",
                )
                participant = participants.setdefault(pid, Participant(id=pid))
                participant.contests.append(
                    ContestRecord(
                        contest=page.contest,
                        division=page.division,
                        total=student.total,
                        promoted=student.promoted,
                    )
                )

        for camp in data.camps:
            for entry in camp.entries:
                pid = ParticipantId(
                    name=entry.name,
                    graduation_year=entry.graduation_year,
                    country=CAMP_COUNTRY,
                )
                participant = participants.setdefault(pid, Participant(id=pid))
                participant.camps.append(CampRecord(season=camp.season, category=entry.category))

        for participant in participants.values():
            participant.contests.sort(key=lambda r: (r.contest, r.division.rank))
            participant.camps.sort(key=lambda r: r.season)

        self.participants = sorted(participants.values(), key=lambda p: p.id.sort_key)
        self.history = IntlHistory(
            entries=[
                replace(e, name=strip_preferred_name(e.name)) for e in data.history.entries
            ],
            diagnostics=list(data.history.diagnostics),
        )

    def query_name(self, name: str) -> NameQueryResult:
        """Returns every record filed under ``name``.

        Matching is case-insensitive and ignores duplicate whitespace.
        IOI/EGOI names are matched without their parenthesized preferred
        name, so "Benjamin (Ben) Qi" is found as "Benjamin Qi".
        """
        key = normalize_name(name)
        return NameQueryResult(
            participants=[p for p in self.participants if normalize_name(p.id.name) == key],
            ioi=[e for e in self.history.ioi if normalize_name(e.name) == key],
            egoi=[e for e in self.history.egoi if normalize_name(e.name) == key],
        )


def format_query_result(result: NameQueryResult) -> str:
    """Renders a query result as plain text, one line per record."""
    if result.is_empty:
        return "No results found."

    lines = []
    for participant in result.participants:
        pid = participant.id
        grad = f"class of {pid.graduation_year}" if pid.graduation_year else "observer"
        lines.append(f"{pid.name} ({get_country_name(pid.country)}, {grad})")
        for record in participant.contests:
            mark = " (promoted)" if record.promoted else ""
            total = record.total if record.total is not None else "?"
            lines.append(
                f"  {record.contest.display_name} {record.division.display_name}: "
                f"{total}{mark}"
            )
        for camp in participant.camps:
            label = "EGOI finalist" if camp.category is InviteCategory.EGOI else "Finalist"
            lines.append(f"  {camp.season} {label}")

    for title, entries in (("IOI", result.ioi), ("EGOI", result.egoi)):
        for entry in entries:
            medal = entry.medal.value.replace("_", " ") if entry.medal else "unknown"
            detail = f", {entry.detail}" if entry.detail else ""
            lines.append(f"{title} {entry.year}: {entry.name} ({medal}{detail})")

    return "\n".join(lines)
