import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from usaco_standings.diagnostics import Diagnostic
from usaco_standings.exceptions import ValidationError

T = TypeVar("T")

_SEASON_RE = re.compile(r"^\s*(\d{4})\s*[-/]\s*(\d{2}|\d{4})\s*$")


@dataclass(frozen=True, order=True)
class Season:
    """A USACO season, spanning two calendar years.

    The season is identified by its end year, which also serves as its
    ordinal: the 2013-14 season has ``end_year == 2014``.
    """

    end_year: int

    @property
    def start_year(self) -> int:
        return self.end_year - 1

    @property
    def ordinal(self) -> int:
        return self.end_year

    @property
    def short_year(self) -> str:
        """Two-digit end year as used in USACO URLs (e.g. "14")."""
        return f"{self.end_year % 100:02d}"

    @classmethod
    def parse(cls, text: str) -> "Season":
        """Parses "2013-14", "2013-2014" or a bare end year "2014".

        Raises:
            ValidationError: If the text is not a season identifier.
        """
        raw = (text or "").strip()
        if re.fullmatch(r"\d{4}", raw):
            return cls(int(raw))

        match = _SEASON_RE.match(raw)
        if not match:
            raise ValidationError(
                f"Invalid season '{text}'",
                field="season",
                expected="YYYY-YY",
                received=text,
            )

        start = int(match.group(1))
        end_raw = match.group(2)
        end = int(end_raw) if len(end_raw) == 4 else (start // 100) * 100 + int(end_raw)
        if end < start:
            end += 100
        if end != start + 1:
            raise ValidationError(
                f"Season '{text}' must span two consecutive years",
                field="season",
                expected="YYYY-YY",
                received=text,
            )
        return cls(end)

    def __str__(self) -> str:
        return f"{self.start_year}-{self.short_year}"


class Division(Enum):
    """Competition tier. Ordered bronze < silver < gold < platinum."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"

    @property
    def rank(self) -> int:
        return list(Division).index(self)

    def __lt__(self, other: "Division") -> bool:
        if not isinstance(other, Division):
            return NotImplemented
        return self.rank < other.rank

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    def __str__(self) -> str:
        return self.display_name


class Month(Enum):
    """Contest month within a season, in calendar order.

    ``MARCH`` refers to the March contest held back when USACO ran six
    contests a year. It is distinct from the US ``OPEN``.
    """

    NOVEMBER = "nov"
    DECEMBER = "dec"
    JANUARY = "jan"
    FEBRUARY = "feb"
    MARCH = "mar"
    OPEN = "open"

    @property
    def rank(self) -> int:
        return list(Month).index(self)

    def __lt__(self, other: "Month") -> bool:
        if not isinstance(other, Month):
            return NotImplemented
        return self.rank < other.rank

    @property
    def url_name(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        if self is Month.OPEN:
            return "US Open"
        return self.name.capitalize()


class PageKind(Enum):
    RESULTS = "results"
    FINALISTS = "finalists"
    HISTORY = "history"


@dataclass(frozen=True, order=True)
class Contest:
    """One scheduled contest of a season.

    Contests are created by the resolver from season metadata, never parsed
    from page content.
    """

    season: Season
    slot: int  # 1-based position within the season
    month: Month = field(compare=False)

    @property
    def year(self) -> int:
        """Calendar year the contest was held in."""
        if self.month in (Month.NOVEMBER, Month.DECEMBER):
            return self.season.start_year
        return self.season.end_year

    def page_id(self, division: Division) -> str:
        """Page identifier, e.g. "open17_gold"."""
        return f"{self.month.url_name}{self.year % 100:02d}_{division.value}"

    @property
    def display_name(self) -> str:
        return f"{self.month.display_name} {self.year}"


class TestcaseResult(Enum):
    CORRECT = "*"
    WRONG_ANSWER = "x"
    TIMEOUT = "t"
    COMPILATION_ERROR = "c"
    RUNTIME_ERROR = "!"
    EMPTY = "e"

    # Keep pytest from collecting this enum as a test class.
    __test__ = False

    @classmethod
    def from_symbol(cls, symbol: str) -> "TestcaseResult | None":
        # "s" marked runtime errors on old result pages
        if symbol == "s":
            return cls.RUNTIME_ERROR
        try:
            return cls(symbol)
        except ValueError:
            return None


@dataclass(frozen=True)
class ProblemResult:
    """A student's outcome on one problem, as printed.

    ``score`` is set only when the page prints a numeric score for the
    problem. ``testcases`` is set only when the page prints per-testcase
    symbols and every symbol was recognized.
    """

    submitted: bool
    score: int | None = None
    testcases: tuple[TestcaseResult, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "submitted": self.submitted,
            "score": self.score,
            "testcases": (
                [t.value for t in self.testcases] if self.testcases is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProblemResult":
        testcases = data.get("testcases")
        return cls(
            submitted=data.get("submitted", False),
            score=data.get("score"),
            testcases=(
                tuple(TestcaseResult(t) for t in testcases)
                if testcases is not None
                else None
            ),
        )


@dataclass(frozen=True)
class StudentResult:
    """One row of a contest results table.

    ``total`` is the printed total and is never reconciled with the
    problem scores. ``promoted`` is the page's own promotion marking.
    """

    name: str
    problems: tuple[ProblemResult, ...] = ()
    total: int | None = None
    promoted: bool = False
    country: str | None = None
    graduation_year: int | None = None
    observer: bool = False

    @property
    def problem_scores(self) -> tuple[int | None, ...]:
        return tuple(p.score for p in self.problems)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "country": self.country,
            "graduation_year": self.graduation_year,
            "observer": self.observer,
            "total": self.total,
            "promoted": self.promoted,
            "problems": [p.to_dict() for p in self.problems],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StudentResult":
        return cls(
            name=data["name"],
            problems=tuple(ProblemResult.from_dict(p) for p in data.get("problems", [])),
            total=data.get("total"),
            promoted=data.get("promoted", False),
            country=data.get("country"),
            graduation_year=data.get("graduation_year"),
            observer=data.get("observer", False),
        )


class InviteCategory(Enum):
    FINALIST = "finalist"
    EGOI = "egoi"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class FinalistEntry:
    name: str
    category: InviteCategory
    graduation_year: int | None = None
    school: str | None = None
    state: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category.value,
            "graduation_year": self.graduation_year,
            "school": self.school,
            "state": self.state,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FinalistEntry":
        return cls(
            name=data["name"],
            category=InviteCategory(data.get("category", "unspecified")),
            graduation_year=data.get("graduation_year"),
            school=data.get("school"),
            state=data.get("state"),
        )


class Competition(Enum):
    IOI = "ioi"
    EGOI = "egoi"


class Medal(Enum):
    # Could not attend because of visa issues (2017)
    VISA_ISSUE = "visa_issue"
    NO_MEDAL = "none"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


@dataclass(frozen=True)
class HistoryEntry:
    """A US team member at one year of IOI or EGOI."""

    year: int
    competition: Competition
    name: str
    medal: Medal | None = None
    detail: str | None = None  # printed placement note, e.g. "5th place"

    @property
    def season(self) -> Season:
        return Season(self.year)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "competition": self.competition.value,
            "name": self.name,
            "medal": self.medal.value if self.medal else None,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        medal = data.get("medal")
        return cls(
            year=data["year"],
            competition=Competition(data["competition"]),
            name=data["name"],
            medal=Medal(medal) if medal else None,
            detail=data.get("detail"),
        )


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """What a parser returns: the extracted items plus diagnostics."""

    items: tuple[T, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class ContestResults:
    """All rows parsed from one contest-division results page."""

    contest: Contest
    division: Division
    students: list[StudentResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": str(self.contest.season),
            "month": self.contest.month.value,
            "slot": self.contest.slot,
            "year": self.contest.year,
            "division": self.division.value,
            "students": [s.to_dict() for s in self.students],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContestResults":
        return cls(
            contest=Contest(
                season=Season.parse(data["season"]),
                slot=data["slot"],
                month=Month(data["month"]),
            ),
            division=Division(data["division"]),
            students=[StudentResult.from_dict(s) for s in data.get("students", [])],
            diagnostics=[Diagnostic.from_dict(d) for d in data.get("diagnostics", [])],
        )


@dataclass
class Camp:
    """Invitations from one season's finalist announcement page."""

    season: Season
    entries: list[FinalistEntry] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def finalists(self) -> list[FinalistEntry]:
        return [e for e in self.entries if e.category is InviteCategory.FINALIST]

    @property
    def egoi(self) -> list[FinalistEntry]:
        return [e for e in self.entries if e.category is InviteCategory.EGOI]

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": str(self.season),
            "entries": [e.to_dict() for e in self.entries],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Camp":
        return cls(
            season=Season.parse(data["season"]),
            entries=[FinalistEntry.from_dict(e) for e in data.get("entries", [])],
            diagnostics=[Diagnostic.from_dict(d) for d in data.get("diagnostics", [])],
        )


@dataclass
class IntlHistory:
    entries: list[HistoryEntry] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ioi(self) -> list[HistoryEntry]:
        return [e for e in self.entries if e.competition is Competition.IOI]

    @property
    def egoi(self) -> list[HistoryEntry]:
        return [e for e in self.entries if e.competition is Competition.EGOI]


@dataclass
class UsacoData:
    """The full scraped dataset."""

    contests: list[ContestResults] = field(default_factory=list)
    camps: list[Camp] = field(default_factory=list)
    history: IntlHistory = field(default_factory=IntlHistory)

    @property
    def diagnostic_count(self) -> int:
        return (
            sum(len(c.diagnostics) for c in self.contests)
            + sum(len(c.diagnostics) for c in self.camps)
            + len(self.history.diagnostics)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "contests": [c.to_dict() for c in self.contests],
            "camps": [c.to_dict() for c in self.camps],
            "history": {
                "entries": [e.to_dict() for e in self.history.entries],
                "diagnostics": [d.to_dict() for d in self.history.diagnostics],
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UsacoData":
        history = data.get("history", {})
        return cls(
            contests=[ContestResults.from_dict(c) for c in data.get("contests", [])],
            camps=[Camp.from_dict(c) for c in data.get("camps", [])],
            history=IntlHistory(
                entries=[HistoryEntry.from_dict(e) for e in history.get("entries", [])],
                diagnostics=[
                    Diagnostic.from_dict(d) for d in history.get("diagnostics", [])
                ],
            ),
        )
