"""Season/division format rules.

USACO pages drifted in shape over the years. Every dated format change is
recorded here as a boundary season, and parsers only ever look at the
resolved ``PageShape``. Nothing else in the package compares seasons.
"""

from dataclasses import dataclass

from usaco_standings.exceptions import UnsupportedDivisionError, ValidationError
from usaco_standings.models import Contest, Division, Month, PageKind, Season

# 2011-12 is the first season with results pages in the current format.
FIRST_SEASON = Season(2012)

# Six contests a year until 2013-14, four from 2014-15 on.
FOUR_CONTEST_SEASON = Season(2015)

# Platinum was introduced in 2015-16.
PLATINUM_SEASON = Season(2016)

# From 2020-21 on, bronze and silver pages no longer mark promotions.
NO_LOWER_PROMOTION_SEASON = Season(2021)

# Finalist pages list EGOI invitations separately from 2021-22 on.
EGOI_FINALIST_SEASON = Season(2022)

# The US team first attended EGOI in 2021.
EGOI_FIRST_YEAR = 2021

PROBLEMS_PER_CONTEST = 3

_SIX_CONTEST_MONTHS = (
    Month.NOVEMBER,
    Month.DECEMBER,
    Month.JANUARY,
    Month.FEBRUARY,
    Month.MARCH,
    Month.OPEN,
)
_FOUR_CONTEST_MONTHS = (Month.DECEMBER, Month.JANUARY, Month.FEBRUARY, Month.OPEN)


@dataclass(frozen=True)
class PageShape:
    """What a page of a given kind should look like in a given season."""

    page_kind: PageKind
    season: Season
    division: Division | None
    contest_count: int
    expected_problem_count: int
    promotions_expected: bool
    platinum_valid: bool
    egoi_category_recognized: bool


@dataclass(frozen=True)
class PageDescriptor:
    """Identifies a fetched page: its kind plus season/division/contest."""

    kind: PageKind
    season: Season | None = None
    division: Division | None = None
    contest: Contest | None = None

    @property
    def page_id(self) -> str:
        if self.kind is PageKind.HISTORY:
            return "history"
        if self.kind is PageKind.FINALISTS:
            return f"finalists{self.season.short_year}" if self.season else "finalists"
        if self.contest and self.division:
            return f"{self.contest.page_id(self.division)}_results"
        parts = [str(self.season) if self.season else "unknown"]
        if self.division:
            parts.append(self.division.value)
        return "_".join(parts) + "_results"


def contest_months(season: Season) -> tuple[Month, ...]:
    if season < FOUR_CONTEST_SEASON:
        return _SIX_CONTEST_MONTHS
    return _FOUR_CONTEST_MONTHS


def contests_for(season: Season) -> tuple[Contest, ...]:
    """The season's scheduled contests, in order."""
    return tuple(
        Contest(season=season, slot=i, month=month)
        for i, month in enumerate(contest_months(season), start=1)
    )


def divisions_for(season: Season) -> tuple[Division, ...]:
    if platinum_valid(season):
        return tuple(Division)
    return (Division.BRONZE, Division.SILVER, Division.GOLD)


def platinum_valid(season: Season) -> bool:
    return season >= PLATINUM_SEASON


def top_division(season: Season) -> Division:
    return divisions_for(season)[-1]


def is_division_valid(season: Season, division: Division) -> bool:
    return division in divisions_for(season)


def promotions_expected(season: Season, division: Division) -> bool:
    """Whether a results page should carry promotion markers.

    The top division has nowhere to promote to. Bronze and silver pages
    stopped marking promotions in 2020-21.
    """
    if division is top_division(season):
        return False
    if season >= NO_LOWER_PROMOTION_SEASON and division in (
        Division.BRONZE,
        Division.SILVER,
    ):
        return False
    return True


def egoi_category_recognized(season: Season) -> bool:
    return season >= EGOI_FINALIST_SEASON


def egoi_expected(year: int) -> bool:
    """Whether the history page should list an EGOI team for ``year``."""
    return year >= EGOI_FIRST_YEAR


def seasons(last: Season, first: Season = FIRST_SEASON) -> list[Season]:
    return [Season(y) for y in range(first.end_year, last.end_year + 1)]


def resolve(
    season: Season, division: Division | None, page_kind: PageKind
) -> PageShape:
    """Resolves the expected shape of a page.

    Raises:
        UnsupportedDivisionError: If the division did not exist in the season.
        ValidationError: If a results page is requested without a division.
    """
    if page_kind is PageKind.RESULTS and division is None:
        raise ValidationError(
            "Results pages need a division", field="division", expected="Division"
        )
    if division is not None and not is_division_valid(season, division):
        raise UnsupportedDivisionError(season, division)

    return PageShape(
        page_kind=page_kind,
        season=season,
        division=division,
        contest_count=len(contest_months(season)),
        expected_problem_count=PROBLEMS_PER_CONTEST,
        promotions_expected=(
            division is not None
            and page_kind is PageKind.RESULTS
            and promotions_expected(season, division)
        ),
        platinum_valid=platinum_valid(season),
        egoi_category_recognized=egoi_category_recognized(season),
    )
