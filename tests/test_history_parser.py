"""Tests for the IOI/EGOI history page parser."""

import pytest

from usaco_standings.diagnostics import DiagnosticKind
from usaco_standings.models import Competition, HistoryEntry, Medal
from usaco_standings.parsers.history_parser import HistoryParser, parse_history_page


def _page(*sections: str) -> str:
    return '<html><body><div class="content">' + "".join(sections) + "</div></body></html>"


def _section(heading: str, *panels: str) -> str:
    return f"<div><h2>{heading}</h2>{''.join(panels)}</div>"


def _panel(title: str, body: str) -> str:
    return f'<div class="panel historypanel"><h3>{title}</h3>{body}</div>'


@pytest.fixture
def parser() -> HistoryParser:
    return HistoryParser()


def test_parse_history_page(parser: HistoryParser, history_html: str) -> None:
    result = parser.parse(history_html)

    assert result.diagnostics == ()

    ioi = [e for e in result.items if e.competition is Competition.IOI]
    assert [(e.year, e.name, e.medal) for e in ioi] == [
        (2017, "Alice Smith", Medal.GOLD),
        (2017, "Bob Jones", Medal.SILVER),
        (2017, "Carol White", Medal.VISA_ISSUE),
        (2021, "Wei Zhang", Medal.GOLD),
        (2024, "Rain Jiang", Medal.GOLD),
        (2024, "Dana Lee", Medal.BRONZE),
        (2024, "Erin Park", Medal.NO_MEDAL),
    ]

    egoi = [e for e in result.items if e.competition is Competition.EGOI]
    assert [(e.year, e.name, e.medal) for e in egoi] == [
        (2021, "Fiona Chen", Medal.SILVER),
        (2024, "Erin Park", Medal.GOLD),
        (2024, "Gina Lopez", Medal.BRONZE),
    ]


def test_placement_note_is_kept_as_detail(parser: HistoryParser, history_html: str) -> None:
    rain = next(e for e in parser.parse(history_html).items if e.name == "Rain Jiang")

    assert rain.detail == "5th place"
    assert rain.season.end_year == 2024


def test_egoi_absence_before_2021_is_expected(parser: HistoryParser) -> None:
    html = _page(
        _section(
            "US Team Results at IOI",
            _panel("2019 IOI", '<img src="current/images/medal_gold.png"> Alice Smith<br>'),
        )
    )

    result = parser.parse(html)

    assert len(result.items) == 1
    assert result.diagnostics == ()


def test_egoi_absence_from_2021_is_diagnosed(parser: HistoryParser) -> None:
    html = _page(
        _section(
            "US Team Results at IOI",
            _panel("2022 IOI", '<img src="current/images/medal_gold.png"> Alice Smith<br>'),
        )
    )

    result = parser.parse(html)

    assert [(d.kind, d.column) for d in result.diagnostics] == [
        (DiagnosticKind.STRUCTURAL_ABSENCE, "EGOI")
    ]


def test_partial_contestants_are_kept(parser: HistoryParser) -> None:
    body = (
        '<img src="current/images/medal_gold.png"> Alice Smith<br>'
        '<img src="current/images/medal_platinum.png"> Bob Jones<br>'
        "Carol White<br>"
    )
    html = _page(_section("IOI", _panel("2018 IOI", body)))

    result = parser.parse(html)

    assert [(e.name, e.medal) for e in result.items] == [
        ("Alice Smith", Medal.GOLD),
        ("Bob Jones", None),
        ("Carol White", None),
    ]
    assert [(d.kind, d.row, d.column) for d in result.diagnostics] == [
        (DiagnosticKind.UNRECOGNIZED_CONTENT, 2, "IOI 2018"),
        (DiagnosticKind.STRUCTURAL_ABSENCE, 3, "IOI 2018"),
    ]


def test_unreadable_year_panel_is_skipped(parser: HistoryParser) -> None:
    html = _page(
        _section(
            "IOI",
            _panel("Upcoming", '<img src="current/images/medal_gold.png"> Alice Smith<br>'),
            _panel("2016 IOI", '<img src="current/images/medal_gold.png"> Bob Jones<br>'),
        )
    )

    result = parser.parse(html)

    assert [e.name for e in result.items] == ["Bob Jones"]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].row == 1
    assert result.diagnostics[0].kind is DiagnosticKind.UNRECOGNIZED_CONTENT


def test_section_naming_both_competitions_is_skipped(parser: HistoryParser) -> None:
    html = _page(
        _section(
            "IOI and EGOI",
            _panel("2016 IOI", '<img src="current/images/medal_gold.png"> Bob Jones<br>'),
        )
    )

    result = parser.parse(html)

    assert result.items == ()
    assert len(result.diagnostics) == 2  # ambiguous heading, then no IOI section


def test_entries_sorted_by_year_keeping_listed_order(parser: HistoryParser) -> None:
    html = _page(
        _section(
            "IOI",
            _panel("2020 IOI", '<img src="medal_gold.png"> Zed<br><img src="medal_gold.png"> Amy<br>'),
            _panel("2015 IOI", '<img src="medal_bronze.png"> Yan<br>'),
        )
    )

    result = parser.parse(html)

    assert [e.name for e in result.items] == ["Yan", "Zed", "Amy"]


def test_empty_page(parser: HistoryParser) -> None:
    result = parser.parse("")

    assert result.items == ()
    assert [d.column for d in result.diagnostics] == ["IOI"]


def test_parsing_is_idempotent(history_html: str) -> None:
    assert parse_history_page(history_html) == parse_history_page(history_html)


def test_history_entry_roundtrip() -> None:
    entry = HistoryEntry(
        year=2024,
        competition=Competition.IOI,
        name="Rain Jiang",
        medal=Medal.GOLD,
        detail="5th place",
    )

    assert HistoryEntry.from_dict(entry.to_dict()) == entry
