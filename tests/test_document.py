"""Tests for the HTML document adapter."""

import pytest

from usaco_standings.document import Document


TABLE = """
<table class="results">
  <tr><th>Name</th><th colspan="3">Scores</th><th colspan="x">Total</th></tr>
  <tr class="promoted row"><td>Alice&nbsp;&nbsp;Smith</td><td>1</td><td>2</td><td>3</td><td>6</td></tr>
</table>
"""


@pytest.mark.parametrize("html", [None, "", b""])
def test_empty_input_gives_empty_document(html) -> None:
    doc = Document(html)

    assert doc.is_empty
    assert doc.tables() == []
    assert doc.select_one("table") is None
    assert doc.select("tr") == []


def test_truncated_html_is_repaired() -> None:
    doc = Document("<table><tr><td>Alice<td>42")

    rows = doc.tables()[0].rows()

    assert [c.text for c in rows[0].cells()] == ["Alice", "42"]


def test_rows_and_cells() -> None:
    table = Document(TABLE).tables()[0]
    header, row = table.rows()

    assert header.is_header_row
    assert not row.is_header_row
    assert [c.colspan for c in header.cells()] == [1, 3, 1]
    assert row.cell(0).text == "Alice Smith"
    assert row.cell(9) is None
    assert row.classes == ["promoted", "row"]
    assert table.attr("class") == "results"
    assert table.attr("id") is None
    assert row.cell(1).has_ancestor("table")


def test_text_runs_pair_text_with_preceding_element() -> None:
    doc = Document(
        '<div id="p"><h3>2024</h3><img src="medal_gold.png"> Alice<br>'
        "<!-- note --> Bob</div>"
    )

    runs = [r for r in doc.select_one("#p").text_runs() if r.text.strip()]

    assert [r.text.strip() for r in runs] == ["Alice", "Bob"]
    assert runs[0].preceding.name == "img"
    assert runs[0].preceding.attr("src") == "medal_gold.png"
    assert runs[1].preceding is None


def test_nodes_compare_by_element() -> None:
    doc = Document(TABLE)

    assert doc.select_one("table") == doc.tables()[0]
    assert len({doc.select_one("table"), doc.tables()[0]}) == 1
