import pytest

from usaco_standings.utils.country import get_country_name


@pytest.mark.parametrize(
    "code,expected",
    [
        ("USA", "United States"),
        ("CAN", "Canada"),
        ("chn", "China"),
        ("TWN", "Taiwan"),
        ("XYZ", "XYZ"),
        ("", ""),
    ],
)
def test_get_country_name(code: str, expected: str) -> None:
    assert get_country_name(code) == expected
