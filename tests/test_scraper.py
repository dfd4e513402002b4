"""Tests for Scraper retry logic and error handling."""

from unittest.mock import MagicMock, patch

import pytest
from requests.exceptions import ConnectionError, HTTPError

from usaco_standings.exceptions import NetworkError
from usaco_standings.scraper import Scraper


@pytest.fixture()
def scraper() -> Scraper:
    """Create a Scraper instance with zero delay for fast tests."""
    return Scraper(delay_range=(0, 0))


def _response(status_code: int, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = HTTPError(f"{status_code} Error")
    return response


@patch("usaco_standings.scraper.time.sleep")
def test_retry_on_503(mock_sleep: MagicMock, scraper: Scraper) -> None:
    """The scraper retries on 503 errors."""
    with patch.object(scraper.scraper, "get") as mock_get:
        mock_get.side_effect = [_response(503), _response(200, "Success")]

        resp = scraper.get("https://usaco.org/index.php?page=history", retries=2)

    assert resp is not None
    assert resp.text == "Success"
    assert mock_get.call_count == 2
    mock_sleep.assert_called_once_with(1)


@patch("usaco_standings.scraper.time.sleep")
def test_no_retry_on_404(mock_sleep: MagicMock, scraper: Scraper) -> None:
    """A missing page is reported as None without retrying."""
    with patch.object(scraper.scraper, "get") as mock_get:
        mock_get.return_value = _response(404)

        resp = scraper.get("https://usaco.org/current/data/open11_gold_results.html")

    assert resp is None
    assert mock_get.call_count == 1


@patch("usaco_standings.scraper.time.sleep")
def test_network_error_after_retries(mock_sleep: MagicMock, scraper: Scraper) -> None:
    """Exhausted retries raise NetworkError carrying the URL."""
    url = "https://usaco.org/index.php?page=finalists24"
    with patch.object(scraper.scraper, "get") as mock_get:
        mock_get.side_effect = ConnectionError("Connection refused")

        with pytest.raises(NetworkError) as exc_info:
            scraper.get(url, retries=3)

    assert mock_get.call_count == 3
    assert exc_info.value.url == url
    assert exc_info.value.status_code is None
    assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]


@patch("usaco_standings.scraper.time.sleep")
def test_server_error_status_is_kept(mock_sleep: MagicMock, scraper: Scraper) -> None:
    with patch.object(scraper.scraper, "get") as mock_get:
        mock_get.return_value = _response(500)

        with pytest.raises(NetworkError) as exc_info:
            scraper.get("https://usaco.org/", retries=2)

    assert exc_info.value.status_code == 500
    assert exc_info.value.to_dict()["error_type"] == "NetworkError"
