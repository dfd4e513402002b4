import logging
import random
import time

import cloudscraper
from requests import Response
from requests.exceptions import RequestException

from usaco_standings.exceptions import NetworkError

logger = logging.getLogger(__name__)


class Scraper:
    def __init__(self, delay_range=(1.0, 3.0), timeout=30.0):
        """
        Initialize the Scraper with a cloudscraper session.

        :param delay_range: Tuple (min, max) seconds to sleep between requests.
        :param timeout: Per-request timeout in seconds.
        """
        self.scraper = cloudscraper.create_scraper()
        self.delay_range = delay_range
        self.timeout = timeout
        self.last_request_time = 0.0

    def _wait_for_rate_limit(self):
        """Sleeps for a random amount of time to respect rate limits."""
        elapsed = time.time() - self.last_request_time
        wait_time = random.uniform(*self.delay_range)
        if elapsed < wait_time:
            sleep_time = wait_time - elapsed
            logger.debug(f"Rate limiting: sleeping for {sleep_time:.2f}s")
            time.sleep(sleep_time)
        self.last_request_time = time.time()

    def get(self, url: str, retries: int = 3) -> Response | None:
        """
        Perform a GET request with rate limiting and retries.

        :param url: Target URL.
        :param retries: Number of attempts before giving up.
        :return: Response object, or None if the page does not exist (404).
        :raises NetworkError: If every attempt failed.
        """
        self._wait_for_rate_limit()

        status_code = None
        for attempt in range(retries):
            try:
                if attempt > 0:
                    logger.info(f"Fetching URL: {url} (Attempt {attempt + 1}/{retries})")
                else:
                    logger.info(f"Fetching URL: {url}")

                response = self.scraper.get(url, timeout=self.timeout)
                if response.status_code == 404:
                    logger.debug(f"{url} NOT FOUND")
                    return None
                status_code = response.status_code
                response.raise_for_status()
                return response
            except RequestException as e:
                logger.warning(f"Request failed: {e}")
                if attempt < retries - 1:
                    time.sleep(2**attempt)  # Exponential backoff

        logger.error(f"Failed to fetch {url} after {retries} attempts.")
        raise NetworkError(
            f"Failed to fetch {url} after {retries} attempts",
            url=url,
            status_code=status_code,
        )
