import structlog

from usaco_standings import resolver
from usaco_standings.html_cache import HtmlCache
from usaco_standings.models import (
    Camp,
    Contest,
    ContestResults,
    Division,
    IntlHistory,
    PageKind,
    Season,
    UsacoData,
)
from usaco_standings.parsers.finalists_parser import FinalistsParser
from usaco_standings.parsers.history_parser import HistoryParser
from usaco_standings.parsers.results_parser import ResultsParser
from usaco_standings.resolver import PageDescriptor
from usaco_standings.scraper import Scraper

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://usaco.org"


class UsacoSource:
    """Fetches USACO pages and hands them to the parsers.

    Page fetching is the only I/O here. Each page is parsed on its own, so
    its diagnostics stay attached to the record built from it.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        scraper: Scraper | None = None,
        cache: HtmlCache | None = None,
        retries: int = 3,
    ):
        """Initializes the UsacoSource.

        Args:
            base_url: Site root (default: https://usaco.org).
            scraper: An optional shared Scraper instance.
            cache: Optional on-disk page cache.
            retries: Attempts per page before giving up.
        """
        self.base_url = base_url.rstrip("/")
        self.scraper = scraper or Scraper()
        self.cache = cache
        self.retries = retries
        self.results_parser = ResultsParser()
        self.finalists_parser = FinalistsParser()
        self.history_parser = HistoryParser()

    def results_url(self, contest: Contest, division: Division) -> str:
        return f"{self.base_url}/current/data/{contest.page_id(division)}_results.html"

    def finalists_url(self, season: Season) -> str:
        return f"{self.base_url}/index.php?page=finalists{season.short_year}"

    def history_url(self) -> str:
        return f"{self.base_url}/index.php?page=history"

    def _fetch(self, url: str, descriptor: PageDescriptor) -> str | None:
        """Returns the page HTML, or None if the page does not exist."""
        if self.cache:
            cached = self.cache.get(descriptor, url)
            if cached is not None:
                return cached

        response = self.scraper.get(url, retries=self.retries)
        if response is None:
            logger.debug("page_not_found", url=url)
            return None

        html = response.text
        if self.cache:
            self.cache.put(descriptor, url, html)
        return html

    def fetch_contest(self, contest: Contest, division: Division) -> ContestResults | None:
        descriptor = PageDescriptor(
            kind=PageKind.RESULTS,
            season=contest.season,
            division=division,
            contest=contest,
        )
        html = self._fetch(self.results_url(contest, division), descriptor)
        if html is None:
            return None

        parsed = self.results_parser.parse(html, descriptor)
        logger.info(
            "contest_parsed",
            page=descriptor.page_id,
            students=len(parsed.items),
            diagnostics=len(parsed.diagnostics),
        )
        return ContestResults(
            contest=contest,
            division=division,
            students=list(parsed.items),
            diagnostics=list(parsed.diagnostics),
        )

    def fetch_camp(self, season: Season) -> Camp | None:
        descriptor = PageDescriptor(kind=PageKind.FINALISTS, season=season)
        html = self._fetch(self.finalists_url(season), descriptor)
        if html is None:
            return None

        parsed = self.finalists_parser.parse(html, season)
        logger.info(
            "camp_parsed",
            page=descriptor.page_id,
            entries=len(parsed.items),
            diagnostics=len(parsed.diagnostics),
        )
        return Camp(
            season=season,
            entries=list(parsed.items),
            diagnostics=list(parsed.diagnostics),
        )

    def fetch_history(self) -> IntlHistory:
        # a missing history page parses as an empty document
        html = self._fetch(self.history_url(), PageDescriptor(kind=PageKind.HISTORY)) or ""
        parsed = self.history_parser.parse(html)
        logger.info(
            "history_parsed",
            entries=len(parsed.items),
            diagnostics=len(parsed.diagnostics),
        )
        return IntlHistory(entries=list(parsed.items), diagnostics=list(parsed.diagnostics))

    def parse_all(self, max_season: Season) -> UsacoData:
        """Fetches and parses every results, finalist and history page.

        Args:
            max_season: Last season to include, e.g. Season(2025) for 2024-25.

        Returns:
            The dataset, contests sorted by (time, division) and camps by season.

        Raises:
            NetworkError: If a page could not be fetched at all.
        """
        contests: list[ContestResults] = []
        camps: list[Camp] = []

        for season in resolver.seasons(max_season):
            for contest in resolver.contests_for(season):
                for division in resolver.divisions_for(season):
                    result = self.fetch_contest(contest, division)
                    if result:
                        contests.append(result)

            camp = self.fetch_camp(season)
            if camp:
                camps.append(camp)

        history = self.fetch_history()

        contests.sort(key=lambda c: (c.contest, c.division.rank))
        camps.sort(key=lambda c: c.season)

        data = UsacoData(contests=contests, camps=camps, history=history)
        logger.info(
            "scrape_complete",
            contests=len(contests),
            camps=len(camps),
            diagnostics=data.diagnostic_count,
        )
        return data
