import hashlib
from pathlib import Path

import structlog

from usaco_standings.resolver import PageDescriptor

logger = structlog.get_logger(__name__)


class HtmlCache:
    """On-disk copies of fetched USACO pages, one file per page.

    A page lives under the directory of its season (e.g. ``2016-17/``), or
    of its page kind for pages that span all seasons (``history/``). The
    file is named after the page id plus a short hash of the URL, so pages
    fetched from a different base URL never collide:
    ``cache/2016-17/open17_gold_results_1a2b3c4d.html``.
    """

    def __init__(self, base_dir: str = "cache") -> None:
        self.base_dir = Path(base_dir)

    @staticmethod
    def partition(descriptor: PageDescriptor) -> str:
        if descriptor.season is not None:
            return str(descriptor.season)
        if descriptor.contest is not None:
            return str(descriptor.contest.season)
        return descriptor.kind.value

    def cache_path(self, descriptor: PageDescriptor, url: str) -> Path:
        url_hash = hashlib.md5(url.encode("utf-8")).hexdigest()[:8]
        return self.base_dir / self.partition(descriptor) / f"{descriptor.page_id}_{url_hash}.html"

    def get(self, descriptor: PageDescriptor, url: str) -> str | None:
        """Returns the cached page, or None on a miss or an unreadable file."""
        path = self.cache_path(descriptor, url)
        try:
            html = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("cache_read_failed", page=descriptor.page_id, path=str(path), error=str(e))
            return None

        logger.debug("cache_hit", page=descriptor.page_id, path=str(path))
        return html

    def put(self, descriptor: PageDescriptor, url: str, html: str) -> None:
        """Stores a page. Write failures are logged and otherwise ignored."""
        path = self.cache_path(descriptor, url)
        # write beside the target first so a crash never leaves half a page
        partial = path.with_suffix(".part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            partial.write_text(html, encoding="utf-8")
            partial.replace(path)
        except OSError as e:
            logger.warning("cache_write_failed", page=descriptor.page_id, path=str(path), error=str(e))
            return
        logger.debug("cache_stored", page=descriptor.page_id, path=str(path), size=len(html))
