import logging
import sys

import click
import structlog

from usaco_standings.config import load_config
from usaco_standings.database import UsacoDatabase, format_query_result
from usaco_standings.exceptions import ConfigurationError, NetworkError
from usaco_standings.html_cache import HtmlCache
from usaco_standings.scraper import Scraper
from usaco_standings.sources.usaco_source import UsacoSource
from usaco_standings.storage import Storage

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Historical USACO standings scraper"""
    configure_logging(verbose)


@cli.command()
@click.option("--config", "config_path", type=click.Path(), help="YAML configuration file")
@click.option("--max-season", help="Last season to scrape (e.g. 2024-25)")
@click.option("--cache-dir", help="Directory for cached pages")
@click.option("--output", default="usaco_data.json", help="Output JSON file")
def scrape(config_path, max_season, cache_dir, output):
    """Scrape every results, finalist and history page."""
    try:
        config = load_config(config_path).with_overrides(
            max_season=max_season, cache_dir=cache_dir
        )
    except ConfigurationError as e:
        raise click.BadParameter(str(e)) from e

    season = config.resolved_max_season()
    logger.info(f"Scraping USACO history up to season {season}")

    source = UsacoSource(
        base_url=config.base_url,
        scraper=Scraper(delay_range=config.delay_range),
        cache=HtmlCache(config.cache_dir) if config.cache_dir else None,
        retries=config.retries,
    )
    try:
        data = source.parse_all(season)
    except NetworkError as e:
        logger.error(f"Scrape aborted: {e}")
        sys.exit(1)

    Storage(output).save(data)
    click.echo(
        f"Saved {len(data.contests)} contests, {len(data.camps)} camps and "
        f"{len(data.history.entries)} IOI/EGOI entries to {output} "
        f"({data.diagnostic_count} diagnostics)"
    )


@cli.command()
@click.argument("name", nargs=-1, required=True)
@click.option("--data", "data_path", default="usaco_data.json", help="Dataset JSON file")
def search(name, data_path):
    """Print the contest, camp and IOI/EGOI history of NAME."""
    data = Storage(data_path).load()
    if data is None:
        raise click.ClickException(f"No dataset found at {data_path}. Run 'scrape' first.")

    result = UsacoDatabase(data).query_name(" ".join(name))
    click.echo(format_query_result(result))


if __name__ == "__main__":
    cli()
