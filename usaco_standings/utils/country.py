import logging
from functools import lru_cache

import pycountry

logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def get_country_name(code: str) -> str:
    """
    Resolve a 3-letter country code, as printed on results pages, to a name.

    Args:
        code: ISO 3166-1 alpha-3 code (e.g. "USA", "CHN").

    Returns:
        The country's common name (e.g. "China"), or the code itself if
        pycountry does not know it.
    """
    if not code:
        return ""

    country = pycountry.countries.get(alpha_3=code.strip().upper())
    if country is None:
        logger.debug(f"Unknown country code '{code}'")
        return code
    return str(getattr(country, "common_name", None) or country.name)
