import re

_INT_RE = re.compile(r"^[+-]?\d+$")
_YEAR_RE = re.compile(r"^(19|20)\d{2}$")


def normalize_text(value: str | None) -> str:
    """Collapses whitespace runs (including nbsp) to single spaces and trims.

    Args:
        value: Raw text, possibly None.

    Returns:
        The normalized text, empty for None.
    """
    if not value:
        return ""
    return " ".join(value.split())


def parse_int(value: str | None) -> int | None:
    """Parses an integer printed on a page, tolerating thousands separators.

    Returns:
        The integer, or None if the text is not a whole number.
    """
    text = normalize_text(value).replace(",", "")
    if not _INT_RE.match(text):
        return None
    return int(text)


def is_year(value: str | None) -> bool:
    return bool(_YEAR_RE.match(normalize_text(value)))
