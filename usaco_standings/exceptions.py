"""Custom exception hierarchy for the USACO standings scraper.

Page content never raises: parsers turn anomalies into diagnostics. These
exceptions cover the edges of the system instead: fetch failures, invalid
season/division requests and bad configuration.
"""

from typing import Any


class ScraperError(Exception):
    """Base exception for all scraper errors.

    Attributes:
        message: Human-readable error message.
        error_data: Structured error information.
        suggestion: Hint for how to resolve the error.
    """

    def __init__(
        self,
        message: str,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_data = error_data or {}
        self.suggestion = suggestion

    def __str__(self) -> str:
        """Return formatted error message with suggestion if available."""
        base = self.message
        if self.suggestion:
            return f"{base}\nSuggestion: {self.suggestion}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to structured dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_data": self.error_data,
            "suggestion": self.suggestion,
        }


class NetworkError(ScraperError):
    """A page could not be fetched, even after retrying."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(
            message,
            {"url": url, "status_code": status_code},
            "Check network connectivity and retry. usaco.org may be temporarily unavailable.",
        )
        self.url = url
        self.status_code = status_code


class ValidationError(ScraperError):
    """A season, division or page request that USACO never had.

    Examples:
        - Season text such as "2013-15"
        - A results page requested without a division
    """

    def __init__(
        self,
        message: str,
        field: str,
        expected: str | None = None,
        received: Any = None,
        suggestion: str | None = None,
    ):
        if suggestion is None and expected:
            suggestion = f"Give {field} as {expected}."
        super().__init__(
            message,
            {"field": field, "expected": expected, "received": received},
            suggestion,
        )
        self.field = field
        self.expected = expected
        self.received = received


class UnsupportedDivisionError(ValidationError):
    """The division was not part of USACO in the given season."""

    def __init__(self, season: Any, division: Any):
        super().__init__(
            f"Division {division} did not exist in season {season}",
            field="division",
            received=str(division),
            suggestion="Platinum was introduced in the 2015-16 season.",
        )
        self.error_data["season"] = str(season)
        self.season = season
        self.division = division


class ConfigurationError(ScraperError):
    """A bad value in the YAML configuration or on the command line."""

    def __init__(
        self,
        message: str,
        parameter: str,
        expected_format: str | None = None,
        example: str | None = None,
        suggestion: str | None = None,
    ):
        if suggestion is None and expected_format:
            suggestion = f"'{parameter}' takes {expected_format}, e.g. {example}."
        super().__init__(message, {"parameter": parameter}, suggestion)
        self.parameter = parameter
