"""USACO Standings - historical USACO results scraper.

This package parses USACO contest result pages, finalist announcements and
the IOI/EGOI history page into typed records, reporting everything it could
not interpret as diagnostics instead of failing.
"""

__version__ = "0.1.0"
