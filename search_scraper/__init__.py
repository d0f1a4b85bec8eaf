"""
Falabella search-result scraper.

Renders search pages with Playwright, picks out product blocks with
heuristics that survive inconsistent markup, and assembles clean product
(or category-page) records.
"""

__version__ = "0.1.0"
