"""Spreadsheet import / reconciliation engine for products and production reports.

Pipeline: header normalizer -> row parser -> reconciler -> aggregator
(ImportResult preview) -> batch committer.
"""

__version__ = "0.1.0"
