"""Parsing, reconciliation, aggregation and commit services."""
