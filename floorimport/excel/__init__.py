"""Workbook reading, header normalization and template generation."""
