"""
Report text extraction.

Usage:
    from appraisal.extraction import FieldExtractor

    record = FieldExtractor().extract(report_text)
"""

from .extractor import FieldExtractor, parse_amount
from .manufacturers import DEFAULT_MANUFACTURERS, ManufacturerTable

__all__ = ["FieldExtractor", "ManufacturerTable", "DEFAULT_MANUFACTURERS", "parse_amount"]
