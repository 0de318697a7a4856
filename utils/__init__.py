"""
Utility modules for the appraisal tools.
"""

from .formatting import format_currency, format_percent, format_miles
from .config import Config, configure_logging

__all__ = ["format_currency", "format_percent", "format_miles", "Config", "configure_logging"]
