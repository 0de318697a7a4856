"""
Configuration management.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("APPRAISAL_LOG_LEVEL", "INFO").upper())

    # Output
    output_dir: str = field(default_factory=lambda: os.getenv("APPRAISAL_OUTPUT_DIR", "output"))

    # Valuation
    reference_year: Optional[int] = field(
        default_factory=lambda: _optional_int("APPRAISAL_REFERENCE_YEAR")
    )
    max_comp_distance: float = field(
        default_factory=lambda: float(os.getenv("APPRAISAL_MAX_COMP_DISTANCE", "150"))
    )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def reference_date(self) -> date:
        """Date used for age-dependent rules; pinned when reference_year is set."""
        today = date.today()
        if self.reference_year is None:
            return today
        return date(self.reference_year, today.month, min(today.day, 28))

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "log_level": self.log_level,
            "output_dir": self.output_dir,
            "reference_year": self.reference_year,
            "max_comp_distance": self.max_comp_distance,
        }


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
