"""
Tests for environment-driven configuration.
"""

from datetime import date

from utils.config import Config
from utils.formatting import format_currency, format_miles, format_percent


class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("APPRAISAL_LOG_LEVEL", "APPRAISAL_OUTPUT_DIR",
                     "APPRAISAL_REFERENCE_YEAR", "APPRAISAL_MAX_COMP_DISTANCE"):
            monkeypatch.delenv(name, raising=False)
        config = Config.load()
        assert config.log_level == "INFO"
        assert config.output_dir == "output"
        assert config.reference_year is None
        assert config.max_comp_distance == 150.0
        assert config.reference_date == date.today()

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("APPRAISAL_LOG_LEVEL", "debug")
        monkeypatch.setenv("APPRAISAL_OUTPUT_DIR", "/tmp/reports")
        monkeypatch.setenv("APPRAISAL_REFERENCE_YEAR", "2024")
        monkeypatch.setenv("APPRAISAL_MAX_COMP_DISTANCE", "75")
        config = Config.load()
        assert config.log_level == "DEBUG"
        assert config.reference_date.year == 2024
        assert config.to_dict() == {
            "log_level": "DEBUG",
            "output_dir": "/tmp/reports",
            "reference_year": 2024,
            "max_comp_distance": 75.0,
        }


class TestFormatting:

    def test_currency(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(-50) == "-$50.00"
        assert format_currency(None) == "N/A"
        assert format_currency(1234.5, cents=False) == "$1,234"
        assert format_currency(5, currency="GBP") == "GBP 5.00"

    def test_percent(self):
        assert format_percent(12.345) == "12.3%"
        assert format_percent(5, signed=True) == "+5.0%"

    def test_miles(self):
        assert format_miles(45000) == "45,000 mi"
