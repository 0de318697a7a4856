"""
Tests for report field extraction.

Verifies:
- Report type detection
- Make/model split with multi-word manufacturers
- Monetary fields never borrow a differently labelled value
- Per-field and overall confidence
- Only non-text input raises ExtractionFailure
"""

import pytest

from appraisal.constants import (
    FIELD_CONFIDENCE_FALLBACK,
    FIELD_CONFIDENCE_PRIMARY,
)
from appraisal.errors import ExtractionFailure
from appraisal.extraction import FieldExtractor, ManufacturerTable, parse_amount
from appraisal.models import ExtractionMethod, ReportType


@pytest.fixture
def extractor():
    return FieldExtractor()


def mitchell(vehicle_line: str, extra: str = "") -> str:
    return f"Mitchell WorkCenter Total Loss\nLoss vehicle: {vehicle_line}\n{extra}"


# =============================================================================
# Report Type
# =============================================================================

class TestReportType:
    """Tests for report family detection."""

    def test_ccc_one_detected(self, extractor, ccc_report):
        assert extractor.extract(ccc_report).report_type == ReportType.CCC_ONE

    def test_mixed_case_ccc_marker(self, extractor):
        assert extractor.detect_report_type("Prepared with CCC One\nVIN ...") == ReportType.CCC_ONE

    def test_mitchell_detected(self, extractor, mitchell_report):
        assert extractor.extract(mitchell_report).report_type == ReportType.MITCHELL

    def test_unknown_report_is_other(self, extractor):
        record = extractor.extract("Vehicle appraisal\nModel Year: 2018\nMileage: 30,000")
        assert record.report_type == ReportType.OTHER
        assert record.year == 2018
        assert record.mileage == 30_000


# =============================================================================
# Make / Model Split
# =============================================================================

class TestMakeModelSplit:
    """Tests for manufacturer prefix matching."""

    def test_land_rover_range_rover(self, extractor):
        record = extractor.extract(mitchell("2019 Land Rover Range Rover Sport | 4 Door Utility"))
        assert record.year == 2019
        assert record.make == "Land Rover"
        assert record.model == "Range Rover Sport"

    def test_ford_super_duty(self, extractor):
        record = extractor.extract(mitchell("2020 Ford Super Duty F-250 | Crew Cab"))
        assert record.make == "Ford"
        assert record.model == "Super Duty F-250"

    def test_make_is_canonically_cased(self, extractor):
        record = extractor.extract(mitchell("2021 bmw X5 xDrive40i | 4 Door"))
        assert record.make == "BMW"
        assert record.model == "X5 xDrive40i"

    def test_hyphenated_make_preferred_over_shorter_prefix(self, extractor):
        record = extractor.extract(mitchell("2018 Mercedes-Benz C300 | Sedan"))
        assert record.make == "Mercedes-Benz"
        assert record.model == "C300"

    def test_unknown_manufacturer_falls_back_to_first_token(self, extractor):
        record = extractor.extract(mitchell("2018 Zastava Yugo GV | 2 Door"))
        assert record.make == "Zastava"
        assert record.model == "Yugo GV"
        assert record.field_confidence["make"] == FIELD_CONFIDENCE_FALLBACK
        assert any("Unrecognised manufacturer" in w for w in record.warnings)

    def test_injected_table_limits_matches(self):
        extractor = FieldExtractor(manufacturers=ManufacturerTable(["Land"]))
        record = extractor.extract(mitchell("2019 Land Rover Defender | 2 Door"))
        assert record.make == "Land"
        assert record.model == "Rover Defender"


class TestManufacturerTable:
    """Tests for the manufacturer reference table."""

    def test_sorted_longest_first(self):
        table = ManufacturerTable(["Ram", "Land Rover", "Range Rover", "Land"])
        assert table.names[0] == "Range Rover"
        assert table.names.index("Land Rover") < table.names.index("Land")

    def test_match_is_case_insensitive(self):
        assert ManufacturerTable().match("land rover discovery") == "Land Rover"

    def test_match_requires_whole_word(self):
        assert ManufacturerTable(["Mini"]).match("Minivan Express") is None

    def test_split_with_no_model(self):
        assert ManufacturerTable().split("Tesla") == ("Tesla", None, True)

    def test_table_is_immutable(self):
        table = ManufacturerTable(["Ford"])
        with pytest.raises(AttributeError):
            table.names.append("Kia")


# =============================================================================
# Monetary Fields
# =============================================================================

class TestMonetaryFields:
    """Tests for label-exact money extraction."""

    def test_market_value_not_confused_with_base_value(self, extractor, mitchell_report):
        record = extractor.extract(mitchell_report)
        assert record.market_value == 10062.32
        assert record.settlement_value == 10512.55

    def test_base_value_never_used_as_market_value(self, extractor):
        text = mitchell("2019 Honda Civic | 4 Door", "Base Value = $10,066.64\n")
        record = extractor.extract(text)
        assert record.market_value is None
        assert "Market value not found in report" in record.warnings

    def test_market_value_colon_form(self, extractor):
        text = mitchell("2019 Honda Civic | 4 Door", "Market Value: $12,400.00\n")
        assert extractor.extract(text).market_value == 12400.00

    def test_ccc_values(self, extractor, ccc_report):
        record = extractor.extract(ccc_report)
        assert record.market_value == 5350.00
        assert record.settlement_value == 5712.45

    def test_ocr_missing_decimal_recovered(self, extractor):
        text = mitchell("2019 Honda Civic | 4 Door", "Market Value = $978221\n")
        assert extractor.extract(text).market_value == 9782.21

    def test_parse_amount(self):
        assert parse_amount("10,062.32") == 10062.32
        assert parse_amount("5,712 . 45") == 5712.45
        assert parse_amount("9500") == 9500.0


# =============================================================================
# Identity, Mileage, Location
# =============================================================================

class TestVehicleFields:
    """Tests for VIN, mileage and location extraction."""

    def test_mitchell_fields(self, extractor, mitchell_report):
        record = extractor.extract(mitchell_report)
        assert record.vin == "SALWR2RV5KA123456"
        assert record.mileage == 45_000
        assert record.location == "CA 90210"

    def test_ccc_fields(self, extractor, ccc_report):
        record = extractor.extract(ccc_report)
        assert record.vin == "1HGCM82633A004352"
        assert (record.year, record.make, record.model) == (2003, "Honda", "Accord")
        assert record.mileage == 120_500
        assert record.location == "DALLAS, TX 75201"

    def test_vin_near_ext_color(self, extractor):
        text = mitchell("2003 Honda Accord | 4 Door", "Ext Color: Silver\n1HGCM82633A004352\n")
        assert extractor.extract(text).vin == "1HGCM82633A004352"

    def test_ocr_corrupted_vin_is_corrected(self, extractor):
        text = "Vehicle details\n1HGCM82633AOO4352\n"
        record = extractor.extract(text)
        assert record.vin == "1HGCM82633A004352"
        assert record.field_confidence["vin"] == FIELD_CONFIDENCE_FALLBACK
        assert any("OCR" in w for w in record.warnings)

    def test_year_and_make_decoded_from_vin(self, extractor):
        record = extractor.extract("Claim summary\nVIN: 1HGCM82633A004352\n")
        assert record.year == 2003
        assert record.make == "Honda"
        assert record.field_confidence["year"] == FIELD_CONFIDENCE_FALLBACK


# =============================================================================
# Confidence and Failure
# =============================================================================

class TestConfidence:
    """Tests for the confidence model."""

    def test_overall_is_mean_of_populated_fields(self, extractor):
        record = extractor.extract(mitchell("2018 Zastava Yugo GV | 2 Door", "30,000 miles\n"))
        values = record.field_confidence.values()
        assert record.extraction_confidence == pytest.approx(sum(values) / len(values), abs=1e-4)

    def test_clean_report_is_primary_confidence(self, extractor, mitchell_report):
        record = extractor.extract(mitchell_report)
        assert record.extraction_confidence == pytest.approx(FIELD_CONFIDENCE_PRIMARY)
        assert record.errors == []

    def test_absent_fields_are_omitted(self, extractor):
        record = extractor.extract(mitchell("2019 Honda Civic | 4 Door"))
        assert "mileage" not in record.field_confidence
        assert "vin" not in record.field_confidence
        assert "Could not find vin in report" in record.errors

    def test_method_is_recorded(self, extractor, mitchell_report):
        assert extractor.extract(mitchell_report, "ocr").extraction_method == ExtractionMethod.OCR
        assert extractor.extract(mitchell_report).extraction_method == ExtractionMethod.STANDARD

    def test_unknown_method_rejected(self, extractor, mitchell_report):
        with pytest.raises(ValueError, match="scan"):
            extractor.extract(mitchell_report, "scan")

    def test_low_quality_text_does_not_raise(self, extractor):
        record = extractor.extract("scanned page, nothing legible here")
        assert record.extraction_confidence == 0.0
        assert len(record.errors) == 4

    def test_deterministic(self, extractor, mitchell_report):
        assert extractor.extract(mitchell_report).to_dict() == extractor.extract(mitchell_report).to_dict()


class TestExtractionFailure:
    """Tests for input that is not report text."""

    @pytest.mark.parametrize("text", ["", "   \n\t  "])
    def test_empty_input(self, extractor, text):
        with pytest.raises(ExtractionFailure) as excinfo:
            extractor.extract(text)
        assert excinfo.value.code == "EXTRACTION_FAILURE"

    def test_binary_input(self, extractor):
        with pytest.raises(ExtractionFailure):
            extractor.extract("%PDF\x00\x01\x02\x03binary")

    def test_undecodable_bytes(self, extractor):
        with pytest.raises(ExtractionFailure):
            extractor.extract(b"\xff\xfe\xfa\x00")

    def test_no_letters(self, extractor):
        with pytest.raises(ExtractionFailure):
            extractor.extract("12345 67890 ---")

    def test_utf8_bytes_accepted(self, extractor, mitchell_report):
        assert extractor.extract(mitchell_report.encode("utf-8")).make == "Land Rover"
