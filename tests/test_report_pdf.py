"""
Tests for the valuation report PDF.
"""

import pytest

from appraisal import AppraisalPipeline
from appraisal.models import ComparableVehicle, Condition
from reporting import ReportNoComparables, ReportSuccess, ValuationReportGenerator


@pytest.fixture
def appraisal(reference_date, ccc_report):
    pipeline = AppraisalPipeline(reference_date=reference_date)
    record, _ = pipeline.process_report(ccc_report)
    record.equipment = ["Sunroof", "Leather Seats"]
    comps = [
        ComparableVehicle(
            id="fw", source="AutoTrader", year=2003, make="Honda", model="Accord",
            mileage=118_000, location="Fort Worth, TX", list_price=5_600.0,
            equipment=["Sunroof"], condition=Condition.FAIR,
        ),
        ComparableVehicle(
            id="sa", source="Other", year=2002, make="Honda", model="Accord",
            mileage=140_000, location="San Antonio, TX", list_price=4_900.0,
        ),
    ]
    return pipeline.appraise(record, comps)


@pytest.fixture
def generator():
    return ValuationReportGenerator()


class TestValuationReport:

    def test_generates_pdf_bytes(self, generator, appraisal):
        pdf = generator.generate_to_buffer(appraisal)
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_writes_file(self, generator, appraisal, tmp_path):
        result = generator.generate_report(appraisal, tmp_path / "out" / "valuation.pdf")
        assert isinstance(result, ReportSuccess)
        assert result.comparables_included == 2
        assert result.path.read_bytes().startswith(b"%PDF")

    def test_no_comparables(self, generator, appraisal, tmp_path):
        appraisal.comparables = []
        result = generator.generate_report(appraisal, tmp_path / "valuation.pdf")
        assert isinstance(result, ReportNoComparables)
        assert not (tmp_path / "valuation.pdf").exists()

    def test_without_insurer_value(self, generator, appraisal):
        appraisal.analysis.insurance_value = None
        assert generator.generate_to_buffer(appraisal).startswith(b"%PDF")

    def test_markup_characters_are_escaped(self, generator, appraisal):
        appraisal.loss_vehicle.make = "Mahindra & Mahindra <X>"
        assert generator.generate_to_buffer(appraisal).startswith(b"%PDF")
