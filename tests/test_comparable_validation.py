"""
Tests for comparable sanity checks (reference year 2025).
"""

import pytest

from appraisal.models import ComparableVehicle
from appraisal.validation import ComparableValidator, IssueCode


@pytest.fixture
def validator(reference_date):
    return ComparableValidator(reference_date=reference_date)


def codes(issues):
    return [issue.code for issue in issues]


# =============================================================================
# Single Comparable
# =============================================================================

class TestFieldChecks:

    def test_clean_comparable(self, validator, create_comp):
        result = validator.validate(create_comp())
        assert result.is_valid
        assert result.warnings == []

    def test_missing_required_fields(self, validator, create_comp):
        result = validator.validate(create_comp(source="", make=None, location="  "))
        assert not result.is_valid
        assert {e.field for e in result.errors} == {"source", "make", "location"}

    @pytest.mark.parametrize("year", [1985, 2028])
    def test_year_out_of_range(self, validator, create_comp, year):
        assert IssueCode.INVALID_YEAR in codes(validator.validate(create_comp(year=year)).errors)

    def test_old_year_warns(self, validator, create_comp):
        result = validator.validate(create_comp(year=1998, mileage=150_000))
        assert result.is_valid
        assert IssueCode.OLD_VEHICLE in codes(result.warnings)

    def test_mileage_out_of_range(self, validator, create_comp):
        assert not validator.validate(create_comp(mileage=600_000)).is_valid

    def test_high_mileage_for_age(self, validator, create_comp):
        result = validator.validate(create_comp(year=2023, mileage=90_000))
        assert IssueCode.MILEAGE_FOR_AGE in codes(result.warnings)

    def test_low_mileage_for_age(self, validator, create_comp):
        result = validator.validate(create_comp(year=2012, mileage=400))
        assert IssueCode.MILEAGE_FOR_AGE in codes(result.warnings)

    @pytest.mark.parametrize("price,valid", [(100, False), (600_000, False), (1_500, True), (150_000, True)])
    def test_price_bounds(self, validator, create_comp, price, valid):
        result = validator.validate(create_comp(list_price=price))
        assert result.is_valid is valid
        if valid:
            assert IssueCode.UNUSUAL_PRICE in codes(result.warnings)

    def test_missing_price_is_an_error(self, validator, create_comp):
        data = create_comp().to_dict()
        del data["list_price"]
        comp = ComparableVehicle.from_dict(data)
        assert comp.list_price is None
        result = validator.validate(comp)
        assert not result.is_valid
        assert [(e.field, e.code) for e in result.errors] == [("list_price", IssueCode.MISSING_FIELD)]

    @pytest.mark.parametrize("price", [0, -2_500])
    def test_non_positive_price_is_an_error(self, validator, create_comp, price):
        result = validator.validate(create_comp(list_price=price))
        assert [(e.field, e.code) for e in result.errors] == [("list_price", IssueCode.INVALID_PRICE)]

    @pytest.mark.parametrize("location", ["Dallas", "Dallas TX", "75201"])
    def test_bad_location(self, validator, create_comp, location):
        assert IssueCode.INVALID_LOCATION in codes(validator.validate(create_comp(location=location)).errors)

    def test_location_with_zip(self, validator, create_comp):
        assert validator.validate(create_comp(location="Fort Worth, TX 76102")).is_valid

    def test_unknown_source(self, validator, create_comp):
        assert IssueCode.UNKNOWN_SOURCE in codes(validator.validate(create_comp(source="Craigslist")).warnings)

    def test_duplicate_equipment(self, validator, create_comp):
        result = validator.validate(create_comp(equipment=["Sunroof", "sunroof"]))
        assert IssueCode.DUPLICATE_EQUIPMENT in codes(result.warnings)

    @pytest.mark.parametrize("distance,warned", [(120, False), (200, True), (350, True)])
    def test_distance(self, validator, create_comp, distance, warned):
        result = validator.validate(create_comp(distance_from_loss=distance))
        assert (IssueCode.DISTANT in codes(result.warnings)) is warned

    def test_custom_max_distance(self, reference_date, create_comp):
        validator = ComparableValidator(reference_date=reference_date, max_distance=50)
        assert validator.validate(create_comp(distance_from_loss=75)).warnings


# =============================================================================
# Against Loss Vehicle and Set
# =============================================================================

class TestSetChecks:

    def test_similar_comparable(self, validator, create_comp, loss_vehicle):
        assert validator.validate(create_comp(), loss_vehicle).warnings == []

    def test_dissimilar_comparable(self, validator, create_comp, loss_vehicle):
        comp = create_comp(year=2010, model="Civic", mileage=90_000)
        result = validator.validate(comp, loss_vehicle)
        fields = {w.field for w in result.warnings if w.code == IssueCode.DISSIMILAR}
        assert fields == {"year", "model", "mileage"}

    def test_price_outlier(self, validator, create_comp):
        comps = [create_comp(list_price=20_000) for _ in range(5)]
        comps.append(create_comp(list_price=60_000))
        results = validator.validate_many(comps)
        outlier = results[comps[-1].id]
        assert IssueCode.PRICE_OUTLIER in codes(outlier.warnings)
        assert all(IssueCode.PRICE_OUTLIER not in codes(results[c.id].warnings) for c in comps[:-1])

    def test_outlier_needs_three_comparables(self, validator, create_comp):
        comps = [create_comp(list_price=20_000), create_comp(list_price=90_000)]
        results = validator.validate_many(comps)
        assert all(r.warnings == [] for r in results.values())

    def test_summary(self, validator, create_comp):
        comps = [create_comp(), create_comp(year=1980), create_comp(source="Craigslist")]
        summary = ComparableValidator.summarize(validator.validate_many(comps))
        assert summary["total"] == 3
        assert summary["valid"] == 2
        assert summary["invalid"] == 1
        assert summary["with_warnings"] == 1
