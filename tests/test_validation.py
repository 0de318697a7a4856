"""
Tests for field validation.

Verifies:
- VIN length, alphabet and check digit handling
- Year bounds and age warnings
- Mileage bounds and age-normalised warnings
- Make/model checks
- validate_all only reports the fields it was given
"""

import pytest

from appraisal.constants import (
    DEDUCTION_MILEAGE_HIGH,
    DEDUCTION_MILEAGE_LOW,
    DEDUCTION_MILEAGE_VERY_HIGH,
    DEDUCTION_NAME_DIGITS,
    DEDUCTION_NAME_SHORT,
    DEDUCTION_UNKNOWN_MAKE,
    DEDUCTION_VIN_CHECK_DIGIT,
    DEDUCTION_YEAR_NEXT_MODEL,
    DEDUCTION_YEAR_VERY_OLD,
)
from appraisal.validation import DataValidator, compute_check_digit, has_valid_check_digit
from appraisal.validation.vin import POSITION_WEIGHTS, decode_make, decode_year, transliterate

from conftest import VALID_VIN


@pytest.fixture
def validator(reference_date):
    return DataValidator(reference_date=reference_date)


# =============================================================================
# VIN
# =============================================================================

class TestVinCheckDigit:
    """Tests for the check digit algorithm."""

    def test_known_vin(self):
        assert compute_check_digit(VALID_VIN) == "3"
        assert has_valid_check_digit(VALID_VIN)

    def test_all_ones(self):
        # Weights sum to 89, 89 mod 11 = 1
        assert compute_check_digit("1" * 17) == "1"

    def test_remainder_ten_is_x(self):
        vin = "1M8GDM9AXKP042788"
        assert compute_check_digit(vin) == "X"
        assert has_valid_check_digit(vin)

    def test_single_character_change_breaks_check_digit(self):
        """Changing any weighted position to a different value is detected."""
        for position, weight in enumerate(POSITION_WEIGHTS):
            if weight == 0:
                continue
            original = transliterate(VALID_VIN[position])
            replacement = next(
                c for c in "0123456789" if transliterate(c) != original
            )
            mutated = VALID_VIN[:position] + replacement + VALID_VIN[position + 1:]
            assert not has_valid_check_digit(mutated), f"position {position + 1}"

    def test_decode_prefix_and_year(self):
        assert decode_make(VALID_VIN) == "Honda"
        assert decode_year(VALID_VIN) == 2003
        assert decode_year("5YJ3E1EA7KF000000") == 2019


class TestValidateVin:
    """Tests for VIN validation results."""

    def test_valid_vin(self, validator):
        result = validator.validate_vin(VALID_VIN)
        assert result.is_valid
        assert result.warnings == ()
        assert result.confidence == 100

    def test_lowercase_accepted(self, validator):
        assert validator.validate_vin(VALID_VIN.lower()).confidence == 100

    def test_check_digit_mismatch_is_warning(self, validator):
        result = validator.validate_vin(VALID_VIN[:8] + "4" + VALID_VIN[9:])
        assert result.is_valid
        assert len(result.warnings) == 1
        assert result.confidence == 100 - DEDUCTION_VIN_CHECK_DIGIT

    @pytest.mark.parametrize("vin", ["", "1HGCM8263", VALID_VIN + "9"])
    def test_wrong_length(self, validator, vin):
        result = validator.validate_vin(vin)
        assert not result.is_valid
        assert result.confidence == 0

    def test_ocr_letters_warn_and_fail(self, validator):
        result = validator.validate_vin("1HGCM82633A00435O")
        assert not result.is_valid
        assert result.confidence == 0
        assert any("O" in w for w in result.warnings)

    def test_punctuation_fails(self, validator):
        assert not validator.validate_vin("1HGCM82633A00435-").is_valid

    def test_none(self, validator):
        assert not validator.validate_vin(None).is_valid


# =============================================================================
# Year
# =============================================================================

class TestValidateYear:
    """Tests for year validation (reference year 2025)."""

    def test_current_year(self, validator):
        result = validator.validate_year(2025)
        assert result.is_valid and result.confidence == 100

    def test_next_model_year_warns(self, validator):
        result = validator.validate_year(2026)
        assert result.is_valid
        assert result.confidence == 100 - DEDUCTION_YEAR_NEXT_MODEL

    def test_beyond_next_model_year_fails(self, validator):
        assert not validator.validate_year(2027).is_valid

    def test_very_old_warns(self, validator):
        result = validator.validate_year(1970)
        assert result.is_valid
        assert result.confidence == 100 - DEDUCTION_YEAR_VERY_OLD

    def test_fifty_years_is_not_very_old(self, validator):
        assert validator.validate_year(1975).warnings == ()

    @pytest.mark.parametrize("year", [1899, "abc", None, 2019.5])
    def test_invalid(self, validator, year):
        result = validator.validate_year(year)
        assert not result.is_valid
        assert result.confidence == 0

    def test_string_year(self, validator):
        assert validator.validate_year("2019").is_valid


# =============================================================================
# Mileage
# =============================================================================

class TestValidateMileage:
    """Tests for mileage validation."""

    def test_typical(self, validator):
        result = validator.validate_mileage(60_000, 2020)
        assert result.is_valid and result.confidence == 100

    def test_comma_string(self, validator):
        assert validator.validate_mileage("45,000").is_valid

    @pytest.mark.parametrize("mileage", [-1, "many", None])
    def test_invalid(self, validator, mileage):
        assert not validator.validate_mileage(mileage).is_valid

    def test_absolute_ceiling_fails(self, validator):
        assert not validator.validate_mileage(1_000_000).is_valid

    def test_just_below_ceiling_warns(self, validator):
        result = validator.validate_mileage(999_999)
        assert result.is_valid
        assert result.confidence == 100 - DEDUCTION_MILEAGE_VERY_HIGH

    def test_low_for_age(self, validator):
        result = validator.validate_mileage(500, 2015)
        assert result.is_valid
        assert result.confidence == 100 - DEDUCTION_MILEAGE_LOW

    def test_low_mileage_on_new_car_is_fine(self, validator):
        assert validator.validate_mileage(500, 2024).warnings == ()

    def test_high_and_very_high(self, validator):
        result = validator.validate_mileage(400_000, 2020)
        assert result.is_valid
        assert len(result.warnings) == 2
        assert result.confidence == 100 - DEDUCTION_MILEAGE_HIGH - DEDUCTION_MILEAGE_VERY_HIGH

    def test_zero_mileage_is_valid(self, validator):
        assert validator.validate_mileage(0).is_valid


# =============================================================================
# Make / Model
# =============================================================================

class TestValidateMakeModel:
    """Tests for make and model checks."""

    def test_known_make(self, validator):
        result = validator.validate_make_model("Ford", "Super Duty F-250")
        assert result.is_valid and result.confidence == 100

    def test_known_make_case_insensitive(self, validator):
        assert validator.validate_make_model("land rover", "Defender").confidence == 100

    def test_empty_make_fails(self, validator):
        assert not validator.validate_make_model("", "Accord").is_valid

    def test_empty_model_fails(self, validator):
        assert not validator.validate_make_model("Honda", "  ").is_valid

    def test_short_model_warns(self, validator):
        result = validator.validate_make_model("Honda", "X")
        assert result.confidence == 100 - DEDUCTION_NAME_SHORT

    def test_unknown_make_warns(self, validator):
        result = validator.validate_make_model("Zastava", "Yugo")
        assert result.is_valid
        assert result.confidence == 100 - DEDUCTION_UNKNOWN_MAKE

    def test_warnings_accumulate(self, validator):
        result = validator.validate_make_model("F0rd", "Focus")
        assert result.confidence == 100 - DEDUCTION_NAME_DIGITS - DEDUCTION_UNKNOWN_MAKE

    def test_many_warnings_stay_in_bounds(self, validator):
        result = validator.validate_make_model("4", "Z")
        assert result.is_valid
        assert result.confidence == 100 - 2 * DEDUCTION_NAME_SHORT - DEDUCTION_NAME_DIGITS - DEDUCTION_UNKNOWN_MAKE
        assert 0 <= result.confidence <= 100


# =============================================================================
# validate_all
# =============================================================================

class TestValidateAll:
    """Tests for aggregate validation."""

    def test_only_present_keys(self, validator):
        results = validator.validate_all({"vin": VALID_VIN})
        assert set(results) == {"vin"}

    def test_all_keys(self, validator):
        results = validator.validate_all({
            "vin": VALID_VIN, "year": 2003, "mileage": 120_500,
            "make": "Honda", "model": "Accord",
        })
        assert set(results) == {"vin", "year", "mileage", "make_model"}
        assert all(r.is_valid for r in results.values())

    def test_mileage_uses_year_when_given(self, validator):
        results = validator.validate_all({"mileage": 500, "year": 2015})
        assert results["mileage"].warnings

    def test_make_without_model(self, validator):
        results = validator.validate_all({"make": "Honda"})
        assert results["make_model"].is_valid

    def test_present_but_none_make_fails(self, validator):
        assert not validator.validate_all({"make": None})["make_model"].is_valid

    def test_empty_input(self, validator):
        assert validator.validate_all({}) == {}

    def test_results_are_immutable(self, validator):
        result = validator.validate_year(2020)
        with pytest.raises(AttributeError):
            result.is_valid = False
