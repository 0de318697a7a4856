"""
Field validation with confidence scoring.

Each field group gets its own check returning a ValidationResult.
Errors make a field invalid and zero its confidence; warnings leave it
valid but deduct a fixed number of points (see constants). Nothing here
raises for unusual values: very old cars, huge mileages and unknown
makes are reported, not rejected.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..constants import (
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    DEDUCTION_MILEAGE_HIGH,
    DEDUCTION_MILEAGE_LOW,
    DEDUCTION_MILEAGE_VERY_HIGH,
    DEDUCTION_NAME_DIGITS,
    DEDUCTION_NAME_SHORT,
    DEDUCTION_UNKNOWN_MAKE,
    DEDUCTION_VIN_CHECK_DIGIT,
    DEDUCTION_VIN_OCR_CHARACTERS,
    DEDUCTION_YEAR_NEXT_MODEL,
    DEDUCTION_YEAR_VERY_OLD,
    EXPECTED_MILES_PER_YEAR,
    HIGH_MILEAGE_RATIO,
    KNOWN_MAKES,
    LOW_MILEAGE_MIN_AGE,
    LOW_MILEAGE_RATIO,
    MAX_PLAUSIBLE_MILEAGE,
    MIN_NAME_LENGTH,
    MIN_VEHICLE_YEAR,
    VERY_HIGH_MILEAGE,
    VERY_OLD_VEHICLE_YEARS,
    VIN_LENGTH,
)
from ..models import ValidationResult
from .vin import OCR_SUSPECT_CHARACTERS, VIN_ALPHABET_RE, compute_check_digit, CHECK_DIGIT_INDEX


@dataclass
class _Findings:
    """Mutable accumulator turned into a frozen ValidationResult."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    deducted: int = 0

    def warn(self, message: str, points: int) -> None:
        self.warnings.append(message)
        self.deducted += points

    def result(self) -> ValidationResult:
        if self.errors:
            confidence = CONFIDENCE_MIN
        else:
            confidence = max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, CONFIDENCE_MAX - self.deducted))
        return ValidationResult(
            is_valid=not self.errors,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            confidence=confidence,
        )


def _as_int(value: Any) -> Optional[int]:
    """Coerce user or extracted input to int; None if not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if cleaned.lstrip("-").isdigit():
            return int(cleaned)
    return None


class DataValidator:
    """
    Validates loss vehicle fields.

    Usage:
        validator = DataValidator()
        results = validator.validate_all({"vin": vin, "year": 2019})
        if not results["vin"].is_valid:
            ...
    """

    def __init__(self, reference_date: date = None, known_makes: Tuple[str, ...] = KNOWN_MAKES):
        """
        Args:
            reference_date: Date that defines "current year" (default: today)
            known_makes: Reference list for the unknown-make warning
        """
        self._reference_date = reference_date or date.today()
        self._known_makes = frozenset(m.lower() for m in known_makes)

    @property
    def current_year(self) -> int:
        return self._reference_date.year

    # =========================================================================
    # VIN
    # =========================================================================

    def validate_vin(self, vin: Any) -> ValidationResult:
        findings = _Findings()
        vin = (vin or "").strip().upper() if isinstance(vin, str) else ""

        if len(vin) != VIN_LENGTH:
            findings.errors.append(
                f"VIN must be exactly {VIN_LENGTH} characters (got {len(vin)})"
            )
            return findings.result()

        suspects = sorted(set(vin) & OCR_SUSPECT_CHARACTERS)
        if suspects:
            findings.warn(
                f"VIN contains {', '.join(suspects)}, which VINs never use; "
                "likely an OCR misread of 0 or 1",
                DEDUCTION_VIN_OCR_CHARACTERS,
            )
        if not VIN_ALPHABET_RE.match(vin):
            findings.errors.append("VIN contains invalid characters")
            return findings.result()

        expected = compute_check_digit(vin)
        if vin[CHECK_DIGIT_INDEX] != expected:
            findings.warn(
                f"VIN check digit is {vin[CHECK_DIGIT_INDEX]}, expected {expected}; "
                "verify the VIN",
                DEDUCTION_VIN_CHECK_DIGIT,
            )
        return findings.result()

    # =========================================================================
    # Year
    # =========================================================================

    def validate_year(self, year: Any) -> ValidationResult:
        findings = _Findings()
        value = _as_int(year)
        if value is None:
            findings.errors.append("Year must be a number")
            return findings.result()

        latest = self.current_year + 1
        if value < MIN_VEHICLE_YEAR or value > latest:
            findings.errors.append(f"Year must be between {MIN_VEHICLE_YEAR} and {latest}")
            return findings.result()

        if self.current_year - value > VERY_OLD_VEHICLE_YEARS:
            findings.warn(
                f"Vehicle is over {VERY_OLD_VEHICLE_YEARS} years old; verify the year",
                DEDUCTION_YEAR_VERY_OLD,
            )
        if value == latest:
            findings.warn("Future model year; verify the year", DEDUCTION_YEAR_NEXT_MODEL)
        return findings.result()

    # =========================================================================
    # Mileage
    # =========================================================================

    def validate_mileage(self, mileage: Any, year: Any = None) -> ValidationResult:
        """
        Validate an odometer reading, optionally against vehicle age.

        Args:
            mileage: Odometer reading
            year: Model year, enables the age-normalised checks
        """
        findings = _Findings()
        value = _as_int(mileage)
        if value is None:
            findings.errors.append("Mileage must be a whole number")
            return findings.result()
        if value < 0:
            findings.errors.append("Mileage cannot be negative")
            return findings.result()
        if value >= MAX_PLAUSIBLE_MILEAGE:
            findings.errors.append(f"Mileage of {value:,} is not plausible")
            return findings.result()

        model_year = _as_int(year)
        if model_year is not None and model_year <= self.current_year + 1:
            age = max(0, self.current_year - model_year)
            expected = max(age, 1) * EXPECTED_MILES_PER_YEAR
            if age > LOW_MILEAGE_MIN_AGE and value < expected * LOW_MILEAGE_RATIO:
                findings.warn(
                    f"Mileage is unusually low for a {age}-year-old vehicle",
                    DEDUCTION_MILEAGE_LOW,
                )
            elif value > expected * HIGH_MILEAGE_RATIO:
                findings.warn(
                    f"Mileage is unusually high for a {age}-year-old vehicle",
                    DEDUCTION_MILEAGE_HIGH,
                )

        if value > VERY_HIGH_MILEAGE:
            findings.warn(
                f"Very high mileage ({value:,}); verify the odometer reading",
                DEDUCTION_MILEAGE_VERY_HIGH,
            )
        return findings.result()

    # =========================================================================
    # Make / Model
    # =========================================================================

    def validate_make_model(self, make: Any = None, model: Any = None) -> ValidationResult:
        """
        Validate make and/or model.

        Pass None to skip a side; an empty string is checked and fails.
        """
        findings = _Findings()
        if make is not None:
            self._check_name("Make", make, findings)
            make_text = str(make).strip()
            if make_text and make_text.lower() not in self._known_makes:
                findings.warn(
                    f"Make '{make_text}' is not a recognised manufacturer",
                    DEDUCTION_UNKNOWN_MAKE,
                )
        if model is not None:
            self._check_name("Model", model, findings)
        return findings.result()

    @staticmethod
    def _check_name(label: str, value: Any, findings: _Findings) -> None:
        text = str(value).strip()
        if not text:
            findings.errors.append(f"{label} is required")
            return
        if len(text) < MIN_NAME_LENGTH:
            findings.warn(f"{label} '{text}' is unusually short", DEDUCTION_NAME_SHORT)
        # Models like F-250 carry digits legitimately
        if label == "Make" and any(ch.isdigit() for ch in text):
            findings.warn(
                f"{label} '{text}' contains digits; possible OCR error",
                DEDUCTION_NAME_DIGITS,
            )

    # =========================================================================
    # Aggregate
    # =========================================================================

    def validate_all(self, fields: Mapping[str, Any]) -> Dict[str, ValidationResult]:
        """
        Validate the field groups present in the input.

        Keys: vin, year, mileage, make, model. make and model report
        together under "make_model". Absent keys are absent from the result.
        """
        results: Dict[str, ValidationResult] = {}
        if "vin" in fields:
            results["vin"] = self.validate_vin(fields["vin"])
        if "year" in fields:
            results["year"] = self.validate_year(fields["year"])
        if "mileage" in fields:
            results["mileage"] = self.validate_mileage(fields["mileage"], fields.get("year"))
        if "make" in fields or "model" in fields:
            make = (fields["make"] or "") if "make" in fields else None
            model = (fields["model"] or "") if "model" in fields else None
            results["make_model"] = self.validate_make_model(make, model)
        return results

    def validate_record(self, record) -> Dict[str, ValidationResult]:
        """Validate the populated fields of an ExtractedVehicleData."""
        fields: Dict[str, Any] = {}
        if record.vin:
            fields["vin"] = record.vin
        for name in ("year", "mileage", "make", "model"):
            value = getattr(record, name)
            if value is not None:
                fields[name] = value
        return self.validate_all(fields)
