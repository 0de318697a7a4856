"""
Sanity checks for user-recorded comparables.

Errors mean the comparable should not be used until fixed; warnings
flag values worth a second look (distant listings, price outliers,
a different model than the loss vehicle).
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..constants import (
    COMP_DEFAULT_MAX_DISTANCE,
    COMP_FAR_DISTANCE,
    COMP_HIGH_MILEAGE,
    COMP_HIGH_PRICE,
    COMP_LOW_MILEAGE,
    COMP_LOW_MILEAGE_MIN_AGE,
    COMP_LOW_PRICE,
    COMP_MAX_MILEAGE,
    COMP_MAX_MILEAGE_DIFFERENCE_PCT,
    COMP_MAX_MILES_PER_YEAR,
    COMP_MAX_PRICE,
    COMP_MAX_YEAR_DIFFERENCE,
    COMP_MAX_YEARS_AHEAD,
    COMP_MIN_PRICE,
    COMP_MIN_YEAR,
    COMP_OLD_YEAR,
    COMP_OUTLIER_MIN_COUNT,
    COMP_OUTLIER_Z_SCORE,
    STANDARD_SOURCES,
)
from ..models import ComparableVehicle, ExtractedVehicleData

LOCATION_RE = re.compile(r"^[A-Za-z][A-Za-z .'\-]*,\s*[A-Za-z]{2}(?:\s+\d{5})?$")

REQUIRED_FIELDS = ("source", "year", "make", "model", "mileage", "list_price", "location")


class IssueCode(Enum):
    MISSING_FIELD = "missing_field"
    INVALID_YEAR = "invalid_year"
    INVALID_MILEAGE = "invalid_mileage"
    INVALID_PRICE = "invalid_price"
    INVALID_LOCATION = "invalid_location"
    UNKNOWN_SOURCE = "unknown_source"
    OLD_VEHICLE = "old_vehicle"
    HIGH_MILEAGE = "high_mileage"
    MILEAGE_FOR_AGE = "mileage_for_age"
    UNUSUAL_PRICE = "unusual_price"
    DUPLICATE_EQUIPMENT = "duplicate_equipment"
    DISTANT = "distant"
    DISSIMILAR = "dissimilar"
    PRICE_OUTLIER = "price_outlier"


@dataclass(frozen=True)
class ComparableIssue:
    field: str
    code: IssueCode
    message: str
    suggested_action: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "code": self.code.value,
            "message": self.message,
            "suggested_action": self.suggested_action,
        }


@dataclass
class ComparableValidationResult:
    comparable_id: str
    errors: List[ComparableIssue] = field(default_factory=list)
    warnings: List[ComparableIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "comparable_id": self.comparable_id,
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


class ComparableValidator:
    """
    Validates comparables individually and against the set.

    Usage:
        validator = ComparableValidator()
        results = validator.validate_many(comps, loss_vehicle)
        summary = ComparableValidator.summarize(results)
    """

    def __init__(self, reference_date: date = None, max_distance: float = COMP_DEFAULT_MAX_DISTANCE):
        self._reference_date = reference_date or date.today()
        self._max_distance = max_distance

    def validate(
        self,
        comparable: ComparableVehicle,
        loss_vehicle: Optional[ExtractedVehicleData] = None,
        others: Sequence[ComparableVehicle] = (),
    ) -> ComparableValidationResult:
        """
        Validate one comparable.

        Args:
            comparable: The comparable to check
            loss_vehicle: Enables similarity warnings
            others: The full comparable set, enables outlier detection
        """
        result = ComparableValidationResult(comparable_id=comparable.id)

        self._check_required(comparable, result)
        self._check_year(comparable, result)
        self._check_mileage(comparable, result)
        self._check_price(comparable, result)
        self._check_location(comparable, result)
        self._check_source(comparable, result)
        self._check_equipment(comparable, result)
        self._check_distance(comparable, result)
        if loss_vehicle is not None:
            self._check_similarity(comparable, loss_vehicle, result)
        if others:
            self._check_outlier(comparable, others, result)
        return result

    def validate_many(
        self,
        comparables: Sequence[ComparableVehicle],
        loss_vehicle: Optional[ExtractedVehicleData] = None,
    ) -> Dict[str, ComparableValidationResult]:
        return {
            comp.id: self.validate(comp, loss_vehicle, comparables)
            for comp in comparables
        }

    @staticmethod
    def summarize(results: Dict[str, ComparableValidationResult]) -> dict:
        """Counts for a set of validation results."""
        return {
            "total": len(results),
            "valid": sum(1 for r in results.values() if r.is_valid),
            "invalid": sum(1 for r in results.values() if not r.is_valid),
            "with_warnings": sum(1 for r in results.values() if r.warnings),
            "total_errors": sum(len(r.errors) for r in results.values()),
            "total_warnings": sum(len(r.warnings) for r in results.values()),
        }

    # =========================================================================
    # Field Checks
    # =========================================================================

    @staticmethod
    def _check_required(comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        for name in REQUIRED_FIELDS:
            value = getattr(comp, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                result.errors.append(ComparableIssue(
                    name, IssueCode.MISSING_FIELD, f"{name.replace('_', ' ').title()} is required",
                ))

    def _check_year(self, comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        if comp.year is None:
            return
        latest = self._reference_date.year + COMP_MAX_YEARS_AHEAD
        if not COMP_MIN_YEAR <= comp.year <= latest:
            result.errors.append(ComparableIssue(
                "year", IssueCode.INVALID_YEAR,
                f"Year must be between {COMP_MIN_YEAR} and {latest}",
            ))
        elif comp.year < COMP_OLD_YEAR:
            result.warnings.append(ComparableIssue(
                "year", IssueCode.OLD_VEHICLE,
                f"{comp.year} vehicles have thin market data",
                "Confirm the listing is a fair comparison",
            ))

    def _check_mileage(self, comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        if comp.mileage is None:
            return
        if not 0 <= comp.mileage <= COMP_MAX_MILEAGE:
            result.errors.append(ComparableIssue(
                "mileage", IssueCode.INVALID_MILEAGE,
                f"Mileage must be between 0 and {COMP_MAX_MILEAGE:,}",
            ))
            return
        if comp.mileage > COMP_HIGH_MILEAGE:
            result.warnings.append(ComparableIssue(
                "mileage", IssueCode.HIGH_MILEAGE, f"High mileage ({comp.mileage:,})",
            ))
        if comp.year is None:
            return
        age = max(0, self._reference_date.year - comp.year)
        if comp.mileage > max(age, 1) * COMP_MAX_MILES_PER_YEAR:
            result.warnings.append(ComparableIssue(
                "mileage", IssueCode.MILEAGE_FOR_AGE,
                f"Over {COMP_MAX_MILES_PER_YEAR:,} miles per year for a {age}-year-old vehicle",
                "Check the odometer reading",
            ))
        elif age > COMP_LOW_MILEAGE_MIN_AGE and comp.mileage < COMP_LOW_MILEAGE:
            result.warnings.append(ComparableIssue(
                "mileage", IssueCode.MILEAGE_FOR_AGE,
                f"Under {COMP_LOW_MILEAGE:,} miles on a {age}-year-old vehicle",
                "Check the odometer reading",
            ))

    @staticmethod
    def _check_price(comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        price = comp.list_price
        if price is None:
            return
        if price <= 0:
            result.errors.append(ComparableIssue(
                "list_price", IssueCode.INVALID_PRICE, "Price must be greater than zero",
                "Enter the listed asking price",
            ))
        elif not COMP_MIN_PRICE <= price <= COMP_MAX_PRICE:
            result.errors.append(ComparableIssue(
                "list_price", IssueCode.INVALID_PRICE,
                f"Price must be between ${COMP_MIN_PRICE:,} and ${COMP_MAX_PRICE:,}",
            ))
        elif price < COMP_LOW_PRICE or price > COMP_HIGH_PRICE:
            result.warnings.append(ComparableIssue(
                "list_price", IssueCode.UNUSUAL_PRICE, f"Unusual price (${price:,.0f})",
                "Confirm the listed price",
            ))

    @staticmethod
    def _check_location(comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        if comp.location and not LOCATION_RE.match(comp.location.strip()):
            result.errors.append(ComparableIssue(
                "location", IssueCode.INVALID_LOCATION,
                "Location must be in 'City, ST' format",
            ))

    @staticmethod
    def _check_source(comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        if comp.source and comp.source not in STANDARD_SOURCES:
            result.warnings.append(ComparableIssue(
                "source", IssueCode.UNKNOWN_SOURCE, f"Unrecognised source '{comp.source}'",
            ))

    @staticmethod
    def _check_equipment(comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        if not comp.equipment:
            return
        seen = set()
        duplicates = []
        for item in comp.equipment:
            key = item.strip().lower()
            if key in seen:
                duplicates.append(item)
            seen.add(key)
        if duplicates:
            result.warnings.append(ComparableIssue(
                "equipment", IssueCode.DUPLICATE_EQUIPMENT,
                f"Duplicate equipment: {', '.join(duplicates)}",
            ))

    def _check_distance(self, comp: ComparableVehicle, result: ComparableValidationResult) -> None:
        distance = comp.distance_from_loss
        if distance is None:
            return
        if distance > COMP_FAR_DISTANCE:
            result.warnings.append(ComparableIssue(
                "distance_from_loss", IssueCode.DISTANT,
                f"{distance:.0f} miles away; likely a different market",
                "Prefer comparables closer to the loss location",
            ))
        elif distance > self._max_distance:
            result.warnings.append(ComparableIssue(
                "distance_from_loss", IssueCode.DISTANT,
                f"{distance:.0f} miles away",
            ))

    # =========================================================================
    # Set Checks
    # =========================================================================

    @staticmethod
    def _check_similarity(
        comp: ComparableVehicle,
        loss: ExtractedVehicleData,
        result: ComparableValidationResult,
    ) -> None:
        if comp.year is not None and loss.year is not None:
            if abs(comp.year - loss.year) > COMP_MAX_YEAR_DIFFERENCE:
                result.warnings.append(ComparableIssue(
                    "year", IssueCode.DISSIMILAR,
                    f"{abs(comp.year - loss.year)} model years from the loss vehicle",
                ))
        for name in ("make", "model"):
            ours, theirs = getattr(comp, name), getattr(loss, name)
            if ours and theirs and ours.strip().lower() != theirs.strip().lower():
                result.warnings.append(ComparableIssue(
                    name, IssueCode.DISSIMILAR,
                    f"{name.title()} '{ours}' differs from loss vehicle '{theirs}'",
                ))
        if comp.mileage is not None and loss.mileage:
            diff_pct = abs(comp.mileage - loss.mileage) / loss.mileage * 100
            if diff_pct > COMP_MAX_MILEAGE_DIFFERENCE_PCT:
                result.warnings.append(ComparableIssue(
                    "mileage", IssueCode.DISSIMILAR,
                    f"Mileage differs from the loss vehicle by {diff_pct:.0f}%",
                ))

    @staticmethod
    def _check_outlier(
        comp: ComparableVehicle,
        others: Sequence[ComparableVehicle],
        result: ComparableValidationResult,
    ) -> None:
        prices = [c.list_price for c in others if c.list_price and c.list_price > 0]
        if len(prices) < COMP_OUTLIER_MIN_COUNT or not comp.list_price or comp.list_price <= 0:
            return
        mean = sum(prices) / len(prices)
        std_dev = math.sqrt(sum((x - mean) ** 2 for x in prices) / len(prices))
        if std_dev == 0:
            return
        z_score = (comp.list_price - mean) / std_dev
        if abs(z_score) > COMP_OUTLIER_Z_SCORE:
            direction = "above" if z_score > 0 else "below"
            result.warnings.append(ComparableIssue(
                "list_price", IssueCode.PRICE_OUTLIER,
                f"Price is {abs(z_score):.1f} standard deviations {direction} the set",
                "Check for damage, salvage title or a data entry error",
            ))
