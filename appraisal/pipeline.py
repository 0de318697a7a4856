"""
Appraisal Pipeline

Wires extraction, validation, geolocation, adjustment, scoring and
aggregation into one flow:

    report text -> loss vehicle record -> validated fields
    comparables -> located, adjusted, scored -> market analysis
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

from .comp_engine import (
    AdjustmentCalculator,
    GeolocationService,
    MarketValueAggregator,
    QualityScoreCalculator,
)
from .constants import COMP_DEFAULT_MAX_DISTANCE
from .errors import AggregationPreconditionError
from .extraction import FieldExtractor
from .models import (
    ComparableVehicle,
    Coordinates,
    ExtractedVehicleData,
    ExtractionMethod,
    MarketAnalysis,
    ValidationResult,
)
from .validation import ComparableValidationResult, ComparableValidator, DataValidator

logger = logging.getLogger(__name__)


@dataclass
class AppraisalResult:
    """
    Everything produced for one loss vehicle.

    Carries the extracted record, its field validation, the prepared
    comparables with their validation, and the market analysis.
    Comparables that failed validation are kept in excluded.
    """
    loss_vehicle: ExtractedVehicleData
    field_validation: Dict[str, ValidationResult]
    comparables: List[ComparableVehicle]
    comparable_validation: Dict[str, ComparableValidationResult]
    analysis: MarketAnalysis
    notes: List[str] = field(default_factory=list)
    excluded: List[ComparableVehicle] = field(default_factory=list)

    @property
    def flagged_fields(self) -> List[str]:
        """Fields that failed validation or carry warnings."""
        return [
            name for name, result in self.field_validation.items()
            if not result.is_valid or result.warnings
        ]

    def to_dict(self) -> dict:
        return {
            "loss_vehicle": self.loss_vehicle.to_dict(),
            "field_validation": {k: v.to_dict() for k, v in self.field_validation.items()},
            "comparables": [c.to_dict() for c in self.comparables],
            "comparable_validation": {
                k: v.to_dict() for k, v in self.comparable_validation.items()
            },
            "analysis": self.analysis.to_dict(),
            "notes": list(self.notes),
            "excluded": [c.id for c in self.excluded],
        }


class AppraisalPipeline:
    """
    End-to-end appraisal of a total-loss vehicle.

    Each instance owns its own geocode cache; use one per session.
    """

    def __init__(self, reference_date: date = None, max_comp_distance: float = COMP_DEFAULT_MAX_DISTANCE):
        """
        Args:
            reference_date: Date for age-dependent rules (default: today)
            max_comp_distance: Distance (miles) over which comparables are flagged
        """
        self._reference_date = reference_date or date.today()
        self.extractor = FieldExtractor()
        self.validator = DataValidator(reference_date=self._reference_date)
        self.geolocation = GeolocationService()
        self.adjuster = AdjustmentCalculator(reference_date=self._reference_date)
        self.scorer = QualityScoreCalculator()
        self.aggregator = MarketValueAggregator()
        self.comparable_validator = ComparableValidator(
            reference_date=self._reference_date, max_distance=max_comp_distance
        )

    def process_report(
        self,
        text: Union[str, bytes],
        method: Union[ExtractionMethod, str] = ExtractionMethod.STANDARD,
    ) -> tuple:
        """
        Extract and validate a loss vehicle from report text.

        Returns:
            (ExtractedVehicleData, dict of field -> ValidationResult)

        Raises:
            ExtractionFailure: If the text is not a report
        """
        record = self.extractor.extract(text, method)
        validation = self.validator.validate_record(record)
        for name, result in validation.items():
            if not result.is_valid:
                logger.warning("Field %s failed validation: %s", name, "; ".join(result.errors))
        return record, validation

    def locate_comparable(
        self,
        comparable: ComparableVehicle,
        loss_coordinates: Optional[Coordinates],
    ) -> ComparableVehicle:
        """Geocode a comparable and fill in its distance when both ends resolve."""
        if comparable.coordinates is None and comparable.location:
            comparable.coordinates = self.geolocation.geocode(comparable.location)
        if comparable.distance_from_loss is None and comparable.coordinates and loss_coordinates:
            comparable.distance_from_loss = self.geolocation.distance(
                loss_coordinates, comparable.coordinates
            )
        return comparable

    def prepare_comparable(
        self,
        comparable: ComparableVehicle,
        loss_vehicle: ExtractedVehicleData,
        loss_coordinates: Optional[Coordinates] = None,
    ) -> ComparableVehicle:
        """
        Locate, adjust and score a comparable in place.

        Distance is only filled in when both locations resolve.

        Raises:
            AggregationPreconditionError: If the comparable has no list price
        """
        if loss_coordinates is None and loss_vehicle.location:
            loss_coordinates = self.geolocation.geocode(loss_vehicle.location)
        self.locate_comparable(comparable, loss_coordinates)

        self.adjuster.apply(comparable, loss_vehicle)
        self.scorer.score(comparable, loss_vehicle)
        logger.debug(
            "Comparable %s: adjusted %.2f, score %.2f",
            comparable.id, comparable.adjusted_price, comparable.quality_score,
        )
        return comparable

    def appraise(
        self,
        loss_vehicle: ExtractedVehicleData,
        comparables: Sequence[ComparableVehicle],
        appraisal_id: Optional[str] = None,
    ) -> AppraisalResult:
        """
        Validate and prepare every comparable, then aggregate the valid ones.

        Comparables with validation errors are left out of the market value
        and listed in the notes.

        Raises:
            AggregationPreconditionError: If no valid comparables remain
        """
        loss_coordinates = (
            self.geolocation.geocode(loss_vehicle.location) if loss_vehicle.location else None
        )
        for comp in comparables:
            self.locate_comparable(comp, loss_coordinates)
        comparable_validation = self.comparable_validator.validate_many(comparables, loss_vehicle)

        notes = []
        usable = []
        excluded = []
        for comp in comparables:
            result = comparable_validation[comp.id]
            if result.is_valid:
                usable.append(comp)
                continue
            excluded.append(comp)
            reasons = "; ".join(issue.message for issue in result.errors)
            logger.warning("Excluding comparable %s: %s", comp.id, reasons)
            notes.append(f"Comparable {comp.description or comp.id} excluded: {reasons}")

        if not usable:
            raise AggregationPreconditionError(
                f"No valid comparables to aggregate ({len(comparables)} failed validation)"
                if comparables else "No comparables to aggregate"
            )

        prepared = [
            self.prepare_comparable(comp, loss_vehicle, loss_coordinates)
            for comp in usable
        ]
        analysis = self.aggregator.aggregate(loss_vehicle, prepared, appraisal_id=appraisal_id)

        if loss_coordinates is None:
            notes.append("Loss vehicle location could not be resolved; distance not scored")
        if loss_vehicle.insurance_value is None:
            notes.append("No insurer value found; comparison unavailable")

        return AppraisalResult(
            loss_vehicle=loss_vehicle,
            field_validation=self.validator.validate_record(loss_vehicle),
            comparables=prepared,
            comparable_validation=comparable_validation,
            analysis=analysis,
            notes=notes,
            excluded=excluded,
        )
