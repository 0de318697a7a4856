"""
Total-loss vehicle appraisal core.

Pipeline:
    1. FieldExtractor turns report text into an ExtractedVehicleData
    2. DataValidator scores each field's validity and confidence
    3. GeolocationService places comparables relative to the loss vehicle
    4. AdjustmentCalculator and QualityScoreCalculator prepare each comparable
    5. MarketValueAggregator produces the MarketAnalysis

All components are synchronous and deterministic for a fixed input.
"""

from .errors import AggregationPreconditionError, ExtractionFailure
from .models import (
    ComparableVehicle,
    Condition,
    ConfidenceLevel,
    Coordinates,
    ExtractedVehicleData,
    ExtractionMethod,
    MarketAnalysis,
    QualityScoreBreakdown,
    ReportType,
    ValidationResult,
)
from .extraction import FieldExtractor, ManufacturerTable
from .validation import ComparableValidator, DataValidator
from .comp_engine import (
    AdjustmentCalculator,
    GeocodeCache,
    GeolocationService,
    MarketValueAggregator,
    QualityScoreCalculator,
)
from .pipeline import AppraisalPipeline, AppraisalResult

__version__ = "1.0.0"

__all__ = [
    "AggregationPreconditionError",
    "ExtractionFailure",
    "ComparableVehicle",
    "Condition",
    "ConfidenceLevel",
    "Coordinates",
    "ExtractedVehicleData",
    "ExtractionMethod",
    "MarketAnalysis",
    "QualityScoreBreakdown",
    "ReportType",
    "ValidationResult",
    "FieldExtractor",
    "ManufacturerTable",
    "ComparableValidator",
    "DataValidator",
    "AdjustmentCalculator",
    "GeocodeCache",
    "GeolocationService",
    "MarketValueAggregator",
    "QualityScoreCalculator",
    "AppraisalPipeline",
    "AppraisalResult",
]
