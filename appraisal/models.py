"""
Data models for the appraisal core.

Covers the loss vehicle record produced by extraction, per-field
validation results, user-recorded comparables and the scored and
aggregated market analysis built from them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ReportType(Enum):
    """Insurer valuation report family."""
    CCC_ONE = "CCC_ONE"
    MITCHELL = "MITCHELL"
    OTHER = "OTHER"

    @classmethod
    def from_string(cls, value: str) -> Optional["ReportType"]:
        """Convert string to ReportType, case-insensitive."""
        normalised = value.upper().strip().replace(" ", "_")
        for member in cls:
            if member.value == normalised:
                return member
        return None


class ExtractionMethod(Enum):
    """
    How the raw text was produced upstream.

    standard: text layer was sufficient
    ocr: image-based recognition was needed
    hybrid: both were combined
    """
    STANDARD = "standard"
    OCR = "ocr"
    HYBRID = "hybrid"

    @classmethod
    def from_string(cls, value: str) -> Optional["ExtractionMethod"]:
        """Convert string to ExtractionMethod, case-insensitive."""
        normalised = value.lower().strip()
        for member in cls:
            if member.value == normalised:
                return member
        return None


class Condition(Enum):
    """Condition grade for a vehicle."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

    @classmethod
    def from_string(cls, value: str) -> Optional["Condition"]:
        """Convert string to Condition, case-insensitive."""
        normalised = value.lower().strip()
        for member in cls:
            if member.value.lower() == normalised:
                return member
        return None


class ConfidenceLevel(Enum):
    """
    Label for the numeric aggregation confidence.

    High: >= 80
    Medium: 50-79
    Low: < 50
    """
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# =============================================================================
# Loss Vehicle
# =============================================================================

@dataclass
class ExtractedVehicleData:
    """
    Draft loss vehicle record recovered from report text.

    Fields that could not be found stay None (or "" for the VIN) and are
    absent from field_confidence.
    """
    vin: str = ""
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None
    mileage: Optional[int] = None
    location: Optional[str] = None

    market_value: Optional[float] = None
    settlement_value: Optional[float] = None

    report_type: ReportType = ReportType.OTHER
    extraction_method: ExtractionMethod = ExtractionMethod.STANDARD
    extraction_confidence: float = 0.0
    field_confidence: Dict[str, float] = field(default_factory=dict)

    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    equipment: Optional[List[str]] = None
    condition: Optional[Condition] = None

    @property
    def insurance_value(self) -> Optional[float]:
        """Insurer figure to compare against: settlement, else market value."""
        if self.settlement_value is not None:
            return self.settlement_value
        return self.market_value

    @property
    def description(self) -> str:
        """Year make model, skipping whatever is missing."""
        parts = [str(self.year) if self.year else None, self.make, self.model, self.trim]
        return " ".join(p for p in parts if p)

    def to_dict(self) -> dict:
        return {
            "vin": self.vin,
            "year": self.year,
            "make": self.make,
            "model": self.model,
            "trim": self.trim,
            "mileage": self.mileage,
            "location": self.location,
            "market_value": self.market_value,
            "settlement_value": self.settlement_value,
            "report_type": self.report_type.value,
            "extraction_method": self.extraction_method.value,
            "extraction_confidence": self.extraction_confidence,
            "field_confidence": dict(self.field_confidence),
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "equipment": list(self.equipment) if self.equipment is not None else None,
            "condition": self.condition.value if self.condition else None,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field group."""
    is_valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    confidence: int = 100

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Coordinates:
    """A point in decimal degrees."""
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


# =============================================================================
# Comparables
# =============================================================================

@dataclass
class PriceAdjustment:
    """One dollar delta applied to a comparable's list price."""
    amount: float = 0.0
    explanation: str = ""

    def to_dict(self) -> dict:
        return {"amount": self.amount, "explanation": self.explanation}


@dataclass
class PriceAdjustments:
    """Mileage, equipment and condition deltas for a comparable."""
    mileage: PriceAdjustment = field(default_factory=PriceAdjustment)
    equipment: PriceAdjustment = field(default_factory=PriceAdjustment)
    condition: PriceAdjustment = field(default_factory=PriceAdjustment)

    @property
    def total(self) -> float:
        return self.mileage.amount + self.equipment.amount + self.condition.amount

    def to_dict(self) -> dict:
        return {
            "mileage": self.mileage.to_dict(),
            "equipment": self.equipment.to_dict(),
            "condition": self.condition.to_dict(),
            "total": self.total,
        }


@dataclass
class QualityScoreBreakdown:
    """
    How a comparable's quality score was reached.

    final_score = base + bonuses - penalties, floored at 0 and deliberately
    not capped at 100.
    """
    base_score: float
    distance_penalty: float = 0.0
    age_penalty: float = 0.0
    age_bonus: float = 0.0
    mileage_penalty: float = 0.0
    mileage_bonus: float = 0.0
    equipment_penalty: float = 0.0
    equipment_bonus: float = 0.0
    final_score: float = 0.0
    explanations: Dict[str, str] = field(default_factory=dict)

    @property
    def total_penalty(self) -> float:
        return (
            self.distance_penalty + self.age_penalty
            + self.mileage_penalty + self.equipment_penalty
        )

    @property
    def total_bonus(self) -> float:
        return self.age_bonus + self.mileage_bonus + self.equipment_bonus

    def to_dict(self) -> dict:
        return {
            "base_score": self.base_score,
            "distance_penalty": self.distance_penalty,
            "age_penalty": self.age_penalty,
            "age_bonus": self.age_bonus,
            "mileage_penalty": self.mileage_penalty,
            "mileage_bonus": self.mileage_bonus,
            "equipment_penalty": self.equipment_penalty,
            "equipment_bonus": self.equipment_bonus,
            "final_score": self.final_score,
            "explanations": dict(self.explanations),
        }


@dataclass
class ComparableVehicle:
    """
    A market listing recorded against an appraisal.

    Any descriptive field may be missing; scoring and validation treat
    missing fields as "not provided" rather than as zero.
    """
    id: str
    appraisal_id: Optional[str] = None
    source: str = ""
    source_url: Optional[str] = None
    listing_date: Optional[date] = None

    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None
    mileage: Optional[int] = None
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    distance_from_loss: Optional[float] = None

    list_price: Optional[float] = None
    adjusted_price: Optional[float] = None
    condition: Optional[Condition] = None
    equipment: Optional[List[str]] = None

    quality_score: Optional[float] = None
    quality_score_breakdown: Optional[QualityScoreBreakdown] = None
    adjustments: Optional[PriceAdjustments] = None
    notes: Optional[str] = None

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def description(self) -> str:
        parts = [str(self.year) if self.year else None, self.make, self.model, self.trim]
        return " ".join(p for p in parts if p)

    @classmethod
    def from_dict(cls, data: dict) -> "ComparableVehicle":
        """Build a comparable from a plain mapping (e.g. parsed JSON)."""
        condition = data.get("condition")
        listing_date = data.get("listing_date")
        coordinates = data.get("coordinates")
        list_price = data.get("list_price")
        return cls(
            id=str(data["id"]),
            appraisal_id=data.get("appraisal_id"),
            source=data.get("source", ""),
            source_url=data.get("source_url"),
            listing_date=date.fromisoformat(listing_date) if listing_date else None,
            year=data.get("year"),
            make=data.get("make"),
            model=data.get("model"),
            trim=data.get("trim"),
            mileage=data.get("mileage"),
            location=data.get("location"),
            coordinates=Coordinates(**coordinates) if coordinates else None,
            distance_from_loss=data.get("distance_from_loss"),
            list_price=float(list_price) if list_price is not None else None,
            adjusted_price=data.get("adjusted_price"),
            condition=Condition.from_string(condition) if condition else None,
            equipment=data.get("equipment"),
            quality_score=data.get("quality_score"),
            notes=data.get("notes"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "appraisal_id": self.appraisal_id,
            "source": self.source,
            "source_url": self.source_url,
            "listing_date": self.listing_date.isoformat() if self.listing_date else None,
            "year": self.year,
            "make": self.make,
            "model": self.model,
            "trim": self.trim,
            "mileage": self.mileage,
            "location": self.location,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "distance_from_loss": self.distance_from_loss,
            "list_price": self.list_price,
            "adjusted_price": self.adjusted_price,
            "condition": self.condition.value if self.condition else None,
            "equipment": list(self.equipment) if self.equipment is not None else None,
            "quality_score": self.quality_score,
            "quality_score_breakdown": (
                self.quality_score_breakdown.to_dict()
                if self.quality_score_breakdown else None
            ),
            "adjustments": self.adjustments.to_dict() if self.adjustments else None,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# =============================================================================
# Market Analysis
# =============================================================================

@dataclass
class ComparableContribution:
    """One comparable's share of the weighted average."""
    comparable_id: str
    list_price: float
    adjusted_price: float
    quality_score: float
    weighted_value: float

    def to_dict(self) -> dict:
        return {
            "comparable_id": self.comparable_id,
            "list_price": self.list_price,
            "adjusted_price": self.adjusted_price,
            "quality_score": self.quality_score,
            "weighted_value": self.weighted_value,
        }


@dataclass
class CalculationStep:
    step: int
    description: str
    calculation: str
    result: float

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "description": self.description,
            "calculation": self.calculation,
            "result": self.result,
        }


@dataclass
class CalculationBreakdown:
    """Audit trail for a market value calculation."""
    comparables: List[ComparableContribution]
    total_weighted_value: float
    total_weights: float
    final_market_value: float
    steps: List[CalculationStep] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "comparables": [c.to_dict() for c in self.comparables],
            "total_weighted_value": self.total_weighted_value,
            "total_weights": self.total_weights,
            "final_market_value": self.final_market_value,
            "steps": [s.to_dict() for s in self.steps],
        }


@dataclass
class ConfidenceFactors:
    """Inputs and points behind the aggregation confidence."""
    comparable_count: int
    score_std_dev: float
    price_coefficient_of_variation: float
    count_points: int
    score_points: int
    price_points: int

    def to_dict(self) -> dict:
        return {
            "comparable_count": self.comparable_count,
            "score_std_dev": self.score_std_dev,
            "price_coefficient_of_variation": self.price_coefficient_of_variation,
            "count_points": self.count_points,
            "score_points": self.score_points,
            "price_points": self.price_points,
        }


@dataclass
class MarketAnalysis:
    """
    Aggregated market value for a loss vehicle.

    value_difference is calculated minus insurance; a positive
    percentage means the insurer's figure is below market.
    """
    comparables_count: int
    calculated_market_value: float
    confidence_level: int
    confidence_label: ConfidenceLevel
    confidence_factors: ConfidenceFactors
    calculation_breakdown: CalculationBreakdown
    calculation_method: str = "quality-weighted-average"
    insurance_value: Optional[float] = None
    value_difference: float = 0.0
    value_difference_percentage: float = 0.0
    is_undervalued: bool = False
    appraisal_id: Optional[str] = None
    calculated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "appraisal_id": self.appraisal_id,
            "comparables_count": self.comparables_count,
            "calculated_market_value": self.calculated_market_value,
            "calculation_method": self.calculation_method,
            "confidence_level": self.confidence_level,
            "confidence_label": self.confidence_label.value,
            "confidence_factors": self.confidence_factors.to_dict(),
            "insurance_value": self.insurance_value,
            "value_difference": self.value_difference,
            "value_difference_percentage": self.value_difference_percentage,
            "is_undervalued": self.is_undervalued,
            "calculation_breakdown": self.calculation_breakdown.to_dict(),
            "calculated_at": self.calculated_at.isoformat(),
        }
