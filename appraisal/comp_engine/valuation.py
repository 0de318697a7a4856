"""
Market value aggregation.

Market value = sum(adjusted_price * quality_score) / sum(quality_score)

Confidence (0-95):
    20 points per comparable, up to 60
    + 20 if quality score std dev < 10, + 10 if < 20
    + 20 if price coefficient of variation < 0.15, + 10 if < 0.25
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from ..constants import (
    CONFIDENCE_CAP,
    CONFIDENCE_COUNT_CAP,
    CONFIDENCE_PER_COMPARABLE,
    HIGH_CONFIDENCE_THRESHOLD,
    MEDIUM_CONFIDENCE_THRESHOLD,
    PRICE_SPREAD_BONUSES,
    SCORE_SPREAD_BONUSES,
)
from ..errors import AggregationPreconditionError
from ..models import (
    CalculationBreakdown,
    CalculationStep,
    ComparableContribution,
    ComparableVehicle,
    ConfidenceFactors,
    ConfidenceLevel,
    ExtractedVehicleData,
    MarketAnalysis,
)

logger = logging.getLogger(__name__)


def _population_std_dev(values: Sequence[float]) -> float:
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def _spread_points(value: float, bands: Sequence[Tuple[float, int]]) -> int:
    for upper, points in bands:
        if value < upper:
            return points
    return 0


class MarketValueAggregator:
    """
    Combines scored, adjusted comparables into a market value.

    Usage:
        aggregator = MarketValueAggregator()
        analysis = aggregator.aggregate(loss_vehicle, comparables)
        print(analysis.calculated_market_value)
    """

    def aggregate(
        self,
        loss_vehicle: ExtractedVehicleData,
        comparables: Sequence[ComparableVehicle],
        appraisal_id: Optional[str] = None,
    ) -> MarketAnalysis:
        """
        Aggregate comparables into a MarketAnalysis.

        Args:
            loss_vehicle: Supplies the insurer's figures
            comparables: Comparables with adjusted_price and quality_score set
            appraisal_id: Optional identifier carried onto the result

        Raises:
            AggregationPreconditionError: If no usable comparables are given
        """
        self._check_preconditions(comparables)

        contributions: List[ComparableContribution] = []
        for comp in comparables:
            contributions.append(ComparableContribution(
                comparable_id=comp.id,
                list_price=comp.list_price,
                adjusted_price=comp.adjusted_price,
                quality_score=comp.quality_score,
                weighted_value=comp.adjusted_price * comp.quality_score,
            ))

        total_weighted = sum(c.weighted_value for c in contributions)
        total_weights = sum(c.quality_score for c in contributions)
        market_value = round(total_weighted / total_weights, 2)

        breakdown = CalculationBreakdown(
            comparables=contributions,
            total_weighted_value=round(total_weighted, 2),
            total_weights=round(total_weights, 2),
            final_market_value=market_value,
            steps=self._build_steps(contributions, total_weighted, total_weights, market_value),
        )

        factors = self.confidence_factors(comparables)
        confidence = min(
            CONFIDENCE_CAP,
            factors.count_points + factors.score_points + factors.price_points,
        )

        insurance_value = loss_vehicle.insurance_value
        difference, percentage, undervalued = self.compare_to_insurance(
            market_value, insurance_value
        )

        logger.info(
            "Market value %.2f from %d comparables (confidence %d)",
            market_value, len(comparables), confidence,
        )
        return MarketAnalysis(
            appraisal_id=appraisal_id,
            comparables_count=len(comparables),
            calculated_market_value=market_value,
            confidence_level=confidence,
            confidence_label=self._label(confidence),
            confidence_factors=factors,
            calculation_breakdown=breakdown,
            insurance_value=insurance_value,
            value_difference=difference,
            value_difference_percentage=percentage,
            is_undervalued=undervalued,
        )

    # =========================================================================
    # Preconditions
    # =========================================================================

    @staticmethod
    def _check_preconditions(comparables: Sequence[ComparableVehicle]) -> None:
        if not comparables:
            raise AggregationPreconditionError("at least one comparable is required")
        for comp in comparables:
            if comp.adjusted_price is None or comp.quality_score is None:
                raise AggregationPreconditionError(
                    f"comparable {comp.id} has not been adjusted and scored"
                )
            if comp.adjusted_price < 0 or comp.quality_score < 0:
                raise AggregationPreconditionError(
                    f"comparable {comp.id} has a negative price or score"
                )
            if math.isnan(comp.adjusted_price) or math.isnan(comp.quality_score):
                raise AggregationPreconditionError(f"comparable {comp.id} has a NaN value")
        if sum(c.quality_score for c in comparables) == 0:
            raise AggregationPreconditionError("all comparables have a quality score of 0")

    # =========================================================================
    # Confidence
    # =========================================================================

    @staticmethod
    def confidence_factors(comparables: Sequence[ComparableVehicle]) -> ConfidenceFactors:
        scores = [c.quality_score for c in comparables]
        prices = [c.adjusted_price for c in comparables]

        score_std_dev = _population_std_dev(scores)
        mean_price = sum(prices) / len(prices)
        price_cv = _population_std_dev(prices) / mean_price if mean_price > 0 else 0.0

        return ConfidenceFactors(
            comparable_count=len(comparables),
            score_std_dev=round(score_std_dev, 2),
            price_coefficient_of_variation=round(price_cv, 4),
            count_points=min(len(comparables) * CONFIDENCE_PER_COMPARABLE, CONFIDENCE_COUNT_CAP),
            score_points=_spread_points(score_std_dev, SCORE_SPREAD_BONUSES),
            price_points=_spread_points(price_cv, PRICE_SPREAD_BONUSES),
        )

    @staticmethod
    def _label(confidence: int) -> ConfidenceLevel:
        if confidence >= HIGH_CONFIDENCE_THRESHOLD:
            return ConfidenceLevel.HIGH
        if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    # =========================================================================
    # Insurance Comparison
    # =========================================================================

    @staticmethod
    def compare_to_insurance(
        market_value: float,
        insurance_value: Optional[float],
    ) -> Tuple[float, float, bool]:
        """
        Compare the calculated value with the insurer's figure.

        Returns:
            (difference, percentage, is_undervalued); positive means the
            insurer's figure is below market
        """
        if insurance_value is None:
            return 0.0, 0.0, False
        difference = round(market_value - insurance_value, 2)
        percentage = round(difference / insurance_value * 100, 2) if insurance_value else 0.0
        return difference, percentage, market_value > insurance_value

    # =========================================================================
    # Audit Trail
    # =========================================================================

    @staticmethod
    def _build_steps(
        contributions: Sequence[ComparableContribution],
        total_weighted: float,
        total_weights: float,
        market_value: float,
    ) -> List[CalculationStep]:
        weighted_terms = " + ".join(
            f"({c.adjusted_price:,.2f} x {c.quality_score:g})" for c in contributions
        )
        score_terms = " + ".join(f"{c.quality_score:g}" for c in contributions)
        return [
            CalculationStep(
                step=1,
                description="Weight each adjusted price by its quality score",
                calculation=weighted_terms,
                result=round(total_weighted, 2),
            ),
            CalculationStep(
                step=2,
                description="Sum the quality scores",
                calculation=score_terms,
                result=round(total_weights, 2),
            ),
            CalculationStep(
                step=3,
                description="Divide weighted total by total score",
                calculation=f"{total_weighted:,.2f} / {total_weights:g}",
                result=market_value,
            ),
        ]
