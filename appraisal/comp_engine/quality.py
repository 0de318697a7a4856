"""
Comparable quality scoring.

A comparable starts at 100 and four independent factors (distance,
age, mileage, equipment) move it up or down. The result is a weight for
aggregation, not a percentage: it is floored at 0 and may exceed 100
when a comparable is a better-equipped, closer match.

Factors whose inputs are missing contribute nothing.
"""

from typing import Iterable, Optional, Set

from ..constants import (
    AGE_PENALTY_CAP,
    AGE_PENALTY_PER_YEAR,
    BASE_QUALITY_SCORE,
    DISTANCE_FREE_MILES,
    DISTANCE_PENALTY_CAP,
    DISTANCE_PENALTY_PER_MILE,
    EQUIPMENT_EXTRA_BONUS,
    EQUIPMENT_MATCH_BONUS,
    EQUIPMENT_MISSING_PENALTY,
    MILEAGE_SCORE_BANDS,
    MILEAGE_SCORE_BEYOND,
)
from ..models import ComparableVehicle, ExtractedVehicleData, QualityScoreBreakdown


def _equipment_set(items: Iterable[str]) -> Set[str]:
    return {item.strip().lower() for item in items if item and item.strip()}


class QualityScoreCalculator:
    """
    Scores how representative a comparable is of the loss vehicle.

    Usage:
        calculator = QualityScoreCalculator()
        breakdown = calculator.calculate_score(comp, loss_vehicle)
        comp.quality_score = breakdown.final_score
    """

    def calculate_score(
        self,
        comparable: ComparableVehicle,
        loss_vehicle: ExtractedVehicleData,
    ) -> QualityScoreBreakdown:
        """
        Calculate the quality score breakdown.

        Args:
            comparable: Comparable, possibly missing fields
            loss_vehicle: The vehicle under appraisal

        Returns:
            QualityScoreBreakdown with one explanation per factor
        """
        breakdown = QualityScoreBreakdown(base_score=BASE_QUALITY_SCORE)

        self._score_distance(comparable.distance_from_loss, breakdown)
        self._score_age(comparable.year, loss_vehicle.year, breakdown)
        self._score_mileage(comparable.mileage, loss_vehicle.mileage, breakdown)
        self._score_equipment(comparable.equipment, loss_vehicle.equipment, breakdown)

        raw = breakdown.base_score + breakdown.total_bonus - breakdown.total_penalty
        breakdown.final_score = round(max(0.0, raw), 2)
        return breakdown

    def score(self, comparable: ComparableVehicle, loss_vehicle: ExtractedVehicleData) -> float:
        """Score a comparable and store the result on it."""
        breakdown = self.calculate_score(comparable, loss_vehicle)
        comparable.quality_score = breakdown.final_score
        comparable.quality_score_breakdown = breakdown
        return breakdown.final_score

    # =========================================================================
    # Factors
    # =========================================================================

    @staticmethod
    def _score_distance(distance: Optional[float], breakdown: QualityScoreBreakdown) -> None:
        if distance is None:
            breakdown.explanations["distance"] = "Distance: not provided, no adjustment"
            return
        if distance <= DISTANCE_FREE_MILES:
            breakdown.explanations["distance"] = (
                f"Distance: {distance:.0f} miles "
                f"(within {DISTANCE_FREE_MILES:.0f} mile threshold, no penalty)"
            )
            return

        excess = distance - DISTANCE_FREE_MILES
        penalty = min(excess * DISTANCE_PENALTY_PER_MILE, DISTANCE_PENALTY_CAP)
        breakdown.distance_penalty = round(penalty, 2)
        capped = " capped" if penalty >= DISTANCE_PENALTY_CAP else ""
        breakdown.explanations["distance"] = (
            f"Distance: {distance:.0f} miles ({excess:.0f} miles over threshold, "
            f"-{penalty:.1f} points{capped})"
        )

    @staticmethod
    def _score_age(
        comp_year: Optional[int],
        loss_year: Optional[int],
        breakdown: QualityScoreBreakdown,
    ) -> None:
        if comp_year is None or loss_year is None:
            breakdown.explanations["age"] = "Age: not provided, no adjustment"
            return
        difference = abs(comp_year - loss_year)
        if difference == 0:
            breakdown.explanations["age"] = f"Age: exact match ({comp_year}), no adjustment"
            return

        penalty = min(difference * AGE_PENALTY_PER_YEAR, AGE_PENALTY_CAP)
        breakdown.age_penalty = penalty
        direction = "older" if comp_year < loss_year else "newer"
        plural = "s" if difference > 1 else ""
        breakdown.explanations["age"] = (
            f"Age: {difference} year{plural} {direction} "
            f"({comp_year} vs {loss_year}, -{penalty:.1f} points)"
        )

    @staticmethod
    def _score_mileage(
        comp_mileage: Optional[int],
        loss_mileage: Optional[int],
        breakdown: QualityScoreBreakdown,
    ) -> None:
        if comp_mileage is None or loss_mileage is None:
            breakdown.explanations["mileage"] = "Mileage: not provided, no adjustment"
            return
        if loss_mileage == 0:
            breakdown.explanations["mileage"] = "Mileage: loss vehicle has 0 miles, no adjustment"
            return

        diff_pct = abs(comp_mileage - loss_mileage) * 100 / loss_mileage
        points = MILEAGE_SCORE_BEYOND
        band = f"over {MILEAGE_SCORE_BANDS[-1][0]:.0f}%"
        for upper, band_points in MILEAGE_SCORE_BANDS:
            if diff_pct <= upper:
                points = band_points
                band = f"within {upper:.0f}%"
                break

        if points > 0:
            breakdown.mileage_bonus = points
            sign = "+"
        else:
            breakdown.mileage_penalty = -points
            sign = "-"
        breakdown.explanations["mileage"] = (
            f"Mileage: {comp_mileage:,} vs {loss_mileage:,} "
            f"({diff_pct:.0f}% difference, {band}, {sign}{abs(points):.1f} points)"
        )

    @staticmethod
    def _score_equipment(
        comp_equipment: Optional[Iterable[str]],
        loss_equipment: Optional[Iterable[str]],
        breakdown: QualityScoreBreakdown,
    ) -> None:
        if comp_equipment is None or loss_equipment is None:
            breakdown.explanations["equipment"] = "Equipment: not provided, no adjustment"
            return

        comp_set = _equipment_set(comp_equipment)
        loss_set = _equipment_set(loss_equipment)
        if not comp_set and not loss_set:
            breakdown.explanations["equipment"] = (
                "Equipment: none listed on either vehicle, no adjustment"
            )
            return

        missing = loss_set - comp_set
        extra = comp_set - loss_set
        if not missing and not extra:
            breakdown.equipment_bonus = EQUIPMENT_MATCH_BONUS
            breakdown.explanations["equipment"] = (
                f"Equipment: perfect match (all {len(loss_set)} features, "
                f"+{EQUIPMENT_MATCH_BONUS:.1f} points)"
            )
            return

        parts = []
        if missing:
            breakdown.equipment_penalty = len(missing) * EQUIPMENT_MISSING_PENALTY
            parts.append(f"{len(missing)} missing (-{breakdown.equipment_penalty:.1f} points)")
        if extra:
            breakdown.equipment_bonus = len(extra) * EQUIPMENT_EXTRA_BONUS
            parts.append(f"{len(extra)} extra (+{breakdown.equipment_bonus:.1f} points)")
        breakdown.explanations["equipment"] = f"Equipment: {', '.join(parts)}"
