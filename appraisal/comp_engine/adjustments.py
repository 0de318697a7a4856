"""
Price adjustments that normalise a comparable's list price to the
loss vehicle: mileage depreciation, equipment differences and
condition.
"""

import logging
from datetime import date
from typing import Dict, Iterable, Mapping, Optional

from ..constants import (
    DEFAULT_EQUIPMENT_VALUE,
    EQUIPMENT_VALUES,
    MILEAGE_ADJUSTMENT_MIN_DIFFERENCE,
    MILEAGE_DEPRECIATION_RATE_OLD,
    MILEAGE_DEPRECIATION_RATES,
)
from ..errors import AggregationPreconditionError
from ..models import (
    ComparableVehicle,
    Condition,
    ExtractedVehicleData,
    PriceAdjustment,
    PriceAdjustments,
)

logger = logging.getLogger(__name__)

CONDITION_MULTIPLIERS: Dict[Condition, float] = {
    Condition.EXCELLENT: 1.05,
    Condition.GOOD: 1.00,
    Condition.FAIR: 0.95,
    Condition.POOR: 0.85,
}


def _normalise_items(items: Optional[Iterable[str]]) -> Dict[str, str]:
    """Lower-cased key to display name."""
    return {item.strip().lower(): item.strip() for item in items or () if item and item.strip()}


class AdjustmentCalculator:
    """
    Computes the adjusted price for a comparable.

    Usage:
        calculator = AdjustmentCalculator()
        adjustments = calculator.calculate(comp, loss_vehicle)
        comp.adjusted_price  # set by apply()
    """

    def __init__(
        self,
        reference_date: date = None,
        equipment_values: Mapping[str, int] = EQUIPMENT_VALUES,
    ):
        self._reference_date = reference_date or date.today()
        self._equipment_values = {k.lower(): v for k, v in equipment_values.items()}

    def calculate(
        self,
        comparable: ComparableVehicle,
        loss_vehicle: ExtractedVehicleData,
    ) -> PriceAdjustments:
        """
        Raises:
            AggregationPreconditionError: If the comparable has no list price
        """
        if comparable.list_price is None:
            raise AggregationPreconditionError(f"Comparable {comparable.id} has no list price")
        return PriceAdjustments(
            mileage=self.mileage_adjustment(comparable, loss_vehicle),
            equipment=self.equipment_adjustment(comparable.equipment, loss_vehicle.equipment),
            condition=self.condition_adjustment(
                comparable.list_price, comparable.condition, loss_vehicle.condition
            ),
        )

    def apply(self, comparable: ComparableVehicle, loss_vehicle: ExtractedVehicleData) -> float:
        """
        Calculate adjustments and store them with the adjusted price.

        Returns:
            Adjusted price, never negative
        """
        adjustments = self.calculate(comparable, loss_vehicle)
        adjusted = comparable.list_price + adjustments.total
        if adjusted < 0:
            logger.warning(
                "Adjustments take comparable %s below zero (%.2f); using 0",
                comparable.id, adjusted,
            )
            adjusted = 0.0
        comparable.adjustments = adjustments
        comparable.adjusted_price = round(adjusted, 2)
        return comparable.adjusted_price

    # =========================================================================
    # Mileage
    # =========================================================================

    def depreciation_rate(self, year: Optional[int]) -> float:
        """Dollars per mile for a vehicle of the given model year."""
        if year is None:
            return MILEAGE_DEPRECIATION_RATE_OLD
        age = max(0, self._reference_date.year - year)
        for max_age, rate in MILEAGE_DEPRECIATION_RATES:
            if age <= max_age:
                return rate
        return MILEAGE_DEPRECIATION_RATE_OLD

    def mileage_adjustment(
        self,
        comparable: ComparableVehicle,
        loss_vehicle: ExtractedVehicleData,
    ) -> PriceAdjustment:
        if comparable.mileage is None or loss_vehicle.mileage is None:
            return PriceAdjustment(0.0, "Mileage not available for both vehicles")

        difference = comparable.mileage - loss_vehicle.mileage
        if abs(difference) < MILEAGE_ADJUSTMENT_MIN_DIFFERENCE:
            return PriceAdjustment(
                0.0, f"Mileage within {MILEAGE_ADJUSTMENT_MIN_DIFFERENCE:,} miles, no adjustment"
            )

        rate = self.depreciation_rate(comparable.year)
        amount = round(-difference * rate, 2)
        direction = "more" if difference > 0 else "fewer"
        return PriceAdjustment(
            amount,
            f"{abs(difference):,} {direction} miles at ${rate:.2f}/mile",
        )

    # =========================================================================
    # Equipment
    # =========================================================================

    def equipment_value(self, item: str) -> int:
        return self._equipment_values.get(item.strip().lower(), DEFAULT_EQUIPMENT_VALUE)

    def equipment_adjustment(
        self,
        comp_equipment: Optional[Iterable[str]],
        loss_equipment: Optional[Iterable[str]],
    ) -> PriceAdjustment:
        if comp_equipment is None or loss_equipment is None:
            return PriceAdjustment(0.0, "Equipment not available for both vehicles")

        comp_items = _normalise_items(comp_equipment)
        loss_items = _normalise_items(loss_equipment)
        missing = [loss_items[k] for k in sorted(loss_items.keys() - comp_items.keys())]
        extra = [comp_items[k] for k in sorted(comp_items.keys() - loss_items.keys())]

        amount = float(
            sum(self.equipment_value(i) for i in missing)
            - sum(self.equipment_value(i) for i in extra)
        )
        parts = []
        if missing:
            parts.append(f"+ {', '.join(missing)} (on loss vehicle only)")
        if extra:
            parts.append(f"- {', '.join(extra)} (on comparable only)")
        return PriceAdjustment(amount, "; ".join(parts) or "Equipment matches")

    # =========================================================================
    # Condition
    # =========================================================================

    @staticmethod
    def condition_adjustment(
        list_price: float,
        comp_condition: Optional[Condition],
        loss_condition: Optional[Condition],
    ) -> PriceAdjustment:
        comp_condition = comp_condition or Condition.GOOD
        loss_condition = loss_condition or Condition.GOOD
        if comp_condition == loss_condition:
            return PriceAdjustment(0.0, f"Both {comp_condition.value}, no adjustment")

        comp_multiplier = CONDITION_MULTIPLIERS[comp_condition]
        loss_multiplier = CONDITION_MULTIPLIERS[loss_condition]
        normalised = list_price / comp_multiplier * loss_multiplier
        return PriceAdjustment(
            round(normalised - list_price, 2),
            f"{comp_condition.value} ({comp_multiplier:.2f}) to "
            f"{loss_condition.value} ({loss_multiplier:.2f})",
        )
