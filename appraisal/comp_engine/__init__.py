"""
Comparable engine: geolocation, quality scoring, price adjustment and
market value aggregation.

Usage:
    from appraisal.comp_engine import QualityScoreCalculator, MarketValueAggregator

    for comp in comps:
        QualityScoreCalculator().score(comp, loss_vehicle)
    analysis = MarketValueAggregator().aggregate(loss_vehicle, comps)
"""

from .adjustments import AdjustmentCalculator, CONDITION_MULTIPLIERS
from .cities import KNOWN_CITIES
from .geolocation import GeocodeCache, GeolocationService, normalize_location
from .quality import QualityScoreCalculator
from .valuation import MarketValueAggregator

__all__ = [
    "AdjustmentCalculator",
    "CONDITION_MULTIPLIERS",
    "KNOWN_CITIES",
    "GeocodeCache",
    "GeolocationService",
    "normalize_location",
    "QualityScoreCalculator",
    "MarketValueAggregator",
]
