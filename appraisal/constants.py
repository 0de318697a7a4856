"""
Named constants for the appraisal core.

Every threshold, penalty, bonus and deduction used by validation,
scoring, adjustment and aggregation lives here so the quantitative
rules can be read (and tested) in one place.
"""

from typing import Dict, Final, Tuple


# =============================================================================
# Extraction Confidence
# =============================================================================

FIELD_CONFIDENCE_PRIMARY: Final = 0.95
FIELD_CONFIDENCE_SECONDARY: Final = 0.75
FIELD_CONFIDENCE_FALLBACK: Final = 0.5

# Below this the record is flagged for manual review
LOW_EXTRACTION_CONFIDENCE: Final = 0.6

# Share of printable characters required for text to count as a report
MIN_PRINTABLE_RATIO: Final = 0.85

# Amounts with this many digits and no decimal point lost it to OCR
OCR_MISSING_DECIMAL_DIGITS: Final = 6


# =============================================================================
# Field Validation
# =============================================================================

VIN_LENGTH: Final = 17
MIN_VEHICLE_YEAR: Final = 1900
VERY_OLD_VEHICLE_YEARS: Final = 50

EXPECTED_MILES_PER_YEAR: Final = 12_000
LOW_MILEAGE_RATIO: Final = 0.1
LOW_MILEAGE_MIN_AGE: Final = 2
HIGH_MILEAGE_RATIO: Final = 3.0
VERY_HIGH_MILEAGE: Final = 300_000
MAX_PLAUSIBLE_MILEAGE: Final = 1_000_000

MIN_NAME_LENGTH: Final = 2

CONFIDENCE_MAX: Final = 100
CONFIDENCE_MIN: Final = 0

# Points deducted from validation confidence for each warning
DEDUCTION_VIN_OCR_CHARACTERS: Final = 30
DEDUCTION_VIN_CHECK_DIGIT: Final = 40
DEDUCTION_YEAR_VERY_OLD: Final = 20
DEDUCTION_YEAR_NEXT_MODEL: Final = 10
DEDUCTION_MILEAGE_LOW: Final = 20
DEDUCTION_MILEAGE_HIGH: Final = 20
DEDUCTION_MILEAGE_VERY_HIGH: Final = 20
DEDUCTION_NAME_SHORT: Final = 30
DEDUCTION_NAME_DIGITS: Final = 20
DEDUCTION_UNKNOWN_MAKE: Final = 15

KNOWN_MAKES: Final = (
    "Acura", "Alfa Romeo", "Aston Martin", "Audi", "Bentley", "BMW", "Buick",
    "Cadillac", "Chevrolet", "Chrysler", "Dodge", "Ferrari", "Fiat", "Ford",
    "Genesis", "GMC", "Honda", "Hyundai", "Infiniti", "Jaguar", "Jeep", "Kia",
    "Lamborghini", "Land Rover", "Lexus", "Lincoln", "Lucid", "Maserati",
    "Mazda", "McLaren", "Mercedes-Benz", "Mini", "Mitsubishi", "Nissan",
    "Polestar", "Porsche", "Ram", "Rivian", "Rolls-Royce", "Scion", "Subaru",
    "Tesla", "Toyota", "Volkswagen", "Volvo",
)


# =============================================================================
# Geolocation
# =============================================================================

EARTH_RADIUS_MILES: Final = 3959.0


# =============================================================================
# Quality Score
# =============================================================================

BASE_QUALITY_SCORE: Final = 100.0

DISTANCE_FREE_MILES: Final = 100.0
DISTANCE_PENALTY_PER_MILE: Final = 0.1
DISTANCE_PENALTY_CAP: Final = 20.0

AGE_PENALTY_PER_YEAR: Final = 2.0
AGE_PENALTY_CAP: Final = 10.0

# (upper bound of |difference| as a percent, points); positive is a bonus
MILEAGE_SCORE_BANDS: Final[Tuple[Tuple[float, float], ...]] = (
    (20.0, 10.0),
    (40.0, -5.0),
    (60.0, -10.0),
)
MILEAGE_SCORE_BEYOND: Final = -15.0

EQUIPMENT_MISSING_PENALTY: Final = 10.0
EQUIPMENT_EXTRA_BONUS: Final = 5.0
EQUIPMENT_MATCH_BONUS: Final = 15.0


# =============================================================================
# Price Adjustments
# =============================================================================

MILEAGE_ADJUSTMENT_MIN_DIFFERENCE: Final = 1_000

# (max vehicle age in years, dollars per mile)
MILEAGE_DEPRECIATION_RATES: Final[Tuple[Tuple[int, float], ...]] = (
    (3, 0.25),
    (7, 0.15),
)
MILEAGE_DEPRECIATION_RATE_OLD: Final = 0.05

EQUIPMENT_VALUES: Final[Dict[str, int]] = {
    "navigation": 1200,
    "sunroof": 1200,
    "premium audio": 800,
    "sport package": 1500,
    "leather seats": 1000,
    "heated seats": 500,
    "backup camera": 400,
    "blind spot monitoring": 600,
    "adaptive cruise control": 800,
    "parking sensors": 400,
    "keyless entry": 300,
    "remote start": 300,
    "tow package": 700,
    "all-wheel drive": 2000,
    "premium wheels": 800,
}
DEFAULT_EQUIPMENT_VALUE: Final = 500


# =============================================================================
# Comparable Validation
# =============================================================================

COMP_MIN_YEAR: Final = 1990
COMP_MAX_YEARS_AHEAD: Final = 2
COMP_OLD_YEAR: Final = 2000
COMP_MAX_MILEAGE: Final = 500_000
COMP_HIGH_MILEAGE: Final = 200_000
COMP_MAX_MILES_PER_YEAR: Final = 25_000
COMP_LOW_MILEAGE: Final = 1_000
COMP_LOW_MILEAGE_MIN_AGE: Final = 5
COMP_MIN_PRICE: Final = 500
COMP_MAX_PRICE: Final = 500_000
COMP_LOW_PRICE: Final = 2_000
COMP_HIGH_PRICE: Final = 100_000
COMP_DEFAULT_MAX_DISTANCE: Final = 150.0
COMP_FAR_DISTANCE: Final = 300.0
COMP_MAX_YEAR_DIFFERENCE: Final = 3
COMP_MAX_MILEAGE_DIFFERENCE_PCT: Final = 50.0
COMP_OUTLIER_Z_SCORE: Final = 2.0
COMP_OUTLIER_MIN_COUNT: Final = 3

STANDARD_SOURCES: Final = (
    "AutoTrader", "Cars.com", "CarMax", "Carvana", "CarGurus",
    "Manual Entry", "Other",
)


# =============================================================================
# Aggregation Confidence
# =============================================================================

CONFIDENCE_PER_COMPARABLE: Final = 20
CONFIDENCE_COUNT_CAP: Final = 60
# (std dev below, bonus points)
SCORE_SPREAD_BONUSES: Final[Tuple[Tuple[float, int], ...]] = ((10.0, 20), (20.0, 10))
# (coefficient of variation below, bonus points)
PRICE_SPREAD_BONUSES: Final[Tuple[Tuple[float, int], ...]] = ((0.15, 20), (0.25, 10))
CONFIDENCE_CAP: Final = 95

HIGH_CONFIDENCE_THRESHOLD: Final = 80
MEDIUM_CONFIDENCE_THRESHOLD: Final = 50
