"""
Label patterns for report text.

Each field has its own ordered tuple of patterns. They are evaluated
strictly in order and the first match anywhere in the text wins; a
field never borrows a differently labelled value (a report's
"Base Value" is not its "Market Value").
"""

import re
from dataclasses import dataclass
from typing import Dict, Final, Pattern, Tuple

from ..constants import FIELD_CONFIDENCE_PRIMARY, FIELD_CONFIDENCE_SECONDARY
from ..models import ReportType


@dataclass(frozen=True)
class FieldPattern:
    """A compiled pattern and the confidence a match earns."""
    regex: Pattern
    confidence: float


def _primary(expr: str, flags: int = re.IGNORECASE) -> FieldPattern:
    return FieldPattern(re.compile(expr, flags), FIELD_CONFIDENCE_PRIMARY)


def _secondary(expr: str, flags: int = re.IGNORECASE) -> FieldPattern:
    return FieldPattern(re.compile(expr, flags), FIELD_CONFIDENCE_SECONDARY)


# =============================================================================
# Report Detection
# =============================================================================

CCC_MARKERS: Final = ("CCC ONE", "CCC One")
MITCHELL_MARKER_RE: Final = re.compile(r"Mitchell|WorkCenter|Loss\s+vehicle:", re.IGNORECASE)


# =============================================================================
# Vehicle Identity
# =============================================================================

VIN_RE: Final = re.compile(r"\b[A-HJ-NPR-Z0-9]{17}\b")
# Same shape but admitting O/I/Q, which OCR substitutes for 0/1/0
VIN_OCR_RE: Final = re.compile(r"\b[A-Z0-9]{17}\b")
VIN_LABEL_RE: Final = re.compile(r"\bVIN\b\s*[:#]?\s*([A-Z0-9]{17})\b", re.IGNORECASE)
EXT_COLOR_RE: Final = re.compile(r"ext(?:erior)?\s+color", re.IGNORECASE)
VIN_CONTEXT_LINES: Final = 5
VIN_HEADER_LINES: Final = 30
VIN_OCR_FIXES: Final = str.maketrans({"O": "0", "I": "1", "Q": "0"})

# "Loss vehicle: 2019 Land Rover Range Rover Sport | 4 Door Utility"
VEHICLE_LINE_RE: Final = re.compile(
    r"Loss\s+vehicle:?\s*(\d{4})\s+([^|\n]+?)\s*(?:\||$)", re.IGNORECASE | re.MULTILINE
)

CCC_YEAR_PATTERNS: Final = (
    _primary(r"^Year\s+(\d{4})\b", re.IGNORECASE | re.MULTILINE),
)
CCC_MAKE_PATTERNS: Final = (
    _primary(r"^Make\s+([A-Za-z][A-Za-z\- ]*?)\s*$", re.IGNORECASE | re.MULTILINE),
)
CCC_MODEL_PATTERNS: Final = (
    _primary(r"^Model\s+([A-Za-z0-9][A-Za-z0-9\- ]*?)\s*$", re.IGNORECASE | re.MULTILINE),
)
GENERIC_YEAR_PATTERNS: Final = (
    _primary(r"\bModel\s+Year[:\s]+(\d{4})\b"),
    _secondary(r"\bYear[:\s]+(\d{4})\b"),
)


# =============================================================================
# Mileage and Location
# =============================================================================

MILEAGE_PATTERNS: Final[Dict[ReportType, Tuple[FieldPattern, ...]]] = {
    ReportType.CCC_ONE: (
        _primary(r"^Odometer\s+(\d{1,3}(?:,\d{3})*|\d+)\b", re.IGNORECASE | re.MULTILINE),
        _secondary(r"(\d{1,3}(?:,\d{3})+|\d+)\s*miles\b"),
    ),
    ReportType.MITCHELL: (
        _primary(r"(\d{1,3}(?:,\d{3})+|\d+)\s*miles\b"),
        _secondary(r"\b(?:Odometer|Mileage)[:\s]+(\d{1,3}(?:,\d{3})+|\d+)\b"),
    ),
    ReportType.OTHER: (
        _primary(r"\b(?:Odometer|Mileage)[:\s]+(\d{1,3}(?:,\d{3})+|\d+)\b"),
        _secondary(r"(\d{1,3}(?:,\d{3})+|\d+)\s*miles\b"),
    ),
}

_CITY_STATE_ZIP = r"([A-Za-z][A-Za-z .'\-]*,\s*[A-Z]{2}(?:\s+\d{5})?)"

LOCATION_PATTERNS: Final[Dict[ReportType, Tuple[FieldPattern, ...]]] = {
    ReportType.CCC_ONE: (
        _primary(r"^Location\s+" + _CITY_STATE_ZIP + r"\s*$", re.MULTILINE),
        _secondary(r"^Location\s+([A-Z]{2}\s+\d{5})\b", re.MULTILINE),
    ),
    ReportType.MITCHELL: (
        _primary(r"Location[:\s]*([A-Z]{2}\s+\d{5})\b"),
        _secondary(r"^([A-Z]{2}\s+\d{5})$", re.MULTILINE),
    ),
    ReportType.OTHER: (
        _primary(r"Location[:\s]+" + _CITY_STATE_ZIP, 0),
        _secondary(r"Location[:\s]*([A-Z]{2}\s+\d{5})\b"),
    ),
}


# =============================================================================
# Monetary Fields
# =============================================================================

_AMOUNT = r"\$\s*([0-9][0-9,]*(?:\.\d+)?)"

MITCHELL_MARKET_VALUE_PATTERNS: Final = (
    _primary(r"\bMarket\s+Val(?:ue|e)\s*=\s*" + _AMOUNT),
    _primary(r"\bMarket\s+Val(?:ue|e)\s*:\s*" + _AMOUNT),
    _secondary(r"\bMarket\s+Val(?:ue|e)\s+" + _AMOUNT),
    _secondary(r"\bMarket\s*va[lu](?:ue|e)\s*=\s*\$?\s*([0-9][0-9,]*(?:\.\d+)?)"),
)

CCC_MARKET_VALUE_PATTERNS: Final = (
    _primary(r"^Adjusted\s+Vehicle\s+Value\s+" + _AMOUNT, re.IGNORECASE | re.MULTILINE),
    _secondary(r"\bMarket\s+Value\s*[=:]?\s*" + _AMOUNT),
)

SETTLEMENT_VALUE_PATTERNS: Final[Dict[ReportType, Tuple[FieldPattern, ...]]] = {
    ReportType.CCC_ONE: (
        _primary(r"^Total\s+\$\s*([0-9][0-9,]*\s*\.\s*\d{2})", re.IGNORECASE | re.MULTILINE),
        _secondary(r"\bSettlement\s+Value\s*[=:]?\s*" + _AMOUNT),
    ),
    ReportType.MITCHELL: (
        _primary(r"\bSettlement\s+Value\s*=\s*" + _AMOUNT),
        _secondary(r"\bSettlement\s+Value\s*:?\s*" + _AMOUNT),
    ),
    ReportType.OTHER: (
        _primary(r"\bSettlement\s+Value\s*[=:]?\s*" + _AMOUNT),
    ),
}

MARKET_VALUE_PATTERNS: Final[Dict[ReportType, Tuple[FieldPattern, ...]]] = {
    ReportType.CCC_ONE: CCC_MARKET_VALUE_PATTERNS,
    ReportType.MITCHELL: MITCHELL_MARKET_VALUE_PATTERNS,
    ReportType.OTHER: MITCHELL_MARKET_VALUE_PATTERNS,
}
