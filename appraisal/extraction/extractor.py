"""
Field extraction from insurer valuation report text.

Turns raw text (from a PDF text layer or an OCR pass) into a draft
ExtractedVehicleData. Extraction is best effort: missing fields are
left empty and listed in errors, and only text that is not a report
at all raises ExtractionFailure.
"""

import logging
import re
from typing import Dict, Iterable, Optional, Tuple, Union

from ..constants import (
    FIELD_CONFIDENCE_FALLBACK,
    FIELD_CONFIDENCE_PRIMARY,
    FIELD_CONFIDENCE_SECONDARY,
    LOW_EXTRACTION_CONFIDENCE,
    MIN_PRINTABLE_RATIO,
    OCR_MISSING_DECIMAL_DIGITS,
)
from ..errors import ExtractionFailure
from ..models import ExtractedVehicleData, ExtractionMethod, ReportType
from ..validation.vin import decode_make, decode_year
from .manufacturers import ManufacturerTable
from . import patterns as p

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("vin", "year", "make", "model")

Match = Tuple[str, float]


class FieldExtractor:
    """
    Extracts vehicle fields from report text.

    Usage:
        extractor = FieldExtractor()
        record = extractor.extract(text, method="ocr")
    """

    def __init__(self, manufacturers: Optional[ManufacturerTable] = None):
        """
        Args:
            manufacturers: Table used for make/model splitting
                (default: the full built-in table)
        """
        self._manufacturers = manufacturers or ManufacturerTable()

    def extract(
        self,
        text: Union[str, bytes],
        method: Union[ExtractionMethod, str] = ExtractionMethod.STANDARD,
    ) -> ExtractedVehicleData:
        """
        Extract a vehicle record from report text.

        Args:
            text: Raw report text
            method: How the text was produced upstream

        Returns:
            ExtractedVehicleData with per-field confidences

        Raises:
            ExtractionFailure: If the input is empty or not text
            ValueError: If method is not a known extraction method
        """
        text = self._ensure_text(text)
        if isinstance(method, str):
            parsed = ExtractionMethod.from_string(method)
            if parsed is None:
                raise ValueError(f"Unknown extraction method: {method!r}")
            method = parsed

        report_type = self.detect_report_type(text)
        record = ExtractedVehicleData(report_type=report_type, extraction_method=method)

        self._extract_vin(text, record)
        self._extract_vehicle(text, record)
        self._extract_mileage(text, record)
        self._extract_location(text, record)
        self._extract_money(text, record)

        for name in REQUIRED_FIELDS:
            if name not in record.field_confidence:
                record.errors.append(f"Could not find {name} in report")

        record.extraction_confidence = self._overall_confidence(record.field_confidence)
        if record.extraction_confidence < LOW_EXTRACTION_CONFIDENCE:
            record.warnings.append(
                f"Low extraction confidence ({record.extraction_confidence:.0%}); "
                "review all fields"
            )

        logger.info(
            "Extracted %s report: %s (confidence %.2f, %d warnings)",
            report_type.value, record.description or "unknown vehicle",
            record.extraction_confidence, len(record.warnings),
        )
        return record

    # =========================================================================
    # Input and Report Type
    # =========================================================================

    @staticmethod
    def _ensure_text(text: Union[str, bytes]) -> str:
        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ExtractionFailure("input is not UTF-8 text") from exc
        if not isinstance(text, str):
            raise ExtractionFailure(f"expected text, got {type(text).__name__}")
        if not text.strip():
            raise ExtractionFailure("report text is empty")
        if "\x00" in text:
            raise ExtractionFailure("report text contains binary data")

        printable = sum(1 for ch in text if ch.isprintable() or ch.isspace())
        if printable / len(text) < MIN_PRINTABLE_RATIO:
            raise ExtractionFailure("report text is mostly non-printable")
        if not any(ch.isalpha() for ch in text):
            raise ExtractionFailure("report text contains no words")
        return text

    @staticmethod
    def detect_report_type(text: str) -> ReportType:
        if any(marker in text for marker in p.CCC_MARKERS):
            return ReportType.CCC_ONE
        if p.MITCHELL_MARKER_RE.search(text):
            return ReportType.MITCHELL
        return ReportType.OTHER

    # =========================================================================
    # Vehicle Identity
    # =========================================================================

    def _extract_vin(self, text: str, record: ExtractedVehicleData) -> None:
        found = self._find_vin(text)
        if found is None:
            return
        vin, confidence, corrected = found
        record.vin = vin
        record.field_confidence["vin"] = confidence
        if corrected:
            record.warnings.append(f"VIN {vin} was corrected for likely OCR errors")
            logger.warning("OCR-corrected VIN %s", vin)

    def _find_vin(self, text: str) -> Optional[Tuple[str, float, bool]]:
        labelled = p.VIN_LABEL_RE.search(text)
        if labelled and p.VIN_RE.fullmatch(labelled.group(1).upper()):
            return labelled.group(1).upper(), FIELD_CONFIDENCE_PRIMARY, False

        lines = text.splitlines()
        for index, line in enumerate(lines):
            if p.EXT_COLOR_RE.search(line):
                window = "\n".join(lines[index:index + p.VIN_CONTEXT_LINES + 1])
                match = p.VIN_RE.search(window)
                if match:
                    return match.group(0), FIELD_CONFIDENCE_PRIMARY, False

        header = "\n".join(lines[:p.VIN_HEADER_LINES])
        for source in (header, text):
            match = p.VIN_RE.search(source)
            if match and any(ch.isdigit() for ch in match.group(0)):
                return match.group(0), FIELD_CONFIDENCE_SECONDARY, False

        for match in p.VIN_OCR_RE.finditer(text):
            candidate = match.group(0)
            if not (set(candidate) & set("IOQ")) or not any(ch.isdigit() for ch in candidate):
                continue
            fixed = candidate.translate(p.VIN_OCR_FIXES)
            if p.VIN_RE.fullmatch(fixed):
                return fixed, FIELD_CONFIDENCE_FALLBACK, True
        return None

    def _extract_vehicle(self, text: str, record: ExtractedVehicleData) -> None:
        if record.report_type == ReportType.CCC_ONE:
            self._extract_ccc_vehicle(text, record)

        if "year" not in record.field_confidence or "make" not in record.field_confidence:
            line = p.VEHICLE_LINE_RE.search(text)
            if line:
                self._set(record, "year", int(line.group(1)), FIELD_CONFIDENCE_PRIMARY)
                self._split_vehicle_text(line.group(2), record)

        if "year" not in record.field_confidence:
            found = _first_match(text, p.GENERIC_YEAR_PATTERNS)
            if found:
                self._set(record, "year", int(found[0]), found[1])

        if record.vin:
            if "year" not in record.field_confidence:
                year = decode_year(record.vin)
                if year:
                    self._set(record, "year", year, FIELD_CONFIDENCE_FALLBACK)
                    record.warnings.append(f"Year {year} decoded from VIN")
            if "make" not in record.field_confidence:
                make = decode_make(record.vin)
                if make:
                    self._set(record, "make", make, FIELD_CONFIDENCE_FALLBACK)
                    record.warnings.append(f"Make {make} decoded from VIN")

    def _extract_ccc_vehicle(self, text: str, record: ExtractedVehicleData) -> None:
        year = _first_match(text, p.CCC_YEAR_PATTERNS)
        if year:
            self._set(record, "year", int(year[0]), year[1])

        make = _first_match(text, p.CCC_MAKE_PATTERNS)
        if make:
            canonical = self._manufacturers.match(make[0])
            self._set(record, "make", canonical or make[0].strip(), make[1])

        model = _first_match(text, p.CCC_MODEL_PATTERNS)
        if model:
            self._set(record, "model", model[0].strip(), model[1])

    def _split_vehicle_text(self, vehicle_text: str, record: ExtractedVehicleData) -> None:
        make, model, matched = self._manufacturers.split(vehicle_text)
        confidence = FIELD_CONFIDENCE_PRIMARY if matched else FIELD_CONFIDENCE_FALLBACK
        if not matched and make:
            record.warnings.append(
                f"Unrecognised manufacturer in '{vehicle_text.strip()}'; "
                f"using '{make}' as make"
            )
            logger.warning("No manufacturer prefix in %r", vehicle_text)
        if make and "make" not in record.field_confidence:
            self._set(record, "make", make, confidence)
        if model and "model" not in record.field_confidence:
            self._set(record, "model", model, confidence)

    # =========================================================================
    # Mileage, Location, Money
    # =========================================================================

    def _extract_mileage(self, text: str, record: ExtractedVehicleData) -> None:
        found = _first_match(text, p.MILEAGE_PATTERNS[record.report_type])
        if found:
            self._set(record, "mileage", int(found[0].replace(",", "")), found[1])

    def _extract_location(self, text: str, record: ExtractedVehicleData) -> None:
        found = _first_match(text, p.LOCATION_PATTERNS[record.report_type])
        if found:
            self._set(record, "location", " ".join(found[0].split()), found[1])

    def _extract_money(self, text: str, record: ExtractedVehicleData) -> None:
        market = _first_match(text, p.MARKET_VALUE_PATTERNS[record.report_type])
        if market:
            self._set(record, "market_value", parse_amount(market[0]), market[1])
        else:
            record.warnings.append("Market value not found in report")

        settlement = _first_match(text, p.SETTLEMENT_VALUE_PATTERNS[record.report_type])
        if settlement:
            self._set(record, "settlement_value", parse_amount(settlement[0]), settlement[1])
        else:
            record.warnings.append("Settlement value not found in report")

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _set(record: ExtractedVehicleData, name: str, value, confidence: float) -> None:
        setattr(record, name, value)
        record.field_confidence[name] = confidence
        logger.debug("Field %s=%r (confidence %.2f)", name, value, confidence)

    @staticmethod
    def _overall_confidence(field_confidence: Dict[str, float]) -> float:
        if not field_confidence:
            return 0.0
        return round(sum(field_confidence.values()) / len(field_confidence), 4)


def _first_match(text: str, field_patterns: Iterable[p.FieldPattern]) -> Optional[Match]:
    """Return the first captured group of the first matching pattern."""
    for pattern in field_patterns:
        match = pattern.regex.search(text)
        if match:
            return match.group(1), pattern.confidence
    return None


def parse_amount(raw: str) -> float:
    """
    Parse a dollar amount, recovering a decimal point lost to OCR.

    "10,062.32" -> 10062.32; "978221" -> 9782.21
    """
    cleaned = re.sub(r"[,\s]", "", raw)
    if "." not in cleaned and len(cleaned) >= OCR_MISSING_DECIMAL_DIGITS:
        cleaned = f"{cleaned[:-2]}.{cleaned[-2:]}"
    return float(cleaned)

