"""
Total-Loss Valuation Report

Generates a PDF summarising an appraisal: the loss vehicle as extracted,
the comparables used, how each was scored and adjusted, the weighted
market value calculation and how it compares with the insurer's figure.

Uses ReportLab for deterministic PDF generation (same input, same PDF).

Output Structure:
1. Header and Summary
2. Loss Vehicle
3. Comparable Vehicles
4. Market Value Calculation
5. Insurance Comparison
6. Notes and Disclaimer
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from appraisal.pipeline import AppraisalResult
from utils.formatting import format_currency, format_miles, format_percent


# =============================================================================
# Report Generation Result Types
# =============================================================================

@dataclass
class ReportSuccess:
    """Returned when PDF generation succeeds."""
    path: Path
    comparables_included: int


@dataclass
class ReportNoComparables:
    """Returned when there is nothing to report on."""
    message: str = "No comparables were used; valuation report not generated."


ReportResult = Union[ReportSuccess, ReportNoComparables]

DISCLAIMER = (
    "This report is an independent estimate of market value based on the comparable "
    "listings shown. Comparable prices are asking prices adjusted for mileage, equipment "
    "and condition; quality scores weight each comparable by how closely it matches the "
    "loss vehicle. Extracted report fields should be checked against the original "
    "insurer document before this report is relied on."
)


# =============================================================================
# Color Palette
# =============================================================================

class Palette:
    """Print-friendly palette: charcoal text, one muted accent."""
    BLACK = colors.Color(0.1, 0.1, 0.1)
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    SLATE = colors.Color(0.35, 0.38, 0.42)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    PALE_GRAY = colors.Color(0.95, 0.95, 0.95)
    WHITE = colors.white

    ACCENT = colors.Color(0.15, 0.25, 0.4)
    ACCENT_LIGHT = colors.Color(0.92, 0.94, 0.97)

    SUCCESS = colors.Color(0.15, 0.4, 0.25)
    WARNING = colors.Color(0.6, 0.35, 0.1)


# =============================================================================
# Style Configuration
# =============================================================================

def get_report_styles():
    """Paragraph styles for the valuation report."""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='ReportTitle',
        parent=styles['Normal'],
        fontSize=18,
        leading=22,
        textColor=Palette.CHARCOAL,
        alignment=TA_LEFT,
        fontName='Helvetica-Bold',
        spaceAfter=4*mm,
    ))

    styles.add(ParagraphStyle(
        name='ReportSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
        textColor=Palette.SLATE,
        fontName='Helvetica',
        spaceAfter=6*mm,
    ))

    styles.add(ParagraphStyle(
        name='SectionTitle',
        parent=styles['Normal'],
        fontSize=13,
        leading=17,
        textColor=Palette.ACCENT,
        fontName='Helvetica-Bold',
        spaceBefore=16,
        spaceAfter=8,
    ))

    styles.add(ParagraphStyle(
        name='HeadlineValue',
        parent=styles['Normal'],
        fontSize=20,
        leading=24,
        textColor=Palette.BLACK,
        fontName='Helvetica-Bold',
        spaceAfter=2*mm,
    ))

    styles['BodyText'].fontSize = 9.5
    styles['BodyText'].leading = 13.5
    styles['BodyText'].textColor = Palette.CHARCOAL
    styles['BodyText'].spaceAfter = 5
    styles['BodyText'].fontName = 'Helvetica'

    styles.add(ParagraphStyle(
        name='TableCell',
        parent=styles['Normal'],
        fontSize=8,
        leading=10,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica',
    ))

    styles.add(ParagraphStyle(
        name='SmallText',
        parent=styles['Normal'],
        fontSize=8,
        leading=11,
        textColor=Palette.GRAY,
        fontName='Helvetica',
        spaceAfter=3,
    ))

    styles.add(ParagraphStyle(
        name='Disclaimer',
        parent=styles['Normal'],
        fontSize=7.5,
        leading=11,
        textColor=Palette.GRAY,
        alignment=TA_JUSTIFY,
        fontName='Helvetica',
        spaceBefore=14,
    ))

    return styles


def _table_style(header_rows: int = 1) -> TableStyle:
    return TableStyle([
        ('FONTNAME', (0, 0), (-1, header_rows - 1), 'Helvetica-Bold'),
        ('FONTNAME', (0, header_rows), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('BACKGROUND', (0, 0), (-1, header_rows - 1), Palette.CHARCOAL),
        ('TEXTCOLOR', (0, 0), (-1, header_rows - 1), Palette.WHITE),
        ('TEXTCOLOR', (0, header_rows), (-1, -1), Palette.CHARCOAL),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
        ('TOPPADDING', (0, 0), (-1, -1), 2*mm),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2*mm),
        ('LEFTPADDING', (0, 0), (-1, -1), 2*mm),
        ('RIGHTPADDING', (0, 0), (-1, -1), 2*mm),
        ('ROWBACKGROUNDS', (0, header_rows), (-1, -1), [Palette.WHITE, Palette.PALE_GRAY]),
    ])


def _key_value_style() -> TableStyle:
    return TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('TEXTCOLOR', (0, 0), (0, -1), Palette.SLATE),
        ('TEXTCOLOR', (1, 0), (1, -1), Palette.CHARCOAL),
        ('BACKGROUND', (0, 0), (0, -1), Palette.ACCENT_LIGHT),
        ('GRID', (0, 0), (-1, -1), 0.5, Palette.LIGHT_GRAY),
        ('TOPPADDING', (0, 0), (-1, -1), 1.5*mm),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 1.5*mm),
        ('LEFTPADDING', (0, 0), (-1, -1), 2*mm),
    ])


# =============================================================================
# Report Generator
# =============================================================================

class ValuationReportGenerator:
    """
    Builds the valuation report PDF from an AppraisalResult.

    Usage:
        generator = ValuationReportGenerator()
        result = generator.generate_report(appraisal, Path("output/report.pdf"))
    """

    PAGE_WIDTH, PAGE_HEIGHT = LETTER
    MARGIN_LEFT = 18*mm
    MARGIN_RIGHT = 18*mm
    MARGIN_TOP = 18*mm
    MARGIN_BOTTOM = 20*mm

    def __init__(self, title: str = "Total-Loss Vehicle Valuation"):
        self.title = title
        self.styles = get_report_styles()

    def generate_report(self, appraisal: AppraisalResult, output_path: Path) -> ReportResult:
        """
        Write the report to output_path.

        Returns:
            ReportSuccess with the path written, or ReportNoComparables
        """
        if not appraisal.comparables:
            return ReportNoComparables()

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.generate_to_buffer(appraisal))
        return ReportSuccess(path=output_path, comparables_included=len(appraisal.comparables))

    def generate_to_buffer(self, appraisal: AppraisalResult) -> bytes:
        """Generate PDF and return as bytes (for testing or streaming)."""
        buffer = BytesIO()
        self._build_document(appraisal, buffer)
        return buffer.getvalue()

    def _build_document(self, appraisal: AppraisalResult, buffer: BytesIO) -> None:
        doc = SimpleDocTemplate(
            buffer,
            pagesize=LETTER,
            leftMargin=self.MARGIN_LEFT,
            rightMargin=self.MARGIN_RIGHT,
            topMargin=self.MARGIN_TOP,
            bottomMargin=self.MARGIN_BOTTOM,
            title=self.title,
            subject=appraisal.loss_vehicle.description or "Vehicle valuation",
        )

        story = []
        story.extend(self._build_header(appraisal))
        story.extend(self._build_loss_vehicle(appraisal))
        story.extend(self._build_comparables(appraisal))
        story.extend(self._build_calculation(appraisal))
        story.extend(self._build_insurance_comparison(appraisal))
        story.extend(self._build_notes(appraisal))

        doc.build(story, onFirstPage=self._draw_page_frame, onLaterPages=self._draw_page_frame)

    def _draw_page_frame(self, canvas_obj: canvas.Canvas, doc) -> None:
        """Footer: title left, page number right."""
        canvas_obj.saveState()
        canvas_obj.setFont('Helvetica', 7)
        canvas_obj.setFillColor(Palette.GRAY)
        canvas_obj.drawString(self.MARGIN_LEFT, self.MARGIN_BOTTOM - 10*mm, self.title.upper())
        canvas_obj.drawRightString(
            self.PAGE_WIDTH - self.MARGIN_RIGHT,
            self.MARGIN_BOTTOM - 10*mm,
            f"{doc.page}",
        )
        canvas_obj.restoreState()

    def _para(self, text: str, style: str = 'TableCell') -> Paragraph:
        return Paragraph(escape(text), self.styles[style])

    # =========================================================================
    # Sections
    # =========================================================================

    def _build_header(self, appraisal: AppraisalResult) -> list:
        analysis = appraisal.analysis
        vehicle = appraisal.loss_vehicle
        elements = [
            Paragraph(escape(self.title), self.styles['ReportTitle']),
            Paragraph(
                escape(
                    f"{vehicle.description or 'Unknown vehicle'}"
                    f"{'  |  VIN ' + vehicle.vin if vehicle.vin else ''}"
                    f"  |  {analysis.calculated_at:%B %d, %Y}"
                ),
                self.styles['ReportSubtitle'],
            ),
            Paragraph("Calculated Market Value", self.styles['SmallText']),
            Paragraph(
                format_currency(analysis.calculated_market_value),
                self.styles['HeadlineValue'],
            ),
            Paragraph(
                f"{analysis.confidence_label.value} confidence ({analysis.confidence_level}/100) "
                f"from {analysis.comparables_count} comparable"
                f"{'s' if analysis.comparables_count != 1 else ''}",
                self.styles['BodyText'],
            ),
        ]
        return elements

    def _build_loss_vehicle(self, appraisal: AppraisalResult) -> list:
        vehicle = appraisal.loss_vehicle
        rows = [
            ["VIN", vehicle.vin or "N/A"],
            ["Year / Make / Model", vehicle.description or "N/A"],
            ["Mileage", format_miles(vehicle.mileage)],
            ["Location", vehicle.location or "N/A"],
            ["Condition", vehicle.condition.value if vehicle.condition else "Not stated"],
            ["Insurer market value", format_currency(vehicle.market_value)],
            ["Insurer settlement value", format_currency(vehicle.settlement_value)],
            ["Report type", vehicle.report_type.value],
            ["Extraction confidence", format_percent(vehicle.extraction_confidence * 100, 0)],
        ]
        table = Table(rows, colWidths=[55*mm, 115*mm])
        table.setStyle(_key_value_style())

        elements = [Paragraph("Loss Vehicle", self.styles['SectionTitle']), table]

        flagged = appraisal.flagged_fields
        if flagged:
            elements.append(Spacer(1, 6))
            for name in flagged:
                result = appraisal.field_validation[name]
                issues = list(result.errors) + list(result.warnings)
                elements.append(self._para(
                    f"{name.replace('_', ' ').title()} ({result.confidence}/100): "
                    f"{'; '.join(issues)}",
                    'SmallText',
                ))
        return elements

    def _build_comparables(self, appraisal: AppraisalResult) -> list:
        headers = ["#", "Vehicle", "Source", "Mileage", "Distance", "List", "Adjusted", "Score"]
        rows = [headers]
        for index, comp in enumerate(appraisal.comparables, 1):
            rows.append([
                str(index),
                self._para(comp.description or comp.id),
                self._para(comp.source or "-"),
                format_miles(comp.mileage),
                format_miles(comp.distance_from_loss),
                format_currency(comp.list_price, cents=False),
                format_currency(comp.adjusted_price, cents=False),
                f"{comp.quality_score:.1f}" if comp.quality_score is not None else "-",
            ])

        table = Table(
            rows,
            colWidths=[8*mm, 45*mm, 22*mm, 20*mm, 18*mm, 20*mm, 20*mm, 15*mm],
            repeatRows=1,
        )
        style = _table_style()
        style.add('ALIGN', (3, 0), (-1, -1), 'RIGHT')
        table.setStyle(style)

        elements = [Paragraph("Comparable Vehicles", self.styles['SectionTitle']), table]

        for index, comp in enumerate(appraisal.comparables, 1):
            lines = []
            if comp.quality_score_breakdown:
                lines.extend(comp.quality_score_breakdown.explanations.values())
            if comp.adjustments:
                adj = comp.adjustments
                lines.append(
                    f"Adjustments: mileage {format_currency(adj.mileage.amount)}, "
                    f"equipment {format_currency(adj.equipment.amount)}, "
                    f"condition {format_currency(adj.condition.amount)}"
                )
            validation = appraisal.comparable_validation.get(comp.id)
            if validation:
                lines.extend(f"Check: {issue.message}" for issue in validation.errors + validation.warnings)
            if lines:
                block = [self._para(f"#{index} {comp.description or comp.id}", 'BodyText')]
                block.extend(self._para(line, 'SmallText') for line in lines)
                elements.append(KeepTogether(block))
        return elements

    def _build_calculation(self, appraisal: AppraisalResult) -> list:
        breakdown = appraisal.analysis.calculation_breakdown
        rows = [["Step", "Description", "Calculation", "Result"]]
        for step in breakdown.steps:
            rows.append([
                str(step.step),
                self._para(step.description),
                self._para(step.calculation),
                f"{step.result:,.2f}",
            ])
        table = Table(rows, colWidths=[12*mm, 50*mm, 80*mm, 28*mm])
        style = _table_style()
        style.add('ALIGN', (3, 0), (3, -1), 'RIGHT')
        table.setStyle(style)

        factors = appraisal.analysis.confidence_factors
        return [
            Paragraph("Market Value Calculation", self.styles['SectionTitle']),
            Paragraph(
                "Market value is the quality-weighted average of adjusted comparable prices.",
                self.styles['BodyText'],
            ),
            table,
            Spacer(1, 6),
            self._para(
                f"Confidence: {factors.count_points} points for {factors.comparable_count} "
                f"comparables, {factors.score_points} for score spread "
                f"(std dev {factors.score_std_dev:.1f}), {factors.price_points} for price "
                f"spread (CV {factors.price_coefficient_of_variation:.3f})",
                'SmallText',
            ),
        ]

    def _build_insurance_comparison(self, appraisal: AppraisalResult) -> list:
        analysis = appraisal.analysis
        elements = [Paragraph("Insurance Comparison", self.styles['SectionTitle'])]
        if analysis.insurance_value is None:
            elements.append(Paragraph(
                "No insurer value was found in the report.", self.styles['BodyText']
            ))
            return elements

        rows = [
            ["Insurer value", format_currency(analysis.insurance_value)],
            ["Calculated market value", format_currency(analysis.calculated_market_value)],
            ["Difference", format_currency(analysis.value_difference)],
            ["Difference (%)", format_percent(analysis.value_difference_percentage, signed=True)],
        ]
        table = Table(rows, colWidths=[55*mm, 115*mm])
        style = _key_value_style()
        verdict_color = Palette.WARNING if analysis.is_undervalued else Palette.SUCCESS
        style.add('TEXTCOLOR', (1, 2), (1, 3), verdict_color)
        table.setStyle(style)
        elements.append(table)

        verdict = (
            "The insurer's figure is below the calculated market value."
            if analysis.is_undervalued
            else "The insurer's figure is at or above the calculated market value."
        )
        elements.append(Spacer(1, 6))
        elements.append(Paragraph(verdict, self.styles['BodyText']))
        return elements

    def _build_notes(self, appraisal: AppraisalResult) -> list:
        elements = []
        notes: List[str] = list(appraisal.notes) + list(appraisal.loss_vehicle.warnings)
        if notes:
            elements.append(Paragraph("Notes", self.styles['SectionTitle']))
            elements.extend(self._para(f"- {note}", 'SmallText') for note in notes)
        elements.append(Paragraph(escape(DISCLAIMER), self.styles['Disclaimer']))
        return elements


def generate_report(appraisal: AppraisalResult, output_path: Path) -> ReportResult:
    """
    Generate a valuation report PDF.

    Example:
        result = generate_report(appraisal, Path("output/valuation.pdf"))
        if isinstance(result, ReportSuccess):
            print(f"Report generated: {result.path}")
        else:
            print(result.message)
    """
    return ValuationReportGenerator().generate_report(appraisal, output_path)
