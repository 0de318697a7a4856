"""
Reporting for total-loss appraisals.

Usage:
    from reporting import ValuationReportGenerator

    pdf_bytes = ValuationReportGenerator().generate_to_buffer(appraisal)
"""

from .pdf_generator import (
    ReportNoComparables,
    ReportResult,
    ReportSuccess,
    ValuationReportGenerator,
    generate_report,
)

__all__ = [
    "ValuationReportGenerator",
    "ReportSuccess",
    "ReportNoComparables",
    "ReportResult",
    "generate_report",
]
