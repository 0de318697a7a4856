"""
Exceptions raised by the appraisal core.

Field-level validation problems are never raised; they are returned
as ValidationResult errors and warnings. Only unusable input and
aggregation preconditions stop processing.
"""


class ExtractionFailure(ValueError):
    """Input cannot be treated as report text at all."""

    code = "EXTRACTION_FAILURE"

    def __init__(self, reason: str):
        super().__init__(f"{self.code}: {reason}")
        self.reason = reason


class AggregationPreconditionError(ValueError):
    """Comparables handed to the aggregator cannot produce a market value."""
