"""
Field and comparable validation.
"""

from .validator import DataValidator
from .comparable import ComparableValidator, ComparableValidationResult, ComparableIssue, IssueCode
from .vin import compute_check_digit, has_valid_check_digit

__all__ = [
    "DataValidator",
    "ComparableValidator",
    "ComparableValidationResult",
    "ComparableIssue",
    "IssueCode",
    "compute_check_digit",
    "has_valid_check_digit",
]
