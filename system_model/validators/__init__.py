"""
Validators package for parameter checks and advisory findings.
"""

from .parameter_validator import ParameterValidator, check_value, check_ordered
from .validation_result import ValidationResult, ValidationIssue, ValidationSeverity

__all__ = [
    'ParameterValidator',
    'check_value',
    'check_ordered',
    'ValidationResult',
    'ValidationIssue',
    'ValidationSeverity',
]
