"""
Validation result classes for storing advisory check outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single finding, located at a component or a group of components."""

    severity: ValidationSeverity
    message: str
    location: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        location_str = f" at {self.location}" if self.location else ""
        return f"{self.severity.value.upper()}: {self.message}{location_str}"


class ValidationResult:
    """
    Stores validation findings: errors, warnings and info messages.
    """

    def __init__(self, is_valid: bool = True):
        self.is_valid = is_valid
        self.issues: List[ValidationIssue] = []
        self.details: Dict[str, Any] = {}

    def _add(self, severity: ValidationSeverity, message: str, location: Optional[str], metadata) -> None:
        self.issues.append(ValidationIssue(severity, message, location, dict(metadata)))

    def add_error(self, message: str, location: Optional[str] = None, **metadata) -> None:
        """Add an error message."""
        self._add(ValidationSeverity.ERROR, message, location, metadata)
        self.is_valid = False

    def add_warning(self, message: str, location: Optional[str] = None, **metadata) -> None:
        """Add a warning message."""
        self._add(ValidationSeverity.WARNING, message, location, metadata)

    def add_info(self, message: str, location: Optional[str] = None, **metadata) -> None:
        """Add an info message."""
        self._add(ValidationSeverity.INFO, message, location, metadata)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity is ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity is ValidationSeverity.WARNING]

    @property
    def infos(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity is ValidationSeverity.INFO]

    def merge(self, other: 'ValidationResult') -> None:
        """Merge another validation result into this one."""
        self.issues.extend(other.issues)
        self.details.update(other.details)

        if not other.is_valid:
            self.is_valid = False

    def get_summary(self) -> Dict[str, int]:
        """Get a summary of validation results."""
        return {
            'errors': len(self.errors),
            'warnings': len(self.warnings),
            'infos': len(self.infos)
        }

    def __str__(self) -> str:
        summary = self.get_summary()
        status = "VALID" if self.is_valid else "INVALID"
        return f"ValidationResult({status}, errors={summary['errors']}, warnings={summary['warnings']}, infos={summary['infos']})"
