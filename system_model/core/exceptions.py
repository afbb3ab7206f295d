"""
Custom exceptions for the system model package.

Every error carries the name of the offending component and, where it
applies, the field or invariant that was violated, so callers can assert on
the exact cause.
"""

from typing import Any, Dict, Optional


class SystemModelError(Exception):
    """Base exception class for system model errors."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}

    def __str__(self) -> str:
        base_msg = self.message
        if self.component:
            base_msg = f"[{self.component}] {base_msg}"

        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base_msg = f"{base_msg} (Details: {details_str})"

        return base_msg


class ConfigurationError(SystemModelError):
    """Raised when the sub-model schema catalogue is invalid or missing."""
    pass


class DuplicateNameError(SystemModelError):
    """Raised when a component name (or bus number) is already taken."""

    def __init__(self, component: str, field: str = "name", **kwargs):
        message = kwargs.pop("message", None) or f"duplicate {field}"
        super().__init__(message, component=component, **kwargs)
        self.field = field


class NotFoundError(SystemModelError):
    """Raised when a lookup does not resolve to a registered component."""

    def __init__(self, component: str, expected: Optional[str] = None, **kwargs):
        message = kwargs.pop("message", None)
        if message is None:
            message = f"no {expected} named '{component}'" if expected else f"'{component}' not found"
        super().__init__(message, component=component, **kwargs)
        self.expected = expected


class InvalidReferenceError(SystemModelError):
    """Raised when a reference field does not resolve to a suitable component."""

    def __init__(self, component: str, field: str, target: Optional[str], reason: str = "does not resolve"):
        super().__init__(
            f"reference '{field}' -> '{target}' {reason}",
            component=component,
        )
        self.field = field
        self.target = target


class ReferentialIntegrityError(SystemModelError):
    """Raised when removing a component that other components still reference."""

    def __init__(self, component: str, referrers):
        self.referrers = sorted(referrers)
        super().__init__(
            f"still referenced by {', '.join(self.referrers)}",
            component=component,
        )


class ParameterRangeError(SystemModelError):
    """Raised when a parameter is missing, unknown, non-finite or out of range."""

    def __init__(self, component: Optional[str], field: str, reason: str, value: Any = None):
        details = {"value": value} if value is not None else None
        super().__init__(f"parameter '{field}' {reason}", component=component, details=details)
        self.field = field
        self.value = value


class IncompleteCompositionError(SystemModelError):
    """Raised when a dynamic device lacks a required role or has an extra one."""

    def __init__(self, component: str, missing=(), unexpected=()):
        self.missing = list(missing)
        self.unexpected = list(unexpected)
        parts = []
        if self.missing:
            parts.append(f"missing roles: {', '.join(self.missing)}")
        if self.unexpected:
            parts.append(f"unrecognized roles: {', '.join(self.unexpected)}")
        super().__init__("; ".join(parts) or "incomplete composition", component=component)


class TypeMismatchError(SystemModelError):
    """Raised when two components or a block and a role are incompatible."""
    pass


class AlreadyAttachedError(SystemModelError):
    """Raised when a static injection already has a dynamic device bound."""

    def __init__(self, component: str, attached: str):
        super().__init__(f"already attached to '{attached}'", component=component)
        self.attached = attached


class DeserializationError(SystemModelError):
    """Raised when a persisted document violates an invariant on reload."""

    def __init__(self, message: str, component: Optional[str] = None, invariant: str = "document_shape"):
        super().__init__(message, component=component, details={"invariant": invariant})
        self.invariant = invariant
