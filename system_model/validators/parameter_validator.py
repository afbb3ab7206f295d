"""
Parameter validator for component and sub-model parameters.

Rules are named strings shared by component classes and the sub-model schema
catalogue: ``finite``, ``positive``, ``non_negative``, ``integer``.
"""

import math
from numbers import Real
from typing import Any, Iterable, Mapping, Optional, Tuple

from ..core.exceptions import ParameterRangeError

RULES = ("finite", "positive", "non_negative", "integer")


def check_value(
    owner: Optional[str],
    field: str,
    value: Any,
    rule: str = "finite",
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> None:
    """
    Check a single parameter value against a rule and optional bounds.

    Args:
        owner: Name of the component or block that owns the parameter
        field: Parameter name
        value: Parameter value
        rule: One of ``RULES``
        minimum: Optional inclusive lower bound
        maximum: Optional inclusive upper bound

    Raises:
        ParameterRangeError: naming ``owner`` and ``field`` on the first violation
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ParameterRangeError(owner, field, "must be a real number", value)
    if not math.isfinite(value):
        raise ParameterRangeError(owner, field, "must be finite", value)

    if rule == "positive" and not value > 0:
        raise ParameterRangeError(owner, field, "must be > 0", value)
    if rule == "non_negative" and value < 0:
        raise ParameterRangeError(owner, field, "must be >= 0", value)
    if rule == "integer" and int(value) != value:
        raise ParameterRangeError(owner, field, "must be an integer", value)

    if minimum is not None and value < minimum:
        raise ParameterRangeError(owner, field, f"must be >= {minimum}", value)
    if maximum is not None and value > maximum:
        raise ParameterRangeError(owner, field, f"must be <= {maximum}", value)


def check_ordered(owner: Optional[str], params: Mapping[str, Any], pairs: Iterable[Tuple[str, str]]) -> None:
    """Check that every ``(low, high)`` pair satisfies ``low <= high``."""
    for low, high in pairs:
        if params[low] > params[high]:
            raise ParameterRangeError(
                owner, low, f"must not exceed '{high}' ({params[high]})", params[low]
            )


class ParameterValidator:
    """
    Validates the numeric parameters of static components.
    """

    def validate(self, component) -> None:
        """
        Validate every constrained parameter of ``component``.

        Fields are checked in declaration order, so the first violation
        reported is deterministic.

        Raises:
            ParameterRangeError: naming the component and the offending field
        """
        params = component.parameters()
        for field, rule in component.CONSTRAINTS.items():
            check_value(component.name, field, params[field], rule)
        check_ordered(component.name, params, component.ORDERED_PAIRS)
