"""
Capability roles a sub-model block can fill inside a dynamic device.
"""

from enum import Enum
from typing import Union


class Role(Enum):
    """Closed set of capability roles, in declaration order."""
    MACHINE = "Machine"
    SHAFT = "Shaft"
    AVR = "AVR"
    GOVERNOR = "Governor"
    PSS = "PSS"
    CONVERTER = "Converter"
    OUTER_CONTROL = "OuterControl"
    INNER_CONTROL = "InnerControl"
    DC_SOURCE = "DCSource"
    FREQUENCY_ESTIMATOR = "FrequencyEstimator"
    FILTER = "Filter"

    @classmethod
    def parse(cls, value: Union["Role", str]) -> "Role":
        """
        Accept a Role, its value (``"OuterControl"``) or its member name
        (``"OUTER_CONTROL"``).

        Raises:
            ValueError: if ``value`` names no role
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value in cls.__members__:
                return cls[value]
            return cls(value)
        raise ValueError(f"{value!r} is not a valid Role")


def role_order(role: Role) -> int:
    """Position of ``role`` in declaration order."""
    return list(Role).index(role)
