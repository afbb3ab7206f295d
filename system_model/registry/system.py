"""
The system document: the top-level aggregate threaded through every operation.
"""

import copy
import logging
from typing import Dict, Optional, Type

from ..core.models import Component
from ..validators.parameter_validator import check_value
from .registry import ComponentRegistry, ComponentView, Predicate

logger = logging.getLogger(__name__)


class SystemDocument:
    """
    Owns the component registry and the two global per-unit scalars.

    Operations never reach for ambient state: they receive the document they
    act on. Consumers that need a stable view for a long computation take a
    :meth:`snapshot` instead of holding on to the live document.

    Attributes:
        base_power: System base power in MVA, finite and > 0
        base_frequency: System base frequency in Hz, finite and > 0
        name: Optional document name
    """

    def __init__(self, base_power: float = 100.0, base_frequency: float = 60.0, name: Optional[str] = None):
        check_value(name or "system", "base_power", base_power, "positive")
        check_value(name or "system", "base_frequency", base_frequency, "positive")
        self.base_power = float(base_power)
        self.base_frequency = float(base_frequency)
        self.name = name
        self.registry = ComponentRegistry()

    def add_component(self, component: Component) -> Component:
        return self.registry.add(component)

    def get_component(self, component_type: Type[Component], name: str) -> Component:
        return self.registry.get(component_type, name)

    def remove_component(self, name: str) -> Component:
        return self.registry.remove(name)

    def replace_component(self, component: Component) -> Component:
        return self.registry.replace(component)

    def get_components(self, component_type: Type[Component] = Component, predicate: Optional[Predicate] = None) -> ComponentView:
        return self.registry.iterate(component_type, predicate)

    def snapshot(self) -> "SystemDocument":
        """Independent copy; later edits of either document do not show in the other."""
        clone = SystemDocument.__new__(SystemDocument)
        clone.base_power = self.base_power
        clone.base_frequency = self.base_frequency
        clone.name = copy.copy(self.name)
        clone.registry = self.registry.copy()
        logger.debug(f"Snapshot taken with {len(clone.registry)} components")
        return clone

    def component_counts(self) -> Dict[str, int]:
        """Number of components per variant, in first-seen order."""
        counts: Dict[str, int] = {}
        for component in self.registry.iterate():
            counts[component.variant] = counts.get(component.variant, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self.registry)

    def __contains__(self, name: str) -> bool:
        return name in self.registry

    def __eq__(self, other) -> bool:
        if not isinstance(other, SystemDocument):
            return NotImplemented
        return (
            self.name == other.name
            and self.base_power == other.base_power
            and self.base_frequency == other.base_frequency
            and self.registry.as_dict() == other.registry.as_dict()
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (f"SystemDocument(name={self.name!r}, base_power={self.base_power}, "
                f"base_frequency={self.base_frequency}, components={len(self.registry)})")
