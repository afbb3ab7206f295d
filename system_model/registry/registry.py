"""
Name-indexed component registry.

The registry owns every component of a system. All mutations are serialized
through one re-entrant lock and either apply completely or leave the
registry exactly as it was. Reads take the same lock, so they never observe
a half-applied change.
"""

import logging
import threading
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple, Type

from ..core.exceptions import (
    AlreadyAttachedError,
    DuplicateNameError,
    InvalidReferenceError,
    NotFoundError,
    ReferentialIntegrityError,
    TypeMismatchError,
)
from ..core.models import Bus, Component, ComponentKind
from ..validators.parameter_validator import ParameterValidator

logger = logging.getLogger(__name__)

Predicate = Callable[[Component], bool]


class ComponentView:
    """
    Lazy, re-iterable view over a snapshot of registry contents.

    The snapshot is taken when the view is created; later registry
    mutations do not affect it. Every ``iter()`` starts a fresh traversal.
    """

    def __init__(self, snapshot: Tuple[Component, ...], component_type: Type[Component], predicate: Optional[Predicate]):
        self._snapshot = snapshot
        self._component_type = component_type
        self._predicate = predicate

    def __iter__(self) -> Iterator[Component]:
        for component in self._snapshot:
            if not isinstance(component, self._component_type):
                continue
            if self._predicate is not None and not self._predicate(component):
                continue
            yield component

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def names(self) -> List[str]:
        return [c.name for c in self]

    def __repr__(self) -> str:
        return f"ComponentView({self._component_type.__name__}, snapshot={len(self._snapshot)})"


class ComponentRegistry:
    """
    Insertion-ordered container of uniquely named components.

    Besides the name index it keeps three derived indexes, always updated
    together with the name index:

    - referrers: target name -> names of components referencing it
    - attachments: static injection name -> attached dynamic device name
    - bus numbers: bus number -> bus name
    """

    def __init__(self) -> None:
        self._components: Dict[str, Component] = {}
        self._referrers: Dict[str, Set[str]] = {}
        self._attachments: Dict[str, str] = {}
        self._bus_numbers: Dict[int, str] = {}
        self._lock = threading.RLock()
        self._parameter_validator = ParameterValidator()

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing registry access; hold it to group several operations."""
        return self._lock

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def add(self, component: Component) -> Component:
        """
        Register a new component.

        Raises:
            DuplicateNameError: if the name (or a bus number) is taken
            InvalidReferenceError: if a reference field does not resolve
            ParameterRangeError: if a parameter is out of range
            AlreadyAttachedError: if a dynamic device targets an occupied injection
            TypeMismatchError: if a dynamic device targets an incompatible injection
        """
        with self._lock:
            if component.name in self._components:
                raise DuplicateNameError(component.name)
            self._check(component)
            self._components[component.name] = component
            self._index(component)
        logger.debug(f"Added {component.variant} '{component.name}'")
        return component

    def replace(self, component: Component) -> Component:
        """
        Replace a registered component by a new instance with the same name.

        The new instance goes through every check of :meth:`add`, must keep
        the same kind, and must stay compatible with components that
        reference it. The insertion position is preserved.
        """
        with self._lock:
            current = self._components.get(component.name)
            if current is None:
                raise NotFoundError(component.name)
            if current.kind is not component.kind:
                raise TypeMismatchError(
                    f"cannot replace a {current.kind.value} with a {component.kind.value}",
                    component=component.name,
                )
            self._check(component)
            for referrer_name in self._referrers.get(component.name, ()):
                referrer = self._components[referrer_name]
                if referrer.kind is ComponentKind.DYNAMIC_INJECTION and not component.accepts(referrer):
                    raise TypeMismatchError(
                        f"{component.variant} cannot carry attached {referrer.variant} '{referrer_name}'",
                        component=component.name,
                    )
            self._unindex(current)
            self._components[component.name] = component
            self._index(component)
        logger.debug(f"Replaced {component.variant} '{component.name}'")
        return component

    def remove(self, name: str) -> Component:
        """
        Remove a component that nothing else references.

        Raises:
            NotFoundError: if ``name`` is not registered
            ReferentialIntegrityError: if other components still reference it
        """
        with self._lock:
            component = self._components.get(name)
            if component is None:
                raise NotFoundError(name)
            referrers = self._referrers.get(name)
            if referrers:
                raise ReferentialIntegrityError(name, referrers)
            self._unindex(component)
            del self._components[name]
        logger.debug(f"Removed {component.variant} '{name}'")
        return component

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get(self, component_type: Type[Component], name: str) -> Component:
        """
        Return the component called ``name`` if it is a ``component_type``.

        Raises:
            NotFoundError: if absent or of another type
        """
        with self._lock:
            component = self._components.get(name)
        if component is None or not isinstance(component, component_type):
            raise NotFoundError(name, expected=component_type.__name__)
        return component

    def iterate(self, component_type: Type[Component] = Component, predicate: Optional[Predicate] = None) -> ComponentView:
        """Matching components in insertion order, over a snapshot taken now."""
        with self._lock:
            snapshot = tuple(self._components.values())
        return ComponentView(snapshot, component_type, predicate)

    def attached_to(self, static_name: str) -> Optional[str]:
        """Name of the dynamic device attached to ``static_name``, if any."""
        with self._lock:
            return self._attachments.get(static_name)

    def referrers(self, name: str) -> List[str]:
        """Sorted names of the components referencing ``name``."""
        with self._lock:
            return sorted(self._referrers.get(name, ()))

    def names(self) -> List[str]:
        with self._lock:
            return list(self._components)

    def as_dict(self) -> Dict[str, Component]:
        """Name -> component mapping, copied under the lock."""
        with self._lock:
            return dict(self._components)

    def copy(self) -> "ComponentRegistry":
        """Independent registry sharing the immutable components; later edits do not show."""
        with self._lock:
            components = dict(self._components)
        clone = ComponentRegistry()
        for component in components.values():
            clone._components[component.name] = component
            clone._index(component)
        return clone

    def __len__(self) -> int:
        with self._lock:
            return len(self._components)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._components

    def __repr__(self) -> str:
        return f"ComponentRegistry(components={len(self)})"

    # ------------------------------------------------------------------ #
    # Checks and indexes; callers hold the lock
    # ------------------------------------------------------------------ #

    def _check(self, component: Component) -> None:
        self._parameter_validator.validate(component)
        component.check_structure()

        for field, target in component.references().items():
            expected = component.REFERENCE_KINDS[field]
            referenced = self._components.get(target)
            if referenced is None:
                raise InvalidReferenceError(component.name, field, target)
            if referenced.kind is not expected:
                raise InvalidReferenceError(
                    component.name, field, target,
                    f"is a {referenced.kind.value}, expected a {expected.value}",
                )
            if component.kind is ComponentKind.DYNAMIC_INJECTION:
                attached = self._attachments.get(target)
                if attached is not None and attached != component.name:
                    raise AlreadyAttachedError(target, attached)
                if not referenced.accepts(component):
                    raise TypeMismatchError(
                        f"{component.variant} cannot be attached to {referenced.variant} '{target}'",
                        component=component.name,
                    )

        if isinstance(component, Bus):
            owner = self._bus_numbers.get(component.number)
            if owner is not None and owner != component.name:
                raise DuplicateNameError(
                    component.name, field="number",
                    message=f"bus number {component.number} already used by '{owner}'",
                )

    def _index(self, component: Component) -> None:
        for field, target in component.references().items():
            self._referrers.setdefault(target, set()).add(component.name)
            if component.kind is ComponentKind.DYNAMIC_INJECTION:
                self._attachments[target] = component.name
        if isinstance(component, Bus):
            self._bus_numbers[component.number] = component.name

    def _unindex(self, component: Component) -> None:
        for field, target in component.references().items():
            names = self._referrers.get(target)
            if names is not None:
                names.discard(component.name)
                if not names:
                    del self._referrers[target]
            if component.kind is ComponentKind.DYNAMIC_INJECTION and self._attachments.get(target) == component.name:
                del self._attachments[target]
        if isinstance(component, Bus) and self._bus_numbers.get(component.number) == component.name:
            del self._bus_numbers[component.number]
