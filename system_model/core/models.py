"""
Core data models for static power system components.

Components are immutable records. Cross references (branch endpoints, the bus
of an injection) are stored as component names and resolved through the
registry on demand, never as direct object links.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Tuple, Type

from .exceptions import InvalidReferenceError, NotFoundError, ParameterRangeError


class ComponentKind(Enum):
    """Discriminating tag shared by every component."""
    BUS = "Bus"
    BRANCH = "Branch"
    STATIC_INJECTION = "StaticInjection"
    DYNAMIC_INJECTION = "DynamicInjection"


class BusType(Enum):
    """Power-flow role of a bus."""
    REF = "REF"
    PV = "PV"
    PQ = "PQ"


# variant name -> concrete component class, filled by Component.__init_subclass__
_VARIANTS: Dict[str, Type["Component"]] = {}


def component_class(variant: str) -> Type["Component"]:
    """Look up a concrete component class by its variant name."""
    try:
        return _VARIANTS[variant]
    except KeyError:
        raise NotFoundError(variant, expected="component variant") from None


def component_variants() -> Tuple[str, ...]:
    """Names of all concrete component variants."""
    return tuple(_VARIANTS)


@dataclass(frozen=True, kw_only=True)
class Component:
    """
    Base shape shared by all entities of a system.

    Subclasses declare their reference fields (``REFERENCE_KINDS``), the
    range rule applied to each numeric field (``CONSTRAINTS``) and field pairs
    that must be ordered (``ORDERED_PAIRS``).
    """

    name: str
    available: bool = True

    kind: ClassVar[ComponentKind]
    REFERENCE_KINDS: ClassVar[Dict[str, ComponentKind]] = {}
    CONSTRAINTS: ClassVar[Dict[str, str]] = {}
    ORDERED_PAIRS: ClassVar[Tuple[Tuple[str, str], ...]] = ()
    _abstract: ClassVar[bool] = True

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("_abstract", False):
            _VARIANTS[cls.__name__] = cls

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ParameterRangeError(repr(self.name), "name", "must be a non-empty string")
        if not isinstance(self.available, bool):
            raise ParameterRangeError(self.name, "available", "must be a boolean", self.available)

    @property
    def variant(self) -> str:
        """Concrete variant name, e.g. ``Line`` or ``Generator``."""
        return type(self).__name__

    def references(self) -> Dict[str, str]:
        """Reference fields that are currently set, as field -> component name."""
        refs = {}
        for field_name in self.REFERENCE_KINDS:
            target = getattr(self, field_name)
            if target is not None:
                refs[field_name] = target
        return refs

    def parameters(self) -> Dict[str, Any]:
        """Numeric and enumerated parameters, excluding identity and references."""
        params: Dict[str, Any] = {}
        for f in fields(self):
            if f.name in ("name", "available") or f.name in self.REFERENCE_KINDS:
                continue
            value = getattr(self, f.name)
            params[f.name] = value.value if isinstance(value, Enum) else value
        return params

    def check_structure(self) -> None:
        """Structural checks beyond per-field ranges; raises on violation."""

    def accepts(self, dynamic: "Component") -> bool:
        """Whether ``dynamic`` may be attached to this component."""
        return False

    def __str__(self) -> str:
        return f"{self.variant}(Name: {self.name})"


@dataclass(frozen=True, kw_only=True)
class Bus(Component):
    """A network node with a voltage set point and a power-flow type."""

    number: int
    bus_type: BusType = BusType.PQ
    magnitude: float = 1.0
    angle: float = 0.0
    base_voltage: float = 230.0

    kind: ClassVar[ComponentKind] = ComponentKind.BUS
    CONSTRAINTS: ClassVar[Dict[str, str]] = {
        "magnitude": "non_negative",
        "angle": "finite",
        "base_voltage": "positive",
    }
    _abstract: ClassVar[bool] = False

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.bus_type, BusType):
            try:
                object.__setattr__(self, "bus_type", BusType(self.bus_type))
            except ValueError:
                raise ParameterRangeError(self.name, "bus_type", "is not one of REF, PV, PQ", self.bus_type) from None
        if isinstance(self.number, bool) or not isinstance(self.number, int) or self.number < 1:
            raise ParameterRangeError(self.name, "number", "must be a positive integer", self.number)


@dataclass(frozen=True, kw_only=True)
class Branch(Component):
    """An edge between two buses carrying impedance parameters."""

    from_bus: str
    to_bus: str
    r: float = 0.0
    x: float = 0.0
    rating: float = 0.0

    kind: ClassVar[ComponentKind] = ComponentKind.BRANCH
    REFERENCE_KINDS: ClassVar[Dict[str, ComponentKind]] = {
        "from_bus": ComponentKind.BUS,
        "to_bus": ComponentKind.BUS,
    }
    _abstract: ClassVar[bool] = True

    @property
    def arc(self) -> Tuple[str, str]:
        return (self.from_bus, self.to_bus)

    def check_structure(self) -> None:
        if self.from_bus == self.to_bus:
            raise InvalidReferenceError(self.name, "to_bus", self.to_bus, "is the same bus as 'from_bus'")


@dataclass(frozen=True, kw_only=True)
class Line(Branch):
    """Transmission line with a total shunt susceptance ``b``."""

    b: float = 0.0

    CONSTRAINTS: ClassVar[Dict[str, str]] = {
        "r": "finite",
        "x": "finite",
        "rating": "non_negative",
        "b": "non_negative",
    }
    _abstract: ClassVar[bool] = False


@dataclass(frozen=True, kw_only=True)
class Transformer2W(Branch):
    """Two-winding transformer with an off-nominal tap ratio."""

    primary_shunt: float = 0.0
    tap: float = 1.0

    CONSTRAINTS: ClassVar[Dict[str, str]] = {
        "r": "finite",
        "x": "finite",
        "rating": "non_negative",
        "primary_shunt": "finite",
        "tap": "positive",
    }
    _abstract: ClassVar[bool] = False


@dataclass(frozen=True, kw_only=True)
class StaticInjection(Component):
    """A device at a bus that injects or withdraws power for power-flow purposes."""

    bus: str
    active_power: float = 0.0
    reactive_power: float = 0.0
    base_power: float = 100.0

    kind: ClassVar[ComponentKind] = ComponentKind.STATIC_INJECTION
    REFERENCE_KINDS: ClassVar[Dict[str, ComponentKind]] = {"bus": ComponentKind.BUS}
    # Variant names of the dynamic devices this injection can carry
    ACCEPTED_DYNAMIC: ClassVar[Tuple[str, ...]] = ()
    _abstract: ClassVar[bool] = True

    def accepts(self, dynamic: Component) -> bool:
        return dynamic.variant in self.ACCEPTED_DYNAMIC


@dataclass(frozen=True, kw_only=True)
class Generator(StaticInjection):
    """Dispatchable generator. The only injection a dynamic device can augment."""

    rating: float = 0.0
    active_power_min: float = 0.0
    active_power_max: float = 0.0
    reactive_power_min: float = 0.0
    reactive_power_max: float = 0.0

    CONSTRAINTS: ClassVar[Dict[str, str]] = {
        "active_power": "finite",
        "reactive_power": "finite",
        "base_power": "positive",
        "rating": "non_negative",
        "active_power_min": "finite",
        "active_power_max": "finite",
        "reactive_power_min": "finite",
        "reactive_power_max": "finite",
    }
    ORDERED_PAIRS: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("active_power_min", "active_power_max"),
        ("reactive_power_min", "reactive_power_max"),
    )
    ACCEPTED_DYNAMIC: ClassVar[Tuple[str, ...]] = ("DynamicGenerator", "DynamicInverter")
    _abstract: ClassVar[bool] = False


@dataclass(frozen=True, kw_only=True)
class Source(StaticInjection):
    """Infinite-bus style voltage source behind a Thevenin impedance."""

    internal_voltage: float = 1.0
    internal_angle: float = 0.0
    r_th: float = 0.0
    x_th: float = 0.0

    CONSTRAINTS: ClassVar[Dict[str, str]] = {
        "active_power": "finite",
        "reactive_power": "finite",
        "base_power": "positive",
        "internal_voltage": "non_negative",
        "internal_angle": "finite",
        "r_th": "non_negative",
        "x_th": "non_negative",
    }
    _abstract: ClassVar[bool] = False


@dataclass(frozen=True, kw_only=True)
class PowerLoad(StaticInjection):
    """Constant power load."""

    max_active_power: float = 0.0
    max_reactive_power: float = 0.0

    CONSTRAINTS: ClassVar[Dict[str, str]] = {
        "active_power": "finite",
        "reactive_power": "finite",
        "base_power": "positive",
        "max_active_power": "finite",
        "max_reactive_power": "finite",
    }
    _abstract: ClassVar[bool] = False
