"""
Composition of sub-model blocks into composite dynamic devices.

A dynamic device is an ordered mapping from capability role to block. The
role set is fixed by the device kind:

- Generator: Machine, Shaft, AVR, Governor, PSS
- Inverter: Converter, OuterControl, InnerControl, DCSource,
  FrequencyEstimator, Filter

Composition is pure. The same inputs always produce equal devices and
nothing is registered; attaching a device is the resolver's job.
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from ..core.exceptions import IncompleteCompositionError, NotFoundError, TypeMismatchError
from ..core.models import Component, ComponentKind
from ..submodels.blocks import SubModelBlock
from ..submodels.roles import Role, role_order
from ..validators.parameter_validator import ParameterValidator

logger = logging.getLogger(__name__)


class DynamicKind(Enum):
    """Kinds of composite dynamic device."""
    GENERATOR = "Generator"
    INVERTER = "Inverter"

    @classmethod
    def parse(cls, value: Union["DynamicKind", str]) -> "DynamicKind":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value in cls.__members__:
                return cls[value]
            try:
                return cls(value)
            except ValueError:
                pass
        raise TypeMismatchError(f"unknown dynamic device kind {value!r}", component=str(value))


GENERATOR_ROLES: Tuple[Role, ...] = (
    Role.MACHINE,
    Role.SHAFT,
    Role.AVR,
    Role.GOVERNOR,
    Role.PSS,
)

INVERTER_ROLES: Tuple[Role, ...] = (
    Role.CONVERTER,
    Role.OUTER_CONTROL,
    Role.INNER_CONTROL,
    Role.DC_SOURCE,
    Role.FREQUENCY_ESTIMATOR,
    Role.FILTER,
)


def _order_blocks(owner: str, blocks: Mapping[Any, SubModelBlock], required: Tuple[Role, ...]) -> Dict[Role, SubModelBlock]:
    """
    Key ``blocks`` by Role in declaration order and check the role set.

    Raises:
        IncompleteCompositionError: on a missing, extra or unknown role
        TypeMismatchError: when a block sits under a role its variant does not fill
    """
    ordered: Dict[Role, SubModelBlock] = {}
    unexpected: List[str] = []
    for key, block in blocks.items():
        try:
            role = Role.parse(key)
        except ValueError:
            unexpected.append(str(key))
            continue
        if role not in required:
            unexpected.append(role.value)
            continue
        ordered[role] = block

    missing = [role.value for role in required if role not in ordered]
    if missing or unexpected:
        raise IncompleteCompositionError(owner, missing=missing, unexpected=sorted(unexpected))

    for role, block in ordered.items():
        if not isinstance(block, SubModelBlock):
            raise TypeMismatchError(f"role {role.value} holds {type(block).__name__}, not a sub-model block", component=owner)
        if block.role is not role:
            raise TypeMismatchError(
                f"{block.variant} implements {block.role.value}, not {role.value}",
                component=owner,
            )

    return {role: ordered[role] for role in sorted(ordered, key=role_order)}


@dataclass(frozen=True, kw_only=True)
class DynamicInjection(Component):
    """
    Composite differential-equation model of a device.

    ``static_injection`` is the name of the static injection the device
    augments, or None while the device is not attached. It is a lookup key
    into the registry, not an ownership link.
    """

    reference_frequency: float
    base_power: float = 100.0
    blocks: Mapping[Role, SubModelBlock]
    static_injection: Optional[str] = None

    kind: ClassVar[ComponentKind] = ComponentKind.DYNAMIC_INJECTION
    REFERENCE_KINDS: ClassVar[Dict[str, ComponentKind]] = {
        "static_injection": ComponentKind.STATIC_INJECTION,
    }
    CONSTRAINTS: ClassVar[Dict[str, str]] = {
        "reference_frequency": "positive",
        "base_power": "positive",
    }
    REQUIRED_ROLES: ClassVar[Tuple[Role, ...]] = ()
    dynamic_kind: ClassVar[DynamicKind]
    _abstract: ClassVar[bool] = True

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.blocks, Mapping):
            raise TypeMismatchError("blocks must be a mapping from role to block", component=self.name)
        ordered = _order_blocks(self.name, self.blocks, self.REQUIRED_ROLES)
        object.__setattr__(self, "blocks", MappingProxyType(ordered))

    def __hash__(self) -> int:
        return hash((self.variant, self.name, self.static_injection, tuple(self.blocks.items())))

    def parameters(self) -> Dict[str, Any]:
        params = super().parameters()
        params.pop("blocks", None)
        return params

    def check_structure(self) -> None:
        """Validate every block, in role declaration order."""
        for block in self.blocks.values():
            block.validate(self.name)

    def block(self, role: Union[Role, str]) -> SubModelBlock:
        """Block filling ``role``; NotFoundError if the kind has no such role."""
        try:
            return self.blocks[Role.parse(role)]
        except (ValueError, KeyError):
            raise NotFoundError(str(role), expected=f"role of {self.name}") from None

    def state_dimension(self) -> int:
        """Sum of the blocks' differential state counts."""
        return sum(block.state_dimension() for block in self.blocks.values())

    @property
    def state_names(self) -> Tuple[str, ...]:
        """State names prefixed by role, in the order the integrator stacks them."""
        return tuple(
            f"{role.value}.{state}"
            for role, block in self.blocks.items()
            for state in block.state_names
        )

    @property
    def algebraic_count(self) -> int:
        return sum(block.algebraic_count for block in self.blocks.values())

    def state_layout(self) -> Dict[Role, slice]:
        """Role -> slice into the concatenated state vector."""
        layout = {}
        offset = 0
        for role, block in self.blocks.items():
            n = block.state_dimension()
            layout[role] = slice(offset, offset + n)
            offset += n
        return layout

    @property
    def is_attached(self) -> bool:
        return self.static_injection is not None

    def with_static_injection(self, static_name: Optional[str]) -> "DynamicInjection":
        """Copy of this device bound to ``static_name`` (None to unbind)."""
        return self._copy(static_injection=static_name)

    def with_block(self, role: Union[Role, str], block: SubModelBlock) -> "DynamicInjection":
        """Copy of this device with the block under ``role`` replaced."""
        try:
            role = Role.parse(role)
        except ValueError:
            raise IncompleteCompositionError(self.name, unexpected=[str(role)]) from None
        blocks = dict(self.blocks)
        blocks[role] = block
        return self._copy(blocks=blocks)

    def _copy(self, **changes) -> "DynamicInjection":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return type(self)(**values)

    def __str__(self) -> str:
        target = self.static_injection or "unattached"
        return f"{self.variant}(Name: {self.name}, States: {self.state_dimension()}, Static: {target})"


@dataclass(frozen=True, kw_only=True, eq=False)
class DynamicGenerator(DynamicInjection):
    """Synchronous machine model with its shaft and controls."""

    REQUIRED_ROLES: ClassVar[Tuple[Role, ...]] = GENERATOR_ROLES
    dynamic_kind: ClassVar[DynamicKind] = DynamicKind.GENERATOR
    _abstract: ClassVar[bool] = False


@dataclass(frozen=True, kw_only=True, eq=False)
class DynamicInverter(DynamicInjection):
    """Grid-forming or grid-following inverter model."""

    REQUIRED_ROLES: ClassVar[Tuple[Role, ...]] = INVERTER_ROLES
    dynamic_kind: ClassVar[DynamicKind] = DynamicKind.INVERTER
    _abstract: ClassVar[bool] = False


DEVICE_CLASSES = {
    DynamicKind.GENERATOR: DynamicGenerator,
    DynamicKind.INVERTER: DynamicInverter,
}


def required_roles(kind: Union[DynamicKind, str]) -> Tuple[Role, ...]:
    """Roles a device of ``kind`` must fill, in declaration order."""
    return DEVICE_CLASSES[DynamicKind.parse(kind)].REQUIRED_ROLES


def compose(
    kind: Union[DynamicKind, str],
    name: str,
    reference_frequency: float,
    blocks: Mapping[Any, SubModelBlock],
    base_power: float = 100.0,
    available: bool = True,
) -> DynamicInjection:
    """
    Assemble a dynamic device from one block per required role.

    Args:
        kind: ``Generator`` or ``Inverter``
        name: Device name
        reference_frequency: Reference frequency in Hz, finite and > 0
        blocks: Mapping from role (Role, role value or member name) to block
        base_power: Device base power in MVA, finite and > 0
        available: Availability flag

    Returns:
        An unattached DynamicGenerator or DynamicInverter

    Raises:
        IncompleteCompositionError: if a required role is absent or an extra one present
        TypeMismatchError: if a block does not implement the role it is placed under
        ParameterRangeError: on the first invalid parameter, in role declaration order

    Example:
        >>> gen = compose("Generator", "gen1", 60.0, {
        ...     "Machine": make_block("BaseMachine"),
        ...     "Shaft": make_block("SingleMass"),
        ...     "AVR": make_block("AVRTypeI"),
        ...     "Governor": make_block("TGFixed"),
        ...     "PSS": make_block("PSSFixed"),
        ... })
        >>> gen.state_dimension()
        6
    """
    device_class = DEVICE_CLASSES[DynamicKind.parse(kind)]
    device = device_class(
        name=name,
        available=available,
        reference_frequency=reference_frequency,
        base_power=base_power,
        blocks=blocks,
    )
    ParameterValidator().validate(device)
    device.check_structure()

    logger.debug(f"Composed {device.variant} '{name}' with {device.state_dimension()} states")
    return device


def replace_block(document, name: str, role: Union[Role, str], block: SubModelBlock) -> DynamicInjection:
    """
    Replace one block of a registered device.

    The edited device keeps its name and attachment and replaces the old
    instance atomically; on failure the registered device is unchanged.
    """
    with document.registry.lock:
        current = document.get_component(DynamicInjection, name)
        updated = current.with_block(role, block)
        document.replace_component(updated)
    logger.info(f"Replaced {block.role.value} block of '{name}' with {block.variant}")
    return updated
