"""
Sub-model blocks: the replaceable pieces of a composite dynamic device.

A block is a tagged record: its ``variant`` names a schema in the catalogue
and ``parameters`` holds one real value per schema parameter. Blocks are
immutable; editing a parameter produces a new block.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from ..config.schema_config import VariantSchema, default_catalog
from ..core.exceptions import ConfigurationError, ParameterRangeError
from ..validators.parameter_validator import check_ordered, check_value
from .roles import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubModelBlock:
    """
    One concrete sub-model variant with its parameter record.

    Missing parameters are filled from the schema defaults. Structural
    problems (unknown variant, unknown or missing parameter) are rejected at
    construction; value ranges are checked by :meth:`validate` so a
    composition can report violations in role order.
    """

    variant: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        schema = default_catalog().get_schema(self.variant)
        given = dict(self.parameters)

        for name in given:
            if name not in schema.parameter_names:
                raise ParameterRangeError(self.variant, name, f"is not a parameter of {self.variant}")

        merged = schema.defaults()
        merged.update(given)
        for spec in schema.parameters:
            if spec.name not in merged:
                raise ParameterRangeError(self.variant, spec.name, "is required")

        # Keep schema order so serialized records are stable
        ordered = {n: merged[n] for n in schema.parameter_names}
        object.__setattr__(self, "parameters", MappingProxyType(ordered))

    def __hash__(self) -> int:
        return hash((self.variant, tuple(self.parameters.items())))

    @property
    def schema(self) -> VariantSchema:
        return default_catalog().get_schema(self.variant)

    @property
    def role(self) -> Role:
        """The capability role this variant implements."""
        try:
            return Role.parse(self.schema.role)
        except ValueError as e:
            raise ConfigurationError(f"Unknown role '{self.schema.role}'", component=self.variant) from e

    @property
    def state_names(self) -> Tuple[str, ...]:
        return self.schema.states

    @property
    def algebraic_count(self) -> int:
        return self.schema.algebraic_count

    def state_dimension(self) -> int:
        """Number of differential states this block contributes."""
        return len(self.schema.states)

    def validate(self, owner: Optional[str] = None) -> None:
        """
        Check every parameter against its schema rule, in schema order.

        Args:
            owner: Name reported in the error, usually the dynamic device

        Raises:
            ParameterRangeError: naming the offending parameter
        """
        label = owner or self.variant
        for spec in self.schema.parameters:
            check_value(label, spec.name, self.parameters[spec.name], spec.rule, spec.minimum, spec.maximum)
        check_ordered(label, self.parameters, self.schema.ordered_pairs)

    def with_parameters(self, **changes) -> "SubModelBlock":
        """Return a new block with some parameters replaced."""
        params = dict(self.parameters)
        params.update(changes)
        return SubModelBlock(self.variant, params)

    def __getitem__(self, name: str) -> Any:
        return self.parameters[name]

    def __str__(self) -> str:
        return f"{self.variant}({self.role.value}, states={self.state_dimension()})"


def make_block(variant: str, **parameters) -> SubModelBlock:
    """
    Convenience constructor.

    Example:
        >>> avr = make_block("AVRTypeI", Ka=20.0, Ta=0.2)
        >>> avr.state_dimension()
        4
    """
    return SubModelBlock(variant, parameters)


def validate_block(block: SubModelBlock, owner: Optional[str] = None) -> None:
    """Validate ``block`` parameters against its schema."""
    block.validate(owner)


def state_dimension(block: SubModelBlock) -> int:
    """Declared differential state count of ``block``; never negative."""
    return block.state_dimension()
