"""
System Model Package - Power System Components and Dynamic Device Composition

A library for building, validating and persisting power system models made of
static topology components and composite dynamic devices.

Key Features:
- Name-indexed component registry with referential integrity
- Static topology model (buses, branches, static injections)
- Sub-model capability framework with a JSON schema catalogue
- Composition of generators and inverters from sub-model blocks
- Attachment of dynamic devices to static injections
- Lossless JSON serialization
- Pandapower integration

Architecture:
- core/: Component models, interfaces, and exceptions
- registry/: Component registry and the system document
- submodels/: Capability roles and sub-model blocks
- dynamics/: Dynamic device composition and attachment
- graph/: Connectivity analysis
- serialization/: Document persistence
- config/: Schema catalogue and serializer settings
- pandapower/: Pandapower converter integration

Example Usage:
    from system_model import (
        SystemDocument, Bus, BusType, Line, Generator, compose, make_block, attach,
    )

    system = SystemDocument(base_power=100.0, base_frequency=60.0)
    system.add_component(Bus(name="bus1", number=1, bus_type=BusType.REF))
    system.add_component(Bus(name="bus2", number=2, bus_type=BusType.PV))
    system.add_component(Line(name="line12", from_bus="bus1", to_bus="bus2", x=0.1))
    system.add_component(Generator(name="gen2", bus="bus2", active_power=0.5))

    gen = compose("Generator", "gen2-dyn", 60.0, {
        "Machine": make_block("BaseMachine"),
        "Shaft": make_block("SingleMass", H=3.0, D=0.0),
        "AVR": make_block("AVRTypeI"),
        "Governor": make_block("TGFixed"),
        "PSS": make_block("PSSFixed"),
    })
    attach(system, gen, "gen2")
"""

import logging

# Core models and exceptions
from .core.models import (
    Component, ComponentKind, BusType, Bus, Branch, Line, Transformer2W,
    StaticInjection, Generator, Source, PowerLoad,
)
from .core.exceptions import (
    SystemModelError, ConfigurationError, DuplicateNameError, NotFoundError,
    InvalidReferenceError, ReferentialIntegrityError, ParameterRangeError,
    IncompleteCompositionError, TypeMismatchError, AlreadyAttachedError,
    DeserializationError,
)

# Registry and document
from .registry import ComponentRegistry, ComponentView, SystemDocument

# Sub-models and dynamic devices
from .submodels import Role, SubModelBlock, make_block, validate_block, state_dimension
from .dynamics import (
    DynamicKind, DynamicInjection, DynamicGenerator, DynamicInverter,
    compose, replace_block, attach, detach, get_dynamic_injector, get_static_injector,
)

# Analysis and persistence
from .graph import TopologyAnalyzer
from .serialization import serialize, deserialize, to_json, from_json

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core models
    'Component',
    'ComponentKind',
    'BusType',
    'Bus',
    'Branch',
    'Line',
    'Transformer2W',
    'StaticInjection',
    'Generator',
    'Source',
    'PowerLoad',

    # Exceptions
    'SystemModelError',
    'ConfigurationError',
    'DuplicateNameError',
    'NotFoundError',
    'InvalidReferenceError',
    'ReferentialIntegrityError',
    'ParameterRangeError',
    'IncompleteCompositionError',
    'TypeMismatchError',
    'AlreadyAttachedError',
    'DeserializationError',

    # Registry
    'ComponentRegistry',
    'ComponentView',
    'SystemDocument',

    # Sub-models and dynamics
    'Role',
    'SubModelBlock',
    'make_block',
    'validate_block',
    'state_dimension',
    'DynamicKind',
    'DynamicInjection',
    'DynamicGenerator',
    'DynamicInverter',
    'compose',
    'replace_block',
    'attach',
    'detach',
    'get_dynamic_injector',
    'get_static_injector',

    # Analysis and persistence
    'TopologyAnalyzer',
    'serialize',
    'deserialize',
    'to_json',
    'from_json',
]
