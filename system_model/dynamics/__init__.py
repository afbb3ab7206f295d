"""
Composite dynamic devices: composition from sub-model blocks and attachment
to static injections.
"""

from .composer import (
    DynamicKind, DynamicInjection, DynamicGenerator, DynamicInverter,
    GENERATOR_ROLES, INVERTER_ROLES, compose, replace_block, required_roles,
)
from .resolver import attach, detach, get_dynamic_injector, get_static_injector

__all__ = [
    'DynamicKind',
    'DynamicInjection',
    'DynamicGenerator',
    'DynamicInverter',
    'GENERATOR_ROLES',
    'INVERTER_ROLES',
    'compose',
    'replace_block',
    'required_roles',
    'attach',
    'detach',
    'get_dynamic_injector',
    'get_static_injector',
]
