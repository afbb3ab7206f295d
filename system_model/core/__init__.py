"""
Core components for power system modeling.

This package provides the fundamental data structures, interfaces and
exceptions for building and working with system documents.
"""

from .models import (
    Component, ComponentKind, BusType, Bus, Branch, Line, Transformer2W,
    StaticInjection, Generator, Source, PowerLoad,
    component_class, component_variants,
)
from .exceptions import (
    SystemModelError, ConfigurationError, DuplicateNameError, NotFoundError,
    InvalidReferenceError, ReferentialIntegrityError, ParameterRangeError,
    IncompleteCompositionError, TypeMismatchError, AlreadyAttachedError,
    DeserializationError,
)
from .interfaces import TopologyImporter, TopologyExporter

__all__ = [
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
    'component_class',
    'component_variants',
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
    'TopologyImporter',
    'TopologyExporter',
]
