"""
Configuration package for the system model.

This package handles loading the sub-model schema catalogue and managing
serializer settings.
"""

from .schema_config import SchemaCatalog, VariantSchema, ParameterSpec, default_catalog
from .serialization_config import SerializationConfiguration, FORMAT_VERSION

__all__ = [
    'SchemaCatalog',
    'VariantSchema',
    'ParameterSpec',
    'default_catalog',
    'SerializationConfiguration',
    'FORMAT_VERSION',
]
