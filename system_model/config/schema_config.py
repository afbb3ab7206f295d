"""
Sub-model schema catalogue management with caching and error handling.

The catalogue is a JSON document keyed by variant name. Each entry declares
the capability role the variant fills, its differential state names, its
algebraic variable count and one rule per parameter.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..core.exceptions import ConfigurationError, NotFoundError
from ..validators.parameter_validator import RULES

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).with_name("submodel_schemas.json")

_MISSING = object()


@dataclass(frozen=True)
class ParameterSpec:
    """Rule, bounds and optional default of one sub-model parameter."""
    name: str
    rule: str = "finite"
    default: Any = _MISSING
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def required(self) -> bool:
        return self.default is _MISSING


@dataclass(frozen=True)
class VariantSchema:
    """Declared shape of one concrete sub-model variant."""
    variant: str
    role: str
    states: Tuple[str, ...]
    algebraic_count: int
    parameters: Tuple[ParameterSpec, ...]
    ordered_pairs: Tuple[Tuple[str, str], ...] = ()

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def defaults(self) -> Dict[str, Any]:
        return {p.name: p.default for p in self.parameters if not p.required}


class SchemaCatalog:
    """
    Loads and serves sub-model variant schemas from a JSON catalogue.
    """

    def __init__(self, config_filepath=DEFAULT_SCHEMA_PATH):
        self.config_filepath = Path(config_filepath)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load the catalogue from file with proper error handling."""
        if not self.config_filepath.exists():
            raise ConfigurationError(f"Schema catalogue not found: {self.config_filepath}")

        try:
            with open(self.config_filepath, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in schema catalogue {self.config_filepath}: {e}") from e

        if not isinstance(config, dict) or not config:
            raise ConfigurationError(f"Schema catalogue {self.config_filepath} holds no variants")
        self._config = config
        # Fail at load time rather than on first use of a broken entry
        for variant in config:
            self._build_schema(variant)

        logger.info(f"Successfully loaded {len(config)} sub-model schemas from: {self.config_filepath}")

    @property
    def config(self) -> Dict[str, Any]:
        """Get the raw catalogue data."""
        if self._config is None:
            raise ConfigurationError("Schema catalogue not loaded")
        return self._config

    def _build_schema(self, variant: str) -> VariantSchema:
        template = self.config[variant]
        try:
            role = template["Role"]
            states = tuple(template.get("States", ()))
            algebraic = int(template.get("Algebraic Variables", 0))
            raw_params = template["Parameters"]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Malformed schema entry: {e}", component=variant) from e

        params = []
        for param_name, spec in raw_params.items():
            rule = spec.get("Rule", "finite")
            if rule not in RULES:
                raise ConfigurationError(f"Unknown rule '{rule}' for parameter '{param_name}'", component=variant)
            params.append(ParameterSpec(
                name=param_name,
                rule=rule,
                default=spec.get("Default", _MISSING),
                minimum=spec.get("Min"),
                maximum=spec.get("Max"),
            ))

        pairs = tuple(tuple(pair) for pair in template.get("Ordered Pairs", ()))
        for low, high in pairs:
            if low not in raw_params or high not in raw_params:
                raise ConfigurationError(f"Ordered pair ({low}, {high}) names an unknown parameter", component=variant)

        return VariantSchema(
            variant=variant,
            role=role,
            states=states,
            algebraic_count=algebraic,
            parameters=tuple(params),
            ordered_pairs=pairs,
        )

    @lru_cache(maxsize=128)
    def get_schema(self, variant: str) -> VariantSchema:
        """
        Retrieve the schema of a variant with caching.

        Args:
            variant: Variant name, e.g. ``AVRTypeI``

        Returns:
            The variant's schema

        Raises:
            NotFoundError: if the catalogue has no such variant
        """
        if variant not in self.config:
            raise NotFoundError(variant, expected="sub-model variant")
        return self._build_schema(variant)

    def get_valid_variants(self) -> List[str]:
        """Returns a list of all valid variant names."""
        return list(self.config.keys())

    def variants_for_role(self, role: str) -> List[str]:
        """Variant names implementing the given role, in catalogue order."""
        return [name for name, template in self.config.items() if template.get("Role") == role]

    def validate_variant(self, variant: str) -> bool:
        """Check if a variant name is known."""
        return variant in self.config

    def clear_cache(self) -> None:
        """Clear all cached results."""
        self.get_schema.cache_clear()

    def reload_config(self) -> None:
        """Reload the catalogue from file and clear cache."""
        self.clear_cache()
        self._load_config()

    def get_config_stats(self) -> Dict[str, Any]:
        """Get statistics about the loaded catalogue."""
        return {
            'total_variants': len(self.config),
            'total_states': sum(len(t.get('States', ())) for t in self.config.values()),
            'config_file': str(self.config_filepath),
            'cache_stats': {
                'get_schema': self.get_schema.cache_info(),
            }
        }


@lru_cache(maxsize=1)
def default_catalog() -> SchemaCatalog:
    """The catalogue shipped with the package, loaded once."""
    return SchemaCatalog(DEFAULT_SCHEMA_PATH)
