"""
Serialization of system documents to and from a portable JSON document.

Document layout::

    {
      "format_version": "1.0",
      "name": "...",
      "base_power": 100.0,
      "base_frequency": 60.0,
      "components": [
        {"kind": "Bus", "variant": "Bus", "name": "bus1", "available": true,
         "parameters": {...}, "references": {}},
        {"kind": "DynamicInjection", "variant": "DynamicGenerator", ...,
         "references": {"static_injection": "gen1"},
         "blocks": {"Machine": {"variant": "BaseMachine", "parameters": {...}}, ...}}
      ]
    }

References are component names, so the order of ``components`` carries no
meaning.
"""

import json
import logging
from dataclasses import MISSING, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.serialization_config import SerializationConfiguration
from ..core.exceptions import (
    AlreadyAttachedError,
    DeserializationError,
    DuplicateNameError,
    IncompleteCompositionError,
    InvalidReferenceError,
    NotFoundError,
    ParameterRangeError,
    SystemModelError,
    TypeMismatchError,
)
from ..core.models import Component, ComponentKind, component_class
from ..dynamics.composer import DynamicInjection
from ..registry.system import SystemDocument
from ..submodels.blocks import SubModelBlock

logger = logging.getLogger(__name__)

# Registration order that lets every reference resolve on first try
KIND_ORDER = (
    ComponentKind.BUS,
    ComponentKind.BRANCH,
    ComponentKind.STATIC_INJECTION,
    ComponentKind.DYNAMIC_INJECTION,
)

RECORD_KEYS = ("kind", "variant", "name", "available", "parameters", "references")

# Error raised while registering a component -> invariant it reports
_INVARIANTS = (
    (DuplicateNameError, "uniqueness"),
    (InvalidReferenceError, "referential_integrity"),
    (IncompleteCompositionError, "composition_completeness"),
    (ParameterRangeError, "parameter_validity"),
    (AlreadyAttachedError, "attachment"),
    (TypeMismatchError, "attachment"),
    (NotFoundError, "document_shape"),
)


def _invariant_of(error: SystemModelError, default: str = "document_shape") -> str:
    for error_type, invariant in _INVARIANTS:
        if isinstance(error, error_type):
            return invariant
    return default


class SystemSerializer:
    """
    Converts a SystemDocument to a plain dict and back.

    Deserialization runs in two passes. Pass 1 builds every component from
    its record without looking at other records. Pass 2 checks names are
    unique, resolves references and registers the components, which re-runs
    every registry check. The first violation is reported as a
    DeserializationError naming the invariant and the component.
    """

    def __init__(self, config: Optional[SerializationConfiguration] = None):
        self.config = config or SerializationConfiguration()

    # ------------------------------------------------------------------ #
    # Writing
    # ------------------------------------------------------------------ #

    def serialize(self, document: SystemDocument) -> Dict[str, Any]:
        """Plain-data form of ``document``; taken from one consistent snapshot."""
        components = document.get_components()
        data = {
            "format_version": self.config.get("format_version"),
            "name": document.name,
            "base_power": document.base_power,
            "base_frequency": document.base_frequency,
            "components": [self._serialize_component(c) for c in components],
        }
        logger.debug(f"Serialized {len(data['components'])} components")
        return data

    def _serialize_component(self, component: Component) -> Dict[str, Any]:
        record = {
            "kind": component.kind.value,
            "variant": component.variant,
            "name": component.name,
            "available": component.available,
            "parameters": component.parameters(),
            "references": component.references(),
        }
        if isinstance(component, DynamicInjection):
            record["blocks"] = {
                role.value: {"variant": block.variant, "parameters": dict(block.parameters)}
                for role, block in component.blocks.items()
            }
        return record

    def to_json(self, document: SystemDocument, path: Union[str, Path, None] = None) -> str:
        """JSON text of ``document``, also written to ``path`` when given."""
        text = json.dumps(
            self.serialize(document),
            indent=self.config.get("indent"),
            sort_keys=self.config.get("sort_keys"),
            allow_nan=False,
        )
        if path is not None:
            Path(path).write_text(text, encoding="utf-8")
            logger.info(f"Wrote system document to {path}")
        return text

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #

    def deserialize(self, data: Dict[str, Any]) -> SystemDocument:
        """
        Rebuild a document from its plain-data form.

        Raises:
            DeserializationError: on the first violated invariant
        """
        document = self._build_document(data)

        # Pass 1: instantiate every component in isolation
        built: List[Component] = []
        for index, record in enumerate(data["components"]):
            built.append(self._build_component(index, record))

        # Pass 2: uniqueness, references, full registry checks
        kinds: Dict[str, ComponentKind] = {}
        for component in built:
            if component.name in kinds:
                raise DeserializationError(
                    f"name '{component.name}' appears more than once",
                    component=component.name, invariant="uniqueness",
                )
            kinds[component.name] = component.kind

        for component in built:
            self._resolve_references(component, kinds)

        ordered = sorted(built, key=lambda c: KIND_ORDER.index(c.kind))
        for component in ordered:
            try:
                document.add_component(component)
            except SystemModelError as e:
                invariant = _invariant_of(e)
                raise DeserializationError(
                    f"{invariant} violated: {e}", component=component.name, invariant=invariant,
                ) from e

        logger.info(f"Deserialized system document with {len(document)} components")
        return document

    def _build_document(self, data: Any) -> SystemDocument:
        if not isinstance(data, dict):
            raise DeserializationError("document must be a JSON object")
        for key in ("base_power", "base_frequency", "components"):
            if key not in data:
                raise DeserializationError(f"document has no '{key}'")
        if not isinstance(data["components"], list):
            raise DeserializationError("'components' must be a list")

        version = data.get("format_version")
        expected = self.config.get("format_version")
        if version != expected:
            if self.config.is_strict_version():
                raise DeserializationError(f"unsupported format version {version!r}, expected {expected!r}")
            logger.warning(f"Reading format version {version!r} as {expected!r}")

        try:
            return SystemDocument(
                base_power=data["base_power"],
                base_frequency=data["base_frequency"],
                name=data.get("name"),
            )
        except ParameterRangeError as e:
            raise DeserializationError(str(e), component=e.component, invariant="parameter_validity") from e

    def _build_component(self, index: int, record: Any) -> Component:
        if not isinstance(record, dict):
            raise DeserializationError(f"component record {index} is not an object")
        missing = [key for key in RECORD_KEYS if key not in record]
        name = record.get("name") if isinstance(record.get("name"), str) else f"#{index}"
        if missing:
            raise DeserializationError(f"record lacks {', '.join(missing)}", component=name)
        if not isinstance(record["parameters"], dict) or not isinstance(record["references"], dict):
            raise DeserializationError("'parameters' and 'references' must be objects", component=name)

        try:
            cls = component_class(record["variant"])
        except NotFoundError as e:
            raise DeserializationError(f"unknown variant {record['variant']!r}", component=name) from e
        if cls.kind.value != record["kind"]:
            raise DeserializationError(
                f"variant {cls.__name__} is a {cls.kind.value}, record says {record['kind']}",
                component=name,
            )

        unknown = set(record["references"]) - set(cls.REFERENCE_KINDS)
        if unknown:
            raise DeserializationError(f"unknown reference field(s) {', '.join(sorted(unknown))}", component=name)

        values = dict(record["parameters"])
        values.update(record["references"])
        values["name"] = record["name"]
        values["available"] = record["available"]

        try:
            if issubclass(cls, DynamicInjection):
                values["blocks"] = self._build_blocks(name, record.get("blocks"))
            return cls(**values)
        except DeserializationError:
            raise
        except TypeError as e:
            raise DeserializationError(f"record does not fit {cls.__name__}: {e}", component=name) from e
        except SystemModelError as e:
            if isinstance(e, (IncompleteCompositionError, TypeMismatchError)):
                invariant = "composition_completeness"
            else:
                invariant = _invariant_of(e)
            raise DeserializationError(f"{invariant} violated: {e}", component=name, invariant=invariant) from e

    def _build_blocks(self, owner: str, blocks: Any) -> Dict[str, SubModelBlock]:
        if not isinstance(blocks, dict):
            raise DeserializationError("dynamic device record has no 'blocks' object", component=owner)
        result = {}
        for role, entry in blocks.items():
            if not isinstance(entry, dict) or "variant" not in entry:
                raise DeserializationError(f"block under {role} has no variant", component=owner)
            parameters = entry.get("parameters", {})
            if not isinstance(parameters, dict):
                raise DeserializationError(f"'parameters' of the block under {role} must be an object", component=owner)
            result[role] = SubModelBlock(entry["variant"], dict(parameters))
        return result

    def _resolve_references(self, component: Component, kinds: Dict[str, ComponentKind]) -> None:
        required = {f.name for f in fields(component) if f.default is MISSING and f.default_factory is MISSING}
        references = component.references()
        for field, expected in component.REFERENCE_KINDS.items():
            target = references.get(field)
            if target is None:
                if field in required:
                    raise DeserializationError(
                        f"reference '{field}' is not set",
                        component=component.name, invariant="referential_integrity",
                    )
                continue
            if not isinstance(target, str) or kinds.get(target) is not expected:
                raise DeserializationError(
                    f"reference '{field}' -> '{target}' does not resolve to a {expected.value}",
                    component=component.name, invariant="referential_integrity",
                )


def serialize(document: SystemDocument, config: Optional[SerializationConfiguration] = None) -> Dict[str, Any]:
    """Plain-data form of ``document``."""
    return SystemSerializer(config).serialize(document)


def deserialize(data: Dict[str, Any], config: Optional[SerializationConfiguration] = None) -> SystemDocument:
    """Rebuild a document; DeserializationError on the first violated invariant."""
    return SystemSerializer(config).deserialize(data)


def to_json(document: SystemDocument, path: Union[str, Path, None] = None,
            config: Optional[SerializationConfiguration] = None) -> str:
    return SystemSerializer(config).to_json(document, path)


def from_json(source: Union[str, Path], config: Optional[SerializationConfiguration] = None) -> SystemDocument:
    """
    Load a document from JSON text or from a file path.

    Strings starting with ``{`` or ``[`` are parsed as text; anything else is
    read as a path.
    """
    if isinstance(source, str) and source.lstrip()[:1] in ("{", "["):
        text = source
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise DeserializationError(f"cannot read {source}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DeserializationError(f"invalid JSON: {e}") from e
    return deserialize(data, config)

