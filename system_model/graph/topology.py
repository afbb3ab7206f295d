"""
Connectivity queries over the static topology.

The analyzer works on a snapshot of the document taken at construction:
buses become nodes and in-service branches become edges of a networkx
multigraph (parallel branches are kept). Nothing here performs electrical
computation.
"""

import logging
from typing import Dict, List, Set

import networkx as nx

from ..core.exceptions import NotFoundError
from ..core.models import Branch, Bus, BusType, Generator, Source, StaticInjection
from ..validators.validation_result import ValidationResult

logger = logging.getLogger(__name__)


class TopologyAnalyzer:
    """
    Read-only connectivity queries for one document snapshot.

    Example:
        >>> analyzer = TopologyAnalyzer(document)
        >>> analyzer.bus_degree("bus1")
        1
        >>> result = analyzer.validate_connectivity()
        >>> result.is_valid
        True
    """

    def __init__(self, document):
        self.document = document
        self._buses: Dict[str, Bus] = {}
        self._injections: Dict[str, List[StaticInjection]] = {}
        self.graph = self._build_graph()

    def _build_graph(self) -> nx.MultiGraph:
        graph = nx.MultiGraph()
        registry = self.document.registry

        # One lock scope so all three views come from the same state
        with registry.lock:
            buses = registry.iterate(Bus)
            branches = registry.iterate(Branch, lambda b: b.available)
            injections = registry.iterate(StaticInjection)

        for bus in buses:
            self._buses[bus.name] = bus
            self._injections[bus.name] = []
            graph.add_node(bus.name, number=bus.number, bus_type=bus.bus_type.value)

        for branch in branches:
            graph.add_edge(branch.from_bus, branch.to_bus, key=branch.name, variant=branch.variant)

        for injection in injections:
            self._injections[injection.bus].append(injection)

        logger.debug(f"Built topology graph with {graph.number_of_nodes()} buses "
                     f"and {graph.number_of_edges()} branches")
        return graph

    def _require_bus(self, bus_name: str) -> None:
        if bus_name not in self._buses:
            raise NotFoundError(bus_name, expected="Bus")

    def bus_degree(self, bus_name: str) -> int:
        """Number of in-service branches ending at ``bus_name``."""
        self._require_bus(bus_name)
        return self.graph.degree(bus_name)

    def branches_at(self, bus_name: str) -> List[str]:
        """Names of the in-service branches ending at ``bus_name``."""
        self._require_bus(bus_name)
        return [key for _, _, key in self.graph.edges(bus_name, keys=True)]

    def orphan_buses(self) -> List[str]:
        """Buses without any in-service branch."""
        return [name for name in self._buses if self.graph.degree(name) == 0]

    def islands(self) -> List[Set[str]]:
        """Connected groups of buses."""
        return [set(island) for island in nx.connected_components(self.graph)]

    def injections_at(self, bus_name: str) -> List[str]:
        """Names of the static injections connected to ``bus_name``."""
        self._require_bus(bus_name)
        return [injection.name for injection in self._injections[bus_name]]

    def validate_connectivity(self) -> ValidationResult:
        """
        Report islands that do not have exactly one reference bus.

        The check is advisory: documents under construction may legitimately
        fail it, so findings are returned rather than raised. A reference bus
        with no in-service Source or Generator is reported as a warning and
        buses without branches as info.
        """
        result = ValidationResult()
        islands = self.islands()

        for index, island in enumerate(islands):
            members = sorted(island)
            refs = [name for name in members if self._buses[name].bus_type is BusType.REF]
            location = ", ".join(members)
            if not refs:
                result.add_error("island has no reference bus", location, island=index)
            elif len(refs) > 1:
                result.add_error(
                    f"island has {len(refs)} reference buses: {', '.join(refs)}",
                    location, island=index,
                )

            for ref in refs:
                sources = [
                    i for i in self._injections[ref]
                    if i.available and isinstance(i, (Source, Generator))
                ]
                if not sources:
                    result.add_warning("reference bus has no source or generator", ref)

        for name in self.orphan_buses():
            result.add_info("bus has no in-service branch", name)

        result.details = {
            'buses': len(self._buses),
            'branches': self.graph.number_of_edges(),
            'islands': len(islands),
        }

        if result.is_valid:
            logger.debug("Connectivity check passed")
        else:
            logger.warning(f"Connectivity check found {len(result.errors)} problem(s)")
        return result

    def get_connectivity_report(self) -> str:
        """Human-readable summary of the topology and the connectivity check."""
        result = self.validate_connectivity()
        lines = [
            "Topology Report",
            "=" * 40,
            f"Buses: {len(self._buses)}",
            f"Branches in service: {self.graph.number_of_edges()}",
            f"Islands: {result.details['islands']}",
            f"Orphan buses: {', '.join(self.orphan_buses()) or 'none'}",
            "",
            f"Status: {'VALID' if result.is_valid else 'INVALID'}",
        ]
        for issue in result.issues:
            lines.append(f"  - {issue}")
        return "\n".join(lines)
