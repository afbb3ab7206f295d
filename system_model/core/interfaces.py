"""
Core interfaces for the system model package.

This module defines the abstract base classes that external topology
adapters implement. Adapters only produce or consume components through the
public registry operations, so every invariant is enforced on the way in.
"""

from abc import ABC, abstractmethod
from typing import Any


class TopologyImporter(ABC):
    """
    Abstract base class for topology importers.

    Importers populate a system document from an external network
    exchange format.
    """

    @abstractmethod
    def build_document(self, source: Any):
        """
        Build a system document from ``source``.

        Args:
            source: The external network representation

        Returns:
            A new SystemDocument holding the imported static topology
        """
        pass


class TopologyExporter(ABC):
    """
    Abstract base class for topology exporters.

    Exporters convert the static topology of a document snapshot into an
    external network representation.
    """

    @abstractmethod
    def convert(self) -> Any:
        """
        Convert the document given at construction.

        Returns:
            The external network representation
        """
        pass
