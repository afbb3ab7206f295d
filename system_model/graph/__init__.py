"""
Graph analysis of the static topology.
"""

from .topology import TopologyAnalyzer

__all__ = [
    'TopologyAnalyzer',
]
