"""
Pandapower integration for system documents.
"""

from .pandapower_converter import PandapowerConverter, PandapowerImporter, from_pandapower

__all__ = [
    'PandapowerConverter',
    'PandapowerImporter',
    'from_pandapower',
]
