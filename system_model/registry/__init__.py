"""
Component registry and the system document that owns it.
"""

from .registry import ComponentRegistry, ComponentView
from .system import SystemDocument

__all__ = [
    'ComponentRegistry',
    'ComponentView',
    'SystemDocument',
]
