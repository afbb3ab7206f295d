"""
Persistence of system documents.
"""

from .serializer import SystemSerializer, serialize, deserialize, to_json, from_json

__all__ = [
    'SystemSerializer',
    'serialize',
    'deserialize',
    'to_json',
    'from_json',
]
