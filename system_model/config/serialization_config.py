"""
Serialization configuration management.
"""

from typing import Any, Dict

FORMAT_VERSION = "1.0"


class SerializationConfiguration:
    """
    Manages serializer and deserializer settings.
    """

    def __init__(self, config: Dict[str, Any] = None):
        self.config = config or {}

        # Default serialization settings
        self.defaults = {
            'indent': 2,
            'sort_keys': False,
            'format_version': FORMAT_VERSION,
            'strict_format_version': True,
        }

    def get(self, key: str, default=None):
        """Get a configuration value."""
        return self.config.get(key, self.defaults.get(key, default))

    def set(self, key: str, value: Any):
        """Set a configuration value."""
        self.config[key] = value

    def is_strict_version(self) -> bool:
        """Check if documents with another format version are refused."""
        return bool(self.get('strict_format_version', True))
