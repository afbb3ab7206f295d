from .logging_utils import setup_logging, print_system_summary

__all__ = [
    'setup_logging',
    'print_system_summary',
]
