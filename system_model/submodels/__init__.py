"""
Sub-model capability framework.

Declares the capability roles and the variant blocks that fill them.
"""

from .roles import Role, role_order
from .blocks import SubModelBlock, make_block, validate_block, state_dimension

__all__ = [
    'Role',
    'role_order',
    'SubModelBlock',
    'make_block',
    'validate_block',
    'state_dimension',
]
