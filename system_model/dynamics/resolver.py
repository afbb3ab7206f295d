"""
Binding of dynamic devices to the static injections they augment.

The binding is stored once, as the static injection's name on the dynamic
device. The registry derives the reverse index from it, so the two
directions can never disagree.
"""

import logging
from typing import Optional, Union

from ..core.exceptions import AlreadyAttachedError, DuplicateNameError, TypeMismatchError
from ..core.models import StaticInjection
from .composer import DynamicInjection

logger = logging.getLogger(__name__)


def attach(document, dynamic_injection: DynamicInjection, static_name: str) -> DynamicInjection:
    """
    Bind ``dynamic_injection`` to the static injection ``static_name``.

    The device is registered (or, if an unattached device of the same name is
    already registered, replaced) together with its back reference in one
    step; on failure nothing changes.

    Args:
        document: The SystemDocument to act on
        dynamic_injection: A composed device
        static_name: Name of a registered static injection

    Returns:
        The registered, attached device

    Raises:
        NotFoundError: if ``static_name`` is not a registered static injection
        AlreadyAttachedError: if the static injection already carries a device,
            or the device is bound elsewhere
        TypeMismatchError: if the static injection cannot carry this kind of device
    """
    if not isinstance(dynamic_injection, DynamicInjection):
        raise TypeMismatchError(
            f"{type(dynamic_injection).__name__} is not a dynamic device",
            component=getattr(dynamic_injection, "name", None),
        )

    registry = document.registry
    with registry.lock:
        static = document.get_component(StaticInjection, static_name)

        attached = registry.attached_to(static_name)
        if attached is not None:
            raise AlreadyAttachedError(static_name, attached)
        if not static.accepts(dynamic_injection):
            raise TypeMismatchError(
                f"{dynamic_injection.variant} cannot be attached to {static.variant} '{static_name}'",
                component=dynamic_injection.name,
            )

        bound = dynamic_injection.with_static_injection(static_name)
        if dynamic_injection.name in registry:
            registered = registry.as_dict()[dynamic_injection.name]
            if not isinstance(registered, DynamicInjection):
                raise DuplicateNameError(dynamic_injection.name)
            if registered.static_injection is not None:
                raise AlreadyAttachedError(dynamic_injection.name, registered.static_injection)
            document.replace_component(bound)
        else:
            document.add_component(bound)

    logger.info(f"Attached {bound.variant} '{bound.name}' to {static.variant} '{static_name}'")
    return bound


def detach(document, name: str) -> DynamicInjection:
    """
    Clear the back reference of the dynamic device ``name``.

    The device stays registered, unattached, until it is attached again or
    removed.

    Raises:
        NotFoundError: if no dynamic device is called ``name``
    """
    with document.registry.lock:
        device = document.get_component(DynamicInjection, name)
        if device.static_injection is None:
            logger.debug(f"'{name}' is not attached, nothing to detach")
            return device
        previous = device.static_injection
        orphan = device.with_static_injection(None)
        document.replace_component(orphan)

    logger.info(f"Detached '{name}' from '{previous}'")
    return orphan


def get_dynamic_injector(document, static_name: str) -> Optional[DynamicInjection]:
    """Device attached to the static injection ``static_name``, or None."""
    with document.registry.lock:
        document.get_component(StaticInjection, static_name)
        name = document.registry.attached_to(static_name)
        if name is None:
            return None
        return document.get_component(DynamicInjection, name)


def get_static_injector(document, dynamic: Union[DynamicInjection, str]) -> Optional[StaticInjection]:
    """Static injection a dynamic device is bound to, or None when unattached."""
    with document.registry.lock:
        name = dynamic.name if isinstance(dynamic, DynamicInjection) else dynamic
        device = document.get_component(DynamicInjection, name)
        if device.static_injection is None:
            return None
        return document.get_component(StaticInjection, device.static_injection)
