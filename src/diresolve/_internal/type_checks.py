from __future__ import annotations

import inspect
import types
from typing import Any, TypeGuard


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_protocol_class(candidate: object) -> bool:
    """Return true when candidate is a ``typing.Protocol`` subclass.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return is_runtime_class(candidate) and bool(getattr(candidate, "_is_protocol", False))


def is_interface_class(candidate: object) -> bool:
    """Return true when candidate is an abstract class or a protocol.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    if not is_runtime_class(candidate):
        return False
    return inspect.isabstract(candidate) or is_protocol_class(candidate)


def is_builtin_class(candidate: object) -> bool:
    """Return true when candidate is a class defined in ``builtins``.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return is_runtime_class(candidate) and candidate.__module__ == "builtins"


def is_subclass_safe(candidate: object, parent: object) -> bool:
    """Return ``issubclass(candidate, parent)`` or false when either side is not a class.

    Args:
        candidate: Class checked against ``parent``.
        parent: Class or protocol that ``candidate`` must derive from.

    """
    if not is_runtime_class(candidate) or not is_runtime_class(parent):
        return False
    try:
        return issubclass(candidate, parent)
    except TypeError:
        # non-runtime-checkable protocols reject issubclass()
        return parent in candidate.__mro__


__all__ = [
    "is_builtin_class",
    "is_interface_class",
    "is_protocol_class",
    "is_runtime_class",
    "is_subclass_safe",
]
