"""Property access helpers used by generated code.

A property is either a plain value or an explicitly tagged `Thunk`; only
thunks are invoked. Plain callables are returned untouched, so a stored
function never gets called by accident.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import msgspec

from exforms.errors import PropertyNotFoundError

__all__ = ['Thunk', 'call_property', 'is_instance_of']

_MISSING = object()


class Thunk(msgspec.Struct, frozen=True, gc=False):
    """A lazily computed property value."""

    fn: Callable[[], Any]

    def force(self) -> Any:
        return self.fn()


def _lookup(item: Any, name: str) -> Any:
    # own keys shadow mapping methods such as `values` or `items`
    if isinstance(item, Mapping) and name in item:
        return item[name]
    return getattr(item, name, _MISSING)


def call_property(item: Any, name: str) -> Any:
    """Read `name` from `item` as a mapping key, then as an attribute.

    Raises:
        PropertyNotFoundError: If neither lookup finds the name.

    Example:
        ```python
        call_property({'size': Thunk(lambda: 3)}, 'size')
        # 3
        call_property({'size': len}, 'size')
        # <built-in function len>
        ```
    """
    value = _lookup(item, name)
    if value is _MISSING:
        raise PropertyNotFoundError(name, item)
    if isinstance(value, Thunk):
        return value.force()
    return value


def is_instance_of(value: Any, type_: type | tuple[type, ...]) -> bool:
    return isinstance(value, type_)
