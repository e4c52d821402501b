"""@typeclass decorator: open, type-keyed dispatch.

Pattern kinds and collectable targets are both extension points: a new
pattern class or container type only needs to register an instance.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import wrapt

__all__ = ['NoInstanceError', 'TypeClass', 'typeclass']

F = TypeVar('F', bound=Callable[..., Any])


class NoInstanceError(TypeError):
    """Raised when no typeclass instance is registered for a type."""

    def __init__(self, typeclass_name: str, value_type: type) -> None:
        self.typeclass_name = typeclass_name
        self.value_type = value_type
        super().__init__(f"No instance of '{typeclass_name}' for type '{value_type.__name__}'")


class TypeClass(wrapt.ObjectProxy):
    """A function dispatching on the type of its first argument.

    Lookup order is exact type, then the MRO. Resolved lookups are cached per
    type; registering a new instance clears the cache.

    Example:
        ```python
        @typeclass
        def describe(value) -> str:
            return 'thing'

        @describe.instance(tuple)
        def describe_tuple(value: tuple) -> str:
            return f'tuple of {len(value)}'

        describe((1, 2))
        # 'tuple of 2'
        describe(3)
        # 'thing'
        ```
    """

    def __init__(self, default_fn: F) -> None:
        super().__init__(default_fn)
        self._self_name = default_fn.__name__
        self._self_default: F | None = default_fn if _has_implementation(default_fn) else None
        self._self_instances: dict[type, Callable[..., Any]] = {}
        self._self_cache: dict[type, Callable[..., Any] | None] = {}

    def instance(self, type_: type) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register the implementation used for `type_` and its subclasses."""

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self._self_instances[type_] = fn
            self._self_cache.clear()
            return fn

        return decorator

    def registered(self) -> tuple[type, ...]:
        """Types with an explicit instance, in registration order."""
        return tuple(self._self_instances)

    def _find_instance(self, value: Any) -> Callable[..., Any] | None:
        value_type = type(value)
        try:
            return self._self_cache[value_type]
        except KeyError:
            pass

        found: Callable[..., Any] | None = None
        for base in value_type.__mro__:
            if base in self._self_instances:
                found = self._self_instances[base]
                break

        self._self_cache[value_type] = found
        return found

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if not args:
            raise TypeError(f'{self._self_name}() requires at least one argument')

        instance_fn = self._find_instance(args[0])
        if instance_fn is not None:
            return instance_fn(*args, **kwargs)

        if self._self_default is not None:
            return self._self_default(*args, **kwargs)

        raise NoInstanceError(self._self_name, type(args[0]))

    def __repr__(self) -> str:
        return f'<typeclass {self._self_name} with {len(self._self_instances)} instances>'


def _has_implementation(fn: Callable[..., Any]) -> bool:
    """Check if a function has a body other than `...` or `pass`.

    Stub bodies compile to a bare `return None` with `co_consts == (None,)`;
    a docstring-only stub keeps the docstring as its first constant.
    """
    code = getattr(fn, '__code__', None)
    if code is None:
        return True

    consts = code.co_consts
    if fn.__doc__ is not None and consts[:1] == (fn.__doc__,):
        consts = consts[1:]
    # RESUME + RETURN_CONST on 3.13, RESUME + LOAD_CONST + RETURN_VALUE on 3.14
    return not (consts == (None,) and len(code.co_code) <= 6)


def typeclass(fn: F) -> TypeClass:
    """Create a typeclass from a function.

    The decorated function is the fallback implementation when it has a
    body, or only names the typeclass when its body is `...`.
    """
    return TypeClass(fn)
