"""Collector protocol: fold values into a target container.

`into(target)` returns an initial accumulator and a step function. The step
function is called with `Cont(value)` once per value and finally with
`DONE`, whose return value is the finished container:

    acc, step = into([])
    acc = step(acc, Cont(1))
    acc = step(acc, Cont(2))
    step(acc, DONE)
    # [1, 2]

New container types register an instance:

    @into.instance(MyBag)
    def into_bag(target: MyBag) -> tuple[Any, StepFn]:
        ...
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import msgspec

from exforms.typeclass import NoInstanceError, typeclass

__all__ = ['DONE', 'Cont', 'Done', 'Step', 'StepFn', 'collect', 'into']


class Cont(msgspec.Struct, frozen=True, gc=False):
    """Step instruction: add `value` to the accumulator and continue."""

    value: Any


class Done(msgspec.Struct, frozen=True, gc=False):
    """Step instruction: finish and return the collected container."""

    def __repr__(self) -> str:
        return 'DONE'


DONE = Done()

type Step = Cont | Done
type StepFn = Callable[[Any, Step], Any]


def _make_step(add: Callable[[Any, Any], None], finish: Callable[[Any], Any]) -> StepFn:
    def step(acc: Any, instruction: Step) -> Any:
        if isinstance(instruction, Cont):
            add(acc, instruction.value)
            return acc
        if isinstance(instruction, Done):
            return finish(acc)
        msg = f'Expected Cont(value) or DONE, got {instruction!r}'
        raise TypeError(msg)

    return step


def _add_pair(acc: dict[Any, Any], pair: Any) -> None:
    key, value = pair
    acc[key] = value


_list_step = _make_step(list.append, lambda acc: acc)
_tuple_step = _make_step(list.append, tuple)
_set_step = _make_step(set.add, lambda acc: acc)
_frozenset_step = _make_step(set.add, frozenset)
_dict_step = _make_step(_add_pair, lambda acc: acc)
_str_step = _make_step(lambda acc, value: acc.append(str(value)), ''.join)


@typeclass
def into(target: Any) -> tuple[Any, StepFn]:
    """Return `(initial_accumulator, step)` for collecting into `target`.

    The target's existing contents are kept as a prefix. The target itself
    is never mutated.

    Raises:
        NoInstanceError: If no instance is registered for the target's type.
    """
    raise NoInstanceError('into', type(target))


@into.instance(list)
def _into_list(target: list[Any]) -> tuple[Any, StepFn]:
    return list(target), _list_step


@into.instance(tuple)
def _into_tuple(target: tuple[Any, ...]) -> tuple[Any, StepFn]:
    return list(target), _tuple_step


@into.instance(set)
def _into_set(target: set[Any]) -> tuple[Any, StepFn]:
    return set(target), _set_step


@into.instance(frozenset)
def _into_frozenset(target: frozenset[Any]) -> tuple[Any, StepFn]:
    return set(target), _frozenset_step


@into.instance(dict)
def _into_dict(target: dict[Any, Any]) -> tuple[Any, StepFn]:
    return dict(target), _dict_step


@into.instance(str)
def _into_str(target: str) -> tuple[Any, StepFn]:
    return [target], _str_step


def collect(values: Iterable[Any], target: Any = None, collectable: Callable[[Any], tuple[Any, StepFn]] = into) -> Any:
    """Fold `values` into `target` (a new list when None) through the protocol."""
    acc, step = collectable([] if target is None else target)
    for value in values:
        acc = step(acc, Cont(value))
    return step(acc, DONE)
