"""for_: multi-generator comprehensions folded through the collector protocol."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any

import msgspec

from exforms._logging import get_logger
from exforms.collectable import DONE, Cont, StepFn
from exforms.collectable import into as default_into
from exforms.patterns import Bound, match

__all__ = ['Expression', 'for_', 'list_generator']

logger = get_logger(__name__)

type GeneratorFn = Callable[[], Iterable[Any]]


class Expression(msgspec.Struct, frozen=True, gc=False):
    """Comprehension body plus an optional filter.

    Both receive the values of one cross-product row positionally.
    """

    body: Callable[..., Any]
    guard: Callable[..., bool] | None = None

    def accepts(self, values: tuple[Any, ...]) -> bool:
        return self.guard is None or bool(self.guard(*values))


def list_generator(pattern: Any, iterable: Iterable[Any]) -> GeneratorFn:
    """Return a generator yielding `Bound` for each element matching `pattern`.

    Elements that do not match are skipped, so `list_generator(('ok', VAR),
    results)` walks only the successful results.
    """

    def generate() -> Iterator[Bound]:
        for item in iterable:
            outcome = match(pattern, item)
            if isinstance(outcome, Bound):
                yield outcome

    return generate


def _bindings(value: Any) -> tuple[Any, ...]:
    if isinstance(value, Bound):
        return value.values
    return (value,)


def _expand(generators: Sequence[GeneratorFn]) -> Iterator[tuple[Any, ...]]:
    """Cross product of the generators, first generator varying slowest.

    Generators are popped from the right; each popped sequence is prepended
    to every row built so far. The outermost generator, including a lone
    one, is streamed instead of being combined into a list.
    """
    stack = list(generators)
    if not stack:
        return

    rows: list[tuple[Any, ...]] = [()]
    while len(stack) > 1:
        rows = [_bindings(value) + row for value in stack.pop()() for row in rows]

    for value in stack.pop()():
        head = _bindings(value)
        for row in rows:
            yield head + row


def for_(
    expression: Expression | Callable[..., Any],
    generators: Sequence[GeneratorFn],
    into: Any = None,
    collectable: Callable[[Any], tuple[Any, StepFn]] = default_into,
) -> Any:
    """Evaluate a comprehension.

    Args:
        expression: Body and guard applied to each cross-product row; a bare
            callable is used as a body without a guard.
        generators: Zero-argument callables, each producing a finite sequence.
            Values that are `Bound` contribute all their captures, anything
            else contributes itself.
        into: Target container; a fresh list when None.
        collectable: Collector protocol, `(target) -> (acc, step)`.

    Returns:
        The result of the final `step(acc, DONE)` call.

    Example:
        ```python
        for_(
            Expression(lambda x, y: x * y, guard=lambda x, y: x != y),
            [lambda: [1, 2], lambda: [10, 20]],
        )
        # [10, 20, 20, 40]
        ```
    """
    if not isinstance(expression, Expression):
        expression = Expression(expression)

    acc, step = collectable([] if into is None else into)
    emitted = 0
    for values in _expand(generators):
        if expression.accepts(values):
            acc = step(acc, Cont(expression.body(*values)))
            emitted += 1

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug('comprehension_done', generators=len(generators), emitted=emitted)
    return step(acc, DONE)
