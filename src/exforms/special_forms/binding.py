"""with_: pattern-gated binding chains."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from exforms._logging import get_logger
from exforms.patterns import Bound, match

__all__ = ['with_']

logger = get_logger(__name__)


def with_(
    *steps: tuple[Any, Callable[..., Any]] | tuple[Any, Callable[..., Any], Callable[..., bool]],
    do: Callable[..., Any],
    else_: Callable[[Any], Any] | None = None,
) -> Any:
    """Run steps in order, threading captured values forward.

    Each step is `(pattern, fn)` or `(pattern, fn, guard)`. `fn` receives
    every value captured so far; its result must match `pattern` (and the
    guard, which sees only that step's captures). The first mismatch is a
    normal result, not an error: it is returned as-is, or passed to
    `else_` when given. When every step matches, `do` receives all captures
    in step order.

    Example:
        ```python
        with_(
            (('ok', VAR), lambda: ('ok', 2)),
            (('ok', VAR), lambda a: ('ok', a * 10)),
            do=lambda a, b: a + b,
        )
        # 22
        ```
    """
    bound = Bound()
    for index, step in enumerate(steps):
        pattern, fn, *rest = step
        guard = rest[0] if rest else None

        result = fn(*bound.values)
        outcome = match(pattern, result, guard)
        if not isinstance(outcome, Bound):
            logger.debug('with_short_circuit', step=index, steps=len(steps))
            if else_ is not None:
                return else_(result)
            return result

        bound = bound.concat(outcome)

    return do(*bound.values)
