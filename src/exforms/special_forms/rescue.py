"""try_: guarded blocks with rescue/catch/else/after.

`rescue` sees a normalized failure: an exception tagged with a reason by
`attach_reason` arrives wrapped as `FailureWithReason`, any other exception
arrives as-is. The tag lives in a dedicated `__reason__` attribute, so the
public `reason` of `UnicodeError` or `URLError` is never picked up.
`catch` always sees the raw exception. When both are given, `rescue` wins
and `catch` is never called.

Only `Exception` subclasses are intercepted; cancellation and other
`BaseException`s propagate, with `after` still running.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import msgspec

from exforms._logging import get_logger
from exforms.errors import MatchError, NoMatchInElseError

__all__ = ['FailureWithReason', 'attach_reason', 'normalize_failure', 'try_']

logger = get_logger(__name__)


class FailureWithReason(msgspec.Struct, frozen=True, gc=False):
    """An exception paired with the semantic reason it carries."""

    original: BaseException
    reason: Any


def attach_reason[E: BaseException](exc: E, reason: Any) -> E:
    """Tag `exc` with a semantic reason for `rescue` handlers and return it.

    Example:
        ```python
        raise attach_reason(KeyError('user'), ('not_found', 42))
        ```
    """
    exc.__reason__ = reason  # type: ignore[attr-defined]
    return exc


def normalize_failure(exc: BaseException) -> FailureWithReason | BaseException:
    """Wrap `exc` with its attached reason when it has one, else return it."""
    reason = getattr(exc, '__reason__', None)
    if reason is None:
        return exc
    return FailureWithReason(original=exc, reason=reason)


def try_(
    do: Callable[[], Any],
    rescue: Callable[[Any], Any] | None = None,
    catch: Callable[[BaseException], Any] | None = None,
    else_: Callable[[Any], Any] | None = None,
    after: Callable[[], Any] | None = None,
) -> Any:
    """Run `do` with Elixir try semantics.

    Args:
        do: The guarded block.
        rescue: Called with the normalized failure; its result is returned.
        catch: Called with the raw exception when no `rescue` is given.
        else_: Called with the block's value on success. A pattern failure
            inside it becomes NoMatchInElseError.
        after: Runs exactly once on every exit path, after everything else.

    Raises:
        NoMatchInElseError: If `else_` raises a MatchError.

    Example:
        ```python
        try_(
            lambda: int('x'),
            rescue=lambda exc: -1,
            after=lambda: print('done'),
        )
        # prints 'done', returns -1
        ```
    """
    try:
        try:
            result = do()
        except Exception as exc:
            if rescue is not None:
                logger.debug('failure_rescued', error=type(exc).__name__)
                return rescue(normalize_failure(exc))
            if catch is not None:
                logger.debug('failure_caught', error=type(exc).__name__)
                return catch(exc)
            raise

        if else_ is None:
            return result

        try:
            return else_(result)
        except MatchError as exc:
            raise NoMatchInElseError(result) from exc
    finally:
        if after is not None:
            after()
