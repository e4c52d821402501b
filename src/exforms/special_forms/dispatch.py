"""case and cond: first-match dispatch."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from exforms._logging import get_logger
from exforms.errors import NoConditionTrueError
from exforms.patterns import Clause, defmatch

__all__ = ['case', 'cond']

logger = get_logger(__name__)


def case(subject: Any, clauses: Iterable[Clause | tuple[Any, ...]]) -> Any:
    """Run the first clause whose pattern and guard accept `subject`.

    Raises:
        NoClauseMatchError: If no clause accepts the subject.

    Example:
        ```python
        case(('ok', 5), [
            Clause(('ok', VAR), lambda v: v * 2),
            Clause(('error', VAR), lambda reason: 0),
        ])
        # 10
        ```
    """
    return defmatch(*clauses)(subject)


def cond(*clauses: tuple[Any, Callable[[], Any]]) -> Any:
    """Call the thunk paired with the first truthy condition.

    Raises:
        NoConditionTrueError: If every condition is falsy.

    Example:
        ```python
        cond(
            (x < 0, lambda: 'negative'),
            (x == 0, lambda: 'zero'),
            (True, lambda: 'positive'),
        )
        ```
    """
    for condition, thunk in clauses:
        if condition:
            return thunk()

    logger.debug('no_condition_true', clauses=len(clauses))
    raise NoConditionTrueError()
