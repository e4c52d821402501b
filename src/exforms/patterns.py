"""Matching facade: structural patterns, match outcomes and clauses.

A pattern is an ordinary Python value. Tuples, lists and dicts match
structurally, the marker structs below capture or constrain, and every
other value is a literal compared by equality.

Example:
    ```python
    from exforms.patterns import VAR, WILDCARD, match, pin

    match(('ok', VAR), ('ok', 42))
    # Bound(values=(42,))
    match(('ok', VAR), ('error', 'boom'))
    # NoMatch
    match([VAR, WILDCARD, pin(3)], [1, 2, 3], guard=lambda a: a > 0)
    # Bound(values=(1,))
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

import msgspec

from exforms._logging import get_logger
from exforms.errors import NoClauseMatchError
from exforms.typeclass import typeclass

__all__ = [
    'VAR',
    'WILDCARD',
    'Bound',
    'Capture',
    'Clause',
    'HeadTail',
    'MatchOutcome',
    'NoMatch',
    'NoMatchType',
    'Of',
    'Pin',
    'StartsWith',
    'Var',
    'Wildcard',
    'arity',
    'as_clause',
    'capture',
    'defmatch',
    'head_tail',
    'match',
    'match_any',
    'match_or_default',
    'match_pattern',
    'of',
    'pin',
    'starts_with',
    'var',
]

logger = get_logger(__name__)


# ---------------------------------------------------------------------
# Match outcomes
# ---------------------------------------------------------------------


class Bound(msgspec.Struct, frozen=True, gc=False):
    """A successful match holding one value per capture slot.

    Values are ordered as the capture slots appear in the pattern, reading
    left to right. A Bound is truthy even when it captured nothing.
    """

    values: tuple[Any, ...] = ()

    def __bool__(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def concat(self, other: Bound) -> Bound:
        """Return a Bound holding these values followed by `other`'s."""
        return Bound(self.values + other.values)


class NoMatchType(msgspec.Struct, frozen=True, gc=False):
    """A failed match. Use the `NoMatch` singleton instead of instantiating."""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'NoMatch'


NoMatch = NoMatchType()

type MatchOutcome = Bound | NoMatchType


# ---------------------------------------------------------------------
# Pattern markers
# ---------------------------------------------------------------------


class Var(msgspec.Struct, frozen=True, gc=False):
    """Capture the matched value. The name is documentation only."""

    name: str | None = None


class Wildcard(msgspec.Struct, frozen=True, gc=False):
    """Match anything and capture nothing."""


class Pin(msgspec.Struct, frozen=True, gc=False):
    """Match only values equal to an already known value."""

    value: Any


class Capture(msgspec.Struct, frozen=True, gc=False):
    """Capture the whole value, then the captures of an inner pattern."""

    pattern: Any


class HeadTail(msgspec.Struct, frozen=True, gc=False):
    """Match a non-empty list as its first element and the remaining list."""

    head: Any
    tail: Any


class StartsWith(msgspec.Struct, frozen=True, gc=False):
    """Match a string by prefix; the remainder is matched against `rest`."""

    prefix: str
    rest: Any


class Of(msgspec.Struct, frozen=True, gc=False):
    """Match an instance of `cls` whose attributes match `fields`."""

    cls: type
    fields: dict[str, Any] = {}


VAR = Var()
WILDCARD = Wildcard()


def var(name: str | None = None) -> Var:
    """Capture slot; `var('x')` reads better than VAR in long patterns."""
    return VAR if name is None else Var(name)


def pin(value: Any) -> Pin:
    return Pin(value)


def capture(pattern: Any) -> Capture:
    return Capture(pattern)


def head_tail(head: Any, tail: Any = VAR) -> HeadTail:
    return HeadTail(head, tail)


def starts_with(prefix: str, rest: Any = VAR) -> StartsWith:
    return StartsWith(prefix, rest)


def of(cls: type, **fields: Any) -> Of:
    return Of(cls, fields)


# ---------------------------------------------------------------------
# Structural matching
# ---------------------------------------------------------------------


def _literal_equal(expected: Any, value: Any) -> bool:
    # True == 1 in Python, but a boolean literal only matches a boolean
    if isinstance(expected, bool) or isinstance(value, bool):
        return type(expected) is type(value) and expected == value
    return bool(expected == value)


@typeclass
def match_pattern(pattern: Any, value: Any, bindings: list[Any]) -> bool:
    """Match `value` against `pattern`, appending captures to `bindings`.

    Registered instances handle the structural and marker patterns; the
    fallback treats the pattern as a literal. On failure `bindings` may hold
    partial captures and must be discarded by the caller.
    """
    return _literal_equal(pattern, value)


@match_pattern.instance(Var)
def _match_var(pattern: Var, value: Any, bindings: list[Any]) -> bool:
    bindings.append(value)
    return True


@match_pattern.instance(Wildcard)
def _match_wildcard(pattern: Wildcard, value: Any, bindings: list[Any]) -> bool:
    return True


@match_pattern.instance(Pin)
def _match_pin(pattern: Pin, value: Any, bindings: list[Any]) -> bool:
    return _literal_equal(pattern.value, value)


@match_pattern.instance(Capture)
def _match_capture(pattern: Capture, value: Any, bindings: list[Any]) -> bool:
    bindings.append(value)
    return match_pattern(pattern.pattern, value, bindings)


def _match_elements(patterns: tuple[Any, ...] | list[Any], values: Any, bindings: list[Any]) -> bool:
    if len(patterns) != len(values):
        return False
    return all(match_pattern(p, v, bindings) for p, v in zip(patterns, values, strict=True))


@match_pattern.instance(tuple)
def _match_tuple(pattern: tuple[Any, ...], value: Any, bindings: list[Any]) -> bool:
    return isinstance(value, tuple) and _match_elements(pattern, value, bindings)


@match_pattern.instance(list)
def _match_list(pattern: list[Any], value: Any, bindings: list[Any]) -> bool:
    return isinstance(value, list) and _match_elements(pattern, value, bindings)


@match_pattern.instance(dict)
def _match_dict(pattern: dict[Any, Any], value: Any, bindings: list[Any]) -> bool:
    if not isinstance(value, Mapping):
        return False
    for key, sub in pattern.items():
        if key not in value or not match_pattern(sub, value[key], bindings):
            return False
    return True


@match_pattern.instance(HeadTail)
def _match_head_tail(pattern: HeadTail, value: Any, bindings: list[Any]) -> bool:
    if not isinstance(value, list) or not value:
        return False
    return match_pattern(pattern.head, value[0], bindings) and match_pattern(pattern.tail, value[1:], bindings)


@match_pattern.instance(StartsWith)
def _match_starts_with(pattern: StartsWith, value: Any, bindings: list[Any]) -> bool:
    if not isinstance(value, str) or not value.startswith(pattern.prefix):
        return False
    return match_pattern(pattern.rest, value[len(pattern.prefix) :], bindings)


@match_pattern.instance(Of)
def _match_of(pattern: Of, value: Any, bindings: list[Any]) -> bool:
    if not isinstance(value, pattern.cls):
        return False
    for name, sub in pattern.fields.items():
        if not hasattr(value, name) or not match_pattern(sub, getattr(value, name), bindings):
            return False
    return True


@typeclass
def arity(pattern: Any) -> int:
    """Number of capture slots declared by a pattern (0 for literals)."""
    return 0


@arity.instance(Var)
def _arity_var(pattern: Var) -> int:
    return 1


@arity.instance(Capture)
def _arity_capture(pattern: Capture) -> int:
    return 1 + arity(pattern.pattern)


@arity.instance(tuple)
@arity.instance(list)
def _arity_sequence(pattern: tuple[Any, ...] | list[Any]) -> int:
    return sum(arity(p) for p in pattern)


@arity.instance(dict)
def _arity_dict(pattern: dict[Any, Any]) -> int:
    return sum(arity(p) for p in pattern.values())


@arity.instance(HeadTail)
def _arity_head_tail(pattern: HeadTail) -> int:
    return arity(pattern.head) + arity(pattern.tail)


@arity.instance(StartsWith)
def _arity_starts_with(pattern: StartsWith) -> int:
    return arity(pattern.rest)


@arity.instance(Of)
def _arity_of(pattern: Of) -> int:
    return sum(arity(p) for p in pattern.fields.values())


def match(pattern: Any, value: Any, guard: Callable[..., bool] | None = None) -> MatchOutcome:
    """Match a value against a pattern, then apply the optional guard.

    The guard only runs after a structural match, with the captured values
    as positional arguments.

    Returns:
        Bound(values) on success, NoMatch otherwise.
    """
    bindings: list[Any] = []
    if not match_pattern(pattern, value, bindings):
        return NoMatch
    values = tuple(bindings)
    if guard is not None and not guard(*values):
        return NoMatch
    return Bound(values)


def match_or_default(
    pattern: Any,
    value: Any,
    guard: Callable[..., bool] | None = None,
    default: Any = None,
) -> Any:
    """Return the captured values as a tuple, or `default` on no match."""
    outcome = match(pattern, value, guard)
    if isinstance(outcome, Bound):
        return outcome.values
    return default


# ---------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------


class Clause(msgspec.Struct, frozen=True, gc=False):
    """One branch of a dispatch: pattern, body and optional guard.

    `body` and `guard` both receive the captured values positionally.
    """

    pattern: Any
    body: Callable[..., Any]
    guard: Callable[..., bool] | None = None

    def match(self, value: Any) -> MatchOutcome:
        return match(self.pattern, value, self.guard)


def as_clause(clause: Clause | tuple[Any, ...]) -> Clause:
    """Accept a Clause or a `(pattern, body[, guard])` tuple."""
    if isinstance(clause, Clause):
        return clause
    if isinstance(clause, tuple) and len(clause) in (2, 3):
        return Clause(*clause)
    msg = f'Expected a Clause or (pattern, body[, guard]) tuple, got {clause!r}'
    raise TypeError(msg)


def defmatch(*clauses: Clause | tuple[Any, ...]) -> Callable[[Any], Any]:
    """Compile clauses into a single matcher function.

    The matcher runs the body of the first clause whose pattern and guard
    accept the value. Later clauses are not tried.

    Raises:
        NoClauseMatchError: From the matcher, when no clause accepts the value.

    Example:
        ```python
        area = defmatch(
            Clause(('circle', VAR), lambda r: 3.14159 * r * r),
            Clause(('rect', VAR, VAR), lambda w, h: w * h),
        )
        area(('rect', 2, 3))
        # 6
        ```
    """
    compiled = tuple(as_clause(c) for c in clauses)

    def matcher(value: Any) -> Any:
        for clause in compiled:
            outcome = clause.match(value)
            if isinstance(outcome, Bound):
                return clause.body(*outcome.values)
        logger.debug('no_clause_matched', clauses=len(compiled), value_type=type(value).__name__)
        raise NoClauseMatchError(value)

    return matcher


def match_any(clauses: Any, value: Any) -> Any:
    """Apply an ordered clause list to a value in one call."""
    return defmatch(*clauses)(value)
