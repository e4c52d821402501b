"""Tests for with_ binding chains."""

from collections import Counter

from hypothesis import given

from exforms import VAR, WILDCARD, with_
from tests.strategies import integers


def ok(value):
    return ('ok', value)


class TestWithSuccess:
    """Tests for chains where every step matches."""

    def test_success_receives_all_bindings(self):
        """do receives the bindings of every step, in step order."""
        result = with_(
            (('ok', VAR), lambda: ok(1)),
            (('ok', VAR, VAR), lambda a: ('ok', a + 1, a + 2)),
            do=lambda a, b, c: [a, b, c],
        )
        assert result == [1, 2, 3]

    def test_steps_receive_accumulated_bindings(self):
        """Each step function gets every value bound before it."""
        seen = []

        def step(*args):
            seen.append(args)
            return ok(len(args))

        with_(
            (('ok', VAR), step),
            (('ok', VAR), step),
            (('ok', VAR), step),
            do=lambda *all_bound: all_bound,
        )
        assert seen == [(), (0,), (0, 1)]

    def test_steps_without_captures(self):
        """Steps that capture nothing add no arguments."""
        result = with_(
            ('ready', lambda: 'ready'),
            (('ok', VAR), lambda: ok('x')),
            do=lambda x: x,
        )
        assert result == 'x'

    def test_no_steps_calls_do(self):
        """An empty chain calls do with no arguments."""
        assert with_(do=lambda: 'done') == 'done'

    def test_else_not_called_on_success(self, calls: Counter):
        """else_ only runs on a mismatch."""
        with_((VAR, lambda: 1), do=lambda x: x, else_=lambda r: calls.update(['else']))
        assert calls == Counter()

    @given(a=integers, b=integers)
    def test_concatenation_of_bindings(self, a, b):
        """Bindings concatenate across steps for any values."""
        result = with_(
            ((VAR, WILDCARD), lambda: (a, 'skip')),
            ([VAR], lambda x: [b]),
            do=lambda x, y: (x, y),
        )
        assert result == (a, b)


class TestWithShortCircuit:
    """Tests for chains that stop at a mismatch."""

    def test_mismatch_returns_unmatched_value(self, calls: Counter):
        """Without else_, the unmatched value is returned as-is."""

        def failing(_first):
            calls['failing'] += 1
            return ('error', 'nope')

        def later(*_):
            calls['later'] += 1
            return ok(0)

        result = with_(
            (('ok', VAR), lambda: ok(1)),
            (('ok', VAR), failing),
            (('ok', VAR), later),
            do=lambda *_: calls.update(['do']),
        )
        assert result == ('error', 'nope')
        assert calls == Counter({'failing': 1})

    def test_mismatch_calls_else(self):
        """With else_, the unmatched value is passed to it."""
        result = with_(
            (('ok', VAR), lambda: ('error', 'bad input')),
            do=lambda v: v,
            else_=lambda unmatched: f'handled {unmatched[1]}',
        )
        assert result == 'handled bad input'

    def test_mismatch_is_not_an_error(self):
        """A mismatch with a None result simply returns None."""
        assert with_((('ok', VAR), lambda: None), do=lambda v: v) is None

    def test_guard_rejection_short_circuits(self):
        """A step's guard sees only that step's bindings."""
        seen = []

        def guard(value):
            seen.append(value)
            return value > 10

        result = with_(
            (('ok', VAR), lambda: ok(100)),
            (('ok', VAR), lambda first: ok(5), guard),
            do=lambda a, b: 'unreachable',
            else_=lambda unmatched: unmatched,
        )
        assert result == ('ok', 5)
        assert seen == [5]

    def test_guard_acceptance_continues(self):
        """A passing guard keeps the bindings."""
        result = with_(
            (('ok', VAR), lambda: ok(20), lambda v: v > 10),
            do=lambda v: v,
        )
        assert result == 20
