"""Tests for try_: rescue, catch, else and after."""

from collections import Counter

import pytest

from exforms import (
    VAR,
    Clause,
    FailureWithReason,
    MatchError,
    NoMatchInElseError,
    attach_reason,
    defmatch,
    normalize_failure,
    try_,
)


class ReasonedError(Exception):
    """Exception tagged with a semantic reason."""

    def __init__(self, reason):
        super().__init__(f'failed: {reason!r}')
        attach_reason(self, reason)


def boom():
    raise ValueError('boom')


class TestSuccess:
    """Tests for blocks that return normally."""

    def test_returns_block_value(self):
        """Without else, the block's value is returned."""
        assert try_(lambda: 42) == 42

    def test_else_receives_value(self):
        """else_ maps the block's value."""
        assert try_(lambda: 2, else_=lambda v: v * 10) == 20

    def test_handlers_not_called_on_success(self, calls: Counter):
        """rescue and catch only run on failure."""
        try_(
            lambda: 1,
            rescue=lambda e: calls.update(['rescue']),
            catch=lambda e: calls.update(['catch']),
        )
        assert calls == Counter()

    def test_else_match_failure_becomes_no_match_in_else(self):
        """A MatchError inside else_ is re-raised as NoMatchInElseError."""
        else_ = defmatch(Clause(('ok', VAR), lambda v: v))
        with pytest.raises(NoMatchInElseError) as info:
            try_(lambda: ('error', 1), else_=else_)
        assert info.value.value == ('error', 1)
        assert isinstance(info.value.__cause__, MatchError)

    def test_else_other_failure_propagates(self):
        """Non-match failures inside else_ propagate unchanged."""
        with pytest.raises(ZeroDivisionError):
            try_(lambda: 0, else_=lambda v: 1 / v)

    def test_else_not_rescued(self, calls: Counter):
        """Failures inside else_ are not routed to rescue."""
        with pytest.raises(KeyError):
            try_(lambda: {}, rescue=lambda e: calls.update(['rescue']), else_=lambda d: d['missing'])
        assert calls == Counter()


class TestFailure:
    """Tests for rescue/catch routing."""

    def test_rescue_receives_plain_exception(self):
        """Exceptions without a reason reach rescue unchanged."""
        result = try_(boom, rescue=lambda e: e)
        assert isinstance(result, ValueError)
        assert str(result) == 'boom'

    def test_rescue_receives_failure_with_reason(self):
        """Exceptions with a reason are wrapped, not mutated."""
        error = ReasonedError({'code': 7})

        def block():
            raise error

        result = try_(block, rescue=lambda failure: failure)
        assert result == FailureWithReason(original=error, reason={'code': 7})
        assert result.original is error
        assert error.__reason__ == {'code': 7}

    def test_catch_receives_raw_exception(self):
        """catch gets the raw exception, even when it carries a reason."""
        error = ReasonedError('why')

        def block():
            raise error

        assert try_(block, catch=lambda e: e) is error

    def test_rescue_has_priority_over_catch(self, calls: Counter):
        """With both handlers, only rescue runs."""
        result = try_(
            boom,
            rescue=lambda e: calls.update(['rescue']) or 'rescued',
            catch=lambda e: calls.update(['catch']) or 'caught',
        )
        assert result == 'rescued'
        assert calls == Counter({'rescue': 1})

    def test_unhandled_failure_reraised(self):
        """Without handlers the original exception propagates."""
        error = RuntimeError('original')

        def block():
            raise error

        with pytest.raises(RuntimeError) as info:
            try_(block)
        assert info.value is error

    def test_failure_in_handler_propagates(self):
        """An exception raised by rescue propagates as-is."""

        def rescue(_):
            raise KeyError('from handler')

        with pytest.raises(KeyError, match='from handler'):
            try_(boom, rescue=rescue)

    def test_else_skipped_on_rescued_failure(self, calls: Counter):
        """else_ only runs when the block succeeds."""
        result = try_(boom, rescue=lambda e: 'r', else_=lambda v: calls.update(['else']))
        assert result == 'r'
        assert calls == Counter()

    def test_base_exceptions_not_intercepted(self, calls: Counter):
        """BaseException subclasses bypass handlers but still run after."""

        class Halt(BaseException):
            pass

        def interrupt():
            raise Halt

        with pytest.raises(Halt):
            try_(
                interrupt,
                rescue=lambda e: calls.update(['rescue']),
                after=lambda: calls.update(['after']),
            )
        assert calls == Counter({'after': 1})


class TestAfter:
    """after runs exactly once on every exit path."""

    def test_after_on_success(self, calls: Counter):
        """Normal return runs after once."""
        assert try_(lambda: 1, after=lambda: calls.update(['after'])) == 1
        assert calls['after'] == 1

    def test_after_on_rescue(self, calls: Counter):
        """A rescued failure runs after once."""
        try_(boom, rescue=lambda e: None, after=lambda: calls.update(['after']))
        assert calls['after'] == 1

    def test_after_on_catch(self, calls: Counter):
        """A caught failure runs after once."""
        try_(boom, catch=lambda e: None, after=lambda: calls.update(['after']))
        assert calls['after'] == 1

    def test_after_on_reraise(self, calls: Counter):
        """An unhandled failure still runs after once."""
        with pytest.raises(ValueError):
            try_(boom, after=lambda: calls.update(['after']))
        assert calls['after'] == 1

    def test_after_on_handler_failure(self, calls: Counter):
        """A failing handler still runs after once."""

        def rescue(_):
            raise KeyError('x')

        with pytest.raises(KeyError):
            try_(boom, rescue=rescue, after=lambda: calls.update(['after']))
        assert calls['after'] == 1

    def test_after_on_else_no_match(self, calls: Counter):
        """An else_ pattern failure still runs after once."""
        with pytest.raises(NoMatchInElseError):
            try_(
                lambda: 'x',
                else_=defmatch(Clause(1, lambda: 1)),
                after=lambda: calls.update(['after']),
            )
        assert calls['after'] == 1

    def test_after_runs_last(self):
        """after runs after the handler and after else_."""
        order = []
        try_(
            lambda: order.append('do'),
            else_=lambda _: order.append('else'),
            after=lambda: order.append('after'),
        )
        try_(boom, rescue=lambda e: order.append('rescue'), after=lambda: order.append('after'))
        assert order == ['do', 'else', 'after', 'rescue', 'after']

    def test_after_result_ignored(self):
        """after's return value does not replace the result."""
        assert try_(lambda: 'value', after=lambda: 'ignored') == 'value'


class TestNormalizeFailure:
    """Tests for normalize_failure()."""

    def test_none_reason_not_wrapped(self):
        """An attached reason of None counts as no reason."""
        error = ReasonedError(None)
        assert normalize_failure(error) is error

    def test_reason_wrapped(self):
        """A non-None reason is wrapped with the original."""
        error = ReasonedError('r')
        assert normalize_failure(error) == FailureWithReason(error, 'r')

    def test_wrapper_is_frozen(self):
        """FailureWithReason is immutable."""
        failure = FailureWithReason(ValueError(), 'r')
        with pytest.raises(AttributeError):
            failure.reason = 'other'  # type: ignore[misc]

    def test_public_reason_attribute_ignored(self):
        """A stdlib exception's own `reason` attribute is not a tag."""
        error = UnicodeDecodeError('utf-8', b'\xff', 0, 1, 'invalid start byte')
        assert error.reason == 'invalid start byte'
        assert normalize_failure(error) is error

    def test_attach_reason_returns_exception(self):
        """attach_reason tags the exception in place and returns it."""
        error = KeyError('user')
        assert attach_reason(error, ('not_found', 42)) is error
        assert normalize_failure(error) == FailureWithReason(error, ('not_found', 42))


class TestStdlibFailures:
    """Tests for rescuing standard library exceptions."""

    def test_unicode_error_reaches_rescue_unwrapped(self):
        """isinstance checks in rescue keep working for UnicodeDecodeError."""
        result = try_(lambda: b'\xff'.decode(), rescue=lambda e: type(e).__name__)
        assert result == 'UnicodeDecodeError'

    def test_tagged_stdlib_error_is_wrapped(self):
        """A stdlib exception tagged with attach_reason is wrapped."""

        def block():
            raise attach_reason(LookupError('k'), 'missing')

        result = try_(block, rescue=lambda failure: failure.reason)
        assert result == 'missing'
