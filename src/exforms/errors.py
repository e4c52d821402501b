"""Error types raised by the special forms and the matching facade."""

from __future__ import annotations

from typing import Any

from exforms.typeclass import NoInstanceError

__all__ = [
    'MailboxClosedError',
    'MailboxFullError',
    'MatchError',
    'NoClauseMatchError',
    'NoConditionTrueError',
    'NoInstanceError',
    'NoMailboxError',
    'NoMatchInElseError',
    'PropertyNotFoundError',
]


# --- Pattern Errors ---


class MatchError(Exception):
    """A value failed to match a required pattern."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f'No match of right hand side value: {value!r}')


class NoClauseMatchError(MatchError):
    """No clause of a case/defmatch accepted the value."""

    def __init__(self, value: Any) -> None:
        self.value = value
        Exception.__init__(self, f'No clause matching: {value!r}')


class NoMatchInElseError(Exception):
    """The else branch of try_ did not match the block's value."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f'No match found in else for: {value!r}')


# --- Control Flow Errors ---


class NoConditionTrueError(Exception):
    """Every condition of a cond evaluated falsy."""

    def __init__(self) -> None:
        super().__init__('No condition evaluated to a truthy value')


# --- Mailbox Errors ---


class MailboxClosedError(Exception):
    """The mailbox was closed and has no more messages to deliver."""

    def __init__(self, mailbox_id: int | None = None) -> None:
        self.mailbox_id = mailbox_id
        msg = 'Mailbox closed'
        if mailbox_id is not None:
            msg = f'Mailbox {mailbox_id} closed'
        super().__init__(msg)


class MailboxFullError(Exception):
    """A non-blocking delivery found the mailbox at capacity."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(f'Mailbox full (capacity={capacity})')


class NoMailboxError(RuntimeError):
    """receive was called from a task that owns no mailbox."""

    def __init__(self) -> None:
        super().__init__('No mailbox bound to the current task; use spawn() or bind_mailbox()')


class PropertyNotFoundError(LookupError):
    """call_property could not find the named attribute or key."""

    def __init__(self, name: str, item: Any) -> None:
        self.name = name
        self.item = item
        super().__init__(f'Property {name} not found in {item!r}')
