"""Mailboxes: per-task FIFO message queues for selective receive.

Delivery goes through an anyio memory object stream, so any task may send.
The owning task moves delivered messages into a local pending queue when it
scans; messages stay there, in arrival order, until a receive clause takes
them. Only the owner touches the pending queue.

Example:
    ```python
    async with anyio.create_task_group() as tg:
        box = spawn(tg, worker)
        await box.send(('ping', 1))
    ```
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import anyio
import structlog
from anyio.abc import TaskGroup

from exforms._config import current_config
from exforms._logging import get_logger
from exforms.errors import MailboxClosedError, MailboxFullError, NoMailboxError

__all__ = ['Mailbox', 'bind_mailbox', 'current_mailbox', 'send', 'spawn']

logger = get_logger(__name__)

_ids = itertools.count(1)
_current: ContextVar[Mailbox | None] = ContextVar('exforms_mailbox', default=None)


class Mailbox:
    """FIFO message queue owned by a single task.

    Args:
        capacity: Max delivered-but-unscanned messages before `send` blocks.
            None uses the configured default (unbounded unless configured).
    """

    def __init__(self, capacity: float | None = None) -> None:
        if capacity is None:
            capacity = current_config().mailbox_capacity
        buffer_size: int | float = capacity if math.isinf(capacity) else int(capacity)
        self.id = next(_ids)
        self._send_stream, self._receive_stream = anyio.create_memory_object_stream[Any](
            max_buffer_size=buffer_size
        )
        self._pending: list[Any] = []
        self._closed = False

    # --- Sending side (any task) ---

    async def send(self, message: Any) -> None:
        """Deliver a message, waiting while the mailbox is at capacity.

        Raises:
            MailboxClosedError: If the mailbox has been closed.
        """
        try:
            await self._send_stream.send(message)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            raise MailboxClosedError(self.id) from None

    def deliver(self, message: Any) -> None:
        """Deliver a message without waiting.

        Raises:
            MailboxFullError: If the mailbox is at capacity.
            MailboxClosedError: If the mailbox has been closed.
        """
        try:
            self._send_stream.send_nowait(message)
        except anyio.WouldBlock:
            stats = self._send_stream.statistics()
            raise MailboxFullError(int(stats.max_buffer_size)) from None
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            raise MailboxClosedError(self.id) from None

    # --- Owning side ---

    def _drain(self) -> None:
        if self._closed:
            return
        while True:
            try:
                self._pending.append(self._receive_stream.receive_nowait())
            except (anyio.WouldBlock, anyio.EndOfStream):
                return

    def peek_all(self) -> tuple[Any, ...]:
        """Pending messages in arrival order, including newly delivered ones."""
        self._drain()
        return tuple(self._pending)

    def remove_at(self, index: int) -> Any:
        """Remove and return the pending message at `index`."""
        return self._pending.pop(index)

    async def wait(self) -> Any:
        """Suspend until one more message arrives, queue it and return it.

        Raises:
            MailboxClosedError: If the mailbox is closed while waiting.
        """
        try:
            message = await self._receive_stream.receive()
        except (anyio.EndOfStream, anyio.ClosedResourceError):
            raise MailboxClosedError(self.id) from None
        self._pending.append(message)
        return message

    def close(self) -> None:
        """Stop accepting messages. Already delivered messages stay pending."""
        self._drain()
        self._closed = True
        self._send_stream.close()
        self._receive_stream.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        self._drain()
        return len(self._pending)

    def __repr__(self) -> str:
        return f'<Mailbox {self.id} pending={len(self._pending)}>'


def current_mailbox() -> Mailbox:
    """The mailbox owned by the calling task.

    Raises:
        NoMailboxError: If the task was not started with spawn() or
            bind_mailbox().
    """
    box = _current.get()
    if box is None:
        raise NoMailboxError()
    return box


@contextmanager
def bind_mailbox(mailbox: Mailbox | None = None) -> Iterator[Mailbox]:
    """Make `mailbox` (or a new one) the current task's mailbox."""
    box = mailbox if mailbox is not None else Mailbox()
    token = _current.set(box)
    try:
        with structlog.contextvars.bound_contextvars(mailbox=box.id):
            yield box
    finally:
        _current.reset(token)


def spawn(
    task_group: TaskGroup,
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    mailbox: Mailbox | None = None,
) -> Mailbox:
    """Start `fn(*args)` in `task_group` as the owner of a fresh mailbox.

    Returns:
        The task's mailbox, which other tasks use to send it messages.
    """
    box = mailbox if mailbox is not None else Mailbox()

    async def run() -> None:
        with bind_mailbox(box):
            logger.debug('process_started', fn=getattr(fn, '__name__', repr(fn)))
            await fn(*args)

    task_group.start_soon(run, name=f'exforms-process-{box.id}')
    return box


async def send(mailbox: Mailbox, message: Any) -> None:
    """Send `message` to `mailbox`."""
    await mailbox.send(message)
