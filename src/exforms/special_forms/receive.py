"""receive: selective receive from the calling task's mailbox.

Messages are scanned in arrival order, and for each message the clauses are
tried in declaration order, so the oldest message that matches any clause
wins, even if a newer message would match an earlier clause. A message that
no clause matches stays in the mailbox for later receives.

Timeouts:
    timeout=0: scan what is already there, then fall back to `after`.
    timeout=None: suspend until a matching message arrives.
    timeout=t: suspend for at most t seconds, then fall back to `after`.

Only the calling task suspends; other tasks keep running and delivering.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import anyio

from exforms._logging import get_logger
from exforms.mailbox import Mailbox, current_mailbox
from exforms.patterns import Bound, Clause, as_clause

__all__ = ['receive']

logger = get_logger(__name__)


def _timed_out() -> bool:
    return True


def _scan(mailbox: Mailbox, clauses: tuple[Clause, ...], start: int) -> tuple[Clause, Bound] | None:
    """Take the first message at or after `start` that some clause matches.

    Scan and removal run without awaiting, so they are atomic for the owner.
    """
    messages = mailbox.peek_all()
    for index in range(start, len(messages)):
        for clause in clauses:
            outcome = clause.match(messages[index])
            if isinstance(outcome, Bound):
                mailbox.remove_at(index)
                return clause, outcome
    return None


async def receive(
    clauses: Iterable[Clause | tuple[Any, ...]],
    timeout: float | None = 0,
    after: Callable[[], Any] = _timed_out,
    *,
    mailbox: Mailbox | None = None,
) -> Any:
    """Take the first matching message and run its clause body.

    Args:
        clauses: Ordered Clause objects or `(pattern, body[, guard])` tuples.
        timeout: Seconds to wait for a match; 0 polls, None waits forever.
        after: Called (without arguments) when nothing matched in time.
        mailbox: Mailbox to read; defaults to the calling task's mailbox.

    Returns:
        The matching clause's body result, or `after()`'s result.

    Raises:
        NoMailboxError: If no mailbox is given and the task owns none.
        MailboxClosedError: If the mailbox closes while waiting.

    Example:
        ```python
        reply = await receive(
            [
                Clause(('pong', VAR), lambda n: n),
                Clause(('error', VAR), lambda reason: None),
            ],
            timeout=5,
            after=lambda: 'no reply',
        )
        ```
    """
    box = mailbox if mailbox is not None else current_mailbox()
    compiled = tuple(as_clause(c) for c in clauses)

    found = _scan(box, compiled, 0)
    if found is None and timeout != 0:
        with anyio.move_on_after(timeout):
            while found is None:
                # earlier messages already failed every clause
                scanned = len(box.peek_all())
                await box.wait()
                found = _scan(box, compiled, scanned)

    if found is None:
        logger.debug('receive_timeout', mailbox=box.id, timeout=timeout, pending=len(box))
        return after()

    clause, bound = found
    logger.debug('receive_matched', mailbox=box.id, pending=len(box))
    return clause.body(*bound.values)
