"""exforms: Elixir-style special forms for Python 3.13+.

Pattern-driven control flow on top of a small structural matcher:
case/cond dispatch, for_ comprehensions, try_ with rescue/catch/else/after,
with_ binding chains, and selective receive over task mailboxes.

Flat imports (preferred):
    from exforms import case, cond, for_, try_, with_, receive
    from exforms import Clause, VAR, WILDCARD, pin, match

Submodule imports (for organization):
    from exforms.patterns import defmatch, head_tail
    from exforms.collectable import into, Cont, DONE
    from exforms.mailbox import Mailbox, spawn
"""

# Configuration
from exforms._config import RuntimeConfig, get_config, init

# Logging
from exforms._logging import add_log_hook, clear_log_hooks, configure_logging, get_logger, remove_log_hook

# Collector protocol
from exforms.collectable import DONE, Cont, Done, collect, into

# Errors
from exforms.errors import (
    MailboxClosedError,
    MailboxFullError,
    MatchError,
    NoClauseMatchError,
    NoConditionTrueError,
    NoInstanceError,
    NoMailboxError,
    NoMatchInElseError,
    PropertyNotFoundError,
)

# Property helpers
from exforms.functions import Thunk, call_property, is_instance_of

# Mailboxes
from exforms.mailbox import Mailbox, bind_mailbox, current_mailbox, send, spawn

# Matching facade
from exforms.patterns import (
    VAR,
    WILDCARD,
    Bound,
    Clause,
    MatchOutcome,
    NoMatch,
    NoMatchType,
    arity,
    capture,
    defmatch,
    head_tail,
    match,
    match_any,
    match_or_default,
    of,
    pin,
    starts_with,
    var,
)

# Special forms
from exforms.special_forms import (
    Expression,
    FailureWithReason,
    attach_reason,
    case,
    cond,
    for_,
    list_generator,
    normalize_failure,
    receive,
    try_,
    with_,
)

# Typeclass
from exforms.typeclass import typeclass

__all__ = [
    'DONE',
    'VAR',
    'WILDCARD',
    'Bound',
    'Clause',
    'Cont',
    'Done',
    'Expression',
    'FailureWithReason',
    'Mailbox',
    'MailboxClosedError',
    'MailboxFullError',
    'MatchError',
    'MatchOutcome',
    'NoClauseMatchError',
    'NoConditionTrueError',
    'NoInstanceError',
    'NoMailboxError',
    'NoMatch',
    'NoMatchInElseError',
    'NoMatchType',
    'PropertyNotFoundError',
    'RuntimeConfig',
    'Thunk',
    'add_log_hook',
    'arity',
    'attach_reason',
    'bind_mailbox',
    'call_property',
    'capture',
    'case',
    'clear_log_hooks',
    'collect',
    'cond',
    'configure_logging',
    'current_mailbox',
    'defmatch',
    'for_',
    'get_config',
    'get_logger',
    'head_tail',
    'init',
    'into',
    'is_instance_of',
    'list_generator',
    'match',
    'match_any',
    'match_or_default',
    'normalize_failure',
    'of',
    'pin',
    'receive',
    'remove_log_hook',
    'send',
    'spawn',
    'starts_with',
    'try_',
    'typeclass',
    'var',
    'with_',
]
