"""Runtime configuration: RuntimeConfig and initialization."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from exforms._logging import configure_logging, get_logger

__all__ = [
    'RuntimeConfig',
    'current_config',
    'get_config',
    'init',
]

logger = get_logger(__name__)

_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class RuntimeConfig:
    """Configuration for the exforms runtime.

    Attributes:
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = silent.
        json_logs: Emit JSON logs (True) or colored console output (False).
        mailbox_capacity: Max undelivered messages per mailbox before
            `send` blocks. `math.inf` means unbounded.
    """

    log_level: str | None = None
    json_logs: bool = True
    mailbox_capacity: float = math.inf


# Global runtime configuration (set by init())
_config: RuntimeConfig | None = None


def _detect_log_level() -> str | None:
    """Read EXFORMS_LOG_LEVEL, ignoring unknown values."""
    env_level = os.environ.get('EXFORMS_LOG_LEVEL', '').upper()
    if not env_level:
        return None
    if env_level not in _LEVELS:
        logger.warning('unknown_env_value', variable='EXFORMS_LOG_LEVEL', value=env_level)
        return None
    return env_level


def _detect_json_logs() -> bool:
    env_json = os.environ.get('EXFORMS_JSON_LOGS', '').lower()
    if env_json in ('0', 'false', 'no', 'off'):
        return False
    if env_json and env_json not in ('1', 'true', 'yes', 'on'):
        logger.warning('unknown_env_value', variable='EXFORMS_JSON_LOGS', value=env_json)
    return True


def _detect_mailbox_capacity() -> float:
    """Read EXFORMS_MAILBOX_CAPACITY; "inf", empty or invalid means unbounded."""
    env_capacity = os.environ.get('EXFORMS_MAILBOX_CAPACITY', '').strip().lower()
    if not env_capacity or env_capacity in ('inf', 'unbounded'):
        return math.inf
    try:
        capacity = int(env_capacity)
    except ValueError:
        logger.warning('unknown_env_value', variable='EXFORMS_MAILBOX_CAPACITY', value=env_capacity)
        return math.inf
    return float(max(0, capacity))


def init(
    log_level: str | None = None,
    json_logs: bool | None = None,
    mailbox_capacity: float | None = None,
) -> RuntimeConfig:
    """Initialize the exforms runtime.

    Arguments left as None are read from the environment
    (EXFORMS_LOG_LEVEL, EXFORMS_JSON_LOGS, EXFORMS_MAILBOX_CAPACITY).

    Args:
        log_level: Logging level ("DEBUG", "INFO", etc.). None = silent.
        json_logs: JSON (True) or console (False) log rendering.
        mailbox_capacity: Default capacity for new mailboxes.

    Returns:
        The RuntimeConfig that was set.

    Example:
        ```python
        from exforms import init

        init(log_level='DEBUG', json_logs=False)
        ```
    """
    global _config  # noqa: PLW0603

    resolved_level = log_level.upper() if log_level is not None else _detect_log_level()
    resolved_json = json_logs if json_logs is not None else _detect_json_logs()
    if mailbox_capacity is None:
        resolved_capacity = _detect_mailbox_capacity()
    else:
        resolved_capacity = max(0, mailbox_capacity)

    _config = RuntimeConfig(
        log_level=resolved_level,
        json_logs=resolved_json,
        mailbox_capacity=resolved_capacity,
    )

    if resolved_level is not None:
        configure_logging(resolved_level, json_output=resolved_json)

    return _config


def get_config() -> RuntimeConfig:
    """Get the current runtime configuration.

    Raises:
        RuntimeError: If init() has not been called.
    """
    if _config is None:
        msg = 'Runtime not initialized. Call exforms.init() first.'
        raise RuntimeError(msg)
    return _config


def current_config() -> RuntimeConfig:
    """The configuration set by init(), or the defaults before it runs."""
    return _config if _config is not None else RuntimeConfig()


def _reset() -> None:
    """Forget the configuration set by init()."""
    global _config  # noqa: PLW0603
    _config = None
