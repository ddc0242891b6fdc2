"""Logging setup that keeps the bot token out of log output."""

import logging
import os
from typing import Iterable, Optional, Sequence, Tuple

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
REDACTED = "***"
SENSITIVE_MARKERS = ("TOKEN", "SECRET", "PASSWORD", "KEY")
# httpx logs every Bot API request URL, and those URLs embed the bot token.
CHATTY_LOGGERS = ("httpx", "httpcore")


def sensitive_values(extra_values: Optional[Iterable[Optional[str]]] = None) -> Tuple[str, ...]:
    """Collect secrets from the environment plus explicitly passed values."""

    found = {
        value
        for name, value in os.environ.items()
        if value and any(marker in name.upper() for marker in SENSITIVE_MARKERS)
    }
    found.update(value for value in extra_values or () if isinstance(value, str) and value)
    # Longest first so that a secret containing another one is masked whole.
    return tuple(sorted(found, key=len, reverse=True))


class RedactingFormatter(logging.Formatter):
    """Formatter that masks known secrets in the final log line."""

    def __init__(self, fmt: Optional[str] = LOG_FORMAT, secrets: Sequence[str] = ()) -> None:
        super().__init__(fmt)
        self.secrets: Tuple[str, ...] = tuple(secrets)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        for secret in self.secrets:
            text = text.replace(secret, REDACTED)
        return text


def configure_logging(
    *,
    level: Optional[str] = None,
    extra_values: Optional[Iterable[Optional[str]]] = None,
) -> None:
    """Configure the root logger once and install redaction on its handlers."""

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    root.setLevel(level)

    secrets = sensitive_values(extra_values)
    for handler in root.handlers:
        if isinstance(handler.formatter, RedactingFormatter):
            handler.formatter.secrets = secrets
        else:
            handler.setFormatter(RedactingFormatter(secrets=secrets))

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
