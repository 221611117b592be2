"""Logging setup for Toncoin Wallet.

``setup_logging`` attaches ``RedactingFilter`` to every handler it installs,
so seeds and secret keys are masked before a record reaches a sink.
Library code logs through ``get_logger`` and never configures the root
logger on its own.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from toncoin_wallet.shared.errors import (
    AmountError,
    BigAmountError,
    DestinationEqualsSourceError,
    InsufficientCoinForTransactionFeeError,
    InvalidAddressError,
    InvalidMetaError,
    InvalidNetworkAddressError,
    NodeError,
    SmallAmountError,
)
from toncoin_wallet.shared.network import NetworkError, NetworkErrorType

LOG_FILENAME = "wallet.log"
REDACTED = "[REDACTED]"

# 64-byte secret key (private || public) and 64-byte BIP39 seed, in hex
_SECRET_HEX = re.compile(r"\b[0-9A-Fa-f]{128}\b")
_SECRET_FIELD = re.compile(
    r"((?:seed|mnemonic|secret[_ ]?key|private[_ ]?key|privatekey)['\"]?\s*[:=]\s*['\"]?)[^\s'\",}]+",
    re.IGNORECASE,
)
_SECRET_KEYS = ("seed", "mnemonic", "secret", "private")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_dir: Path | None = None
    to_file: bool = True
    to_stdout: bool = False
    json_format: bool = False

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        level = os.getenv("TONCOIN_WALLET_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(level), int):
            level = "INFO"
        log_dir = os.getenv("TONCOIN_WALLET_DIR")
        return cls(
            level=level,
            log_dir=Path(log_dir).expanduser() if log_dir else None,
            to_stdout=_env_flag("TONCOIN_WALLET_LOG_STDOUT"),
            json_format=os.getenv("TONCOIN_WALLET_LOG_FORMAT", "").lower() == "json",
        )


def redact(text: str) -> str:
    text = _SECRET_FIELD.sub(rf"\1{REDACTED}", text)
    return _SECRET_HEX.sub(REDACTED, text)


def redact_context(context: dict[str, Any]) -> dict[str, Any]:
    result = {}
    for key, value in context.items():
        if any(marker in key.lower() for marker in _SECRET_KEYS):
            result[key] = REDACTED
        elif isinstance(value, dict):
            result[key] = redact_context(value)
        elif isinstance(value, str):
            result[key] = redact(value)
        else:
            result[key] = value
    return result


class RedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(record.getMessage())
        record.args = None
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            record.context = redact_context(context)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


class ContextAdapter(logging.LoggerAdapter):
    """Carries wallet fields (asset, address) into ``record.context``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra") or {}
        context = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = {**extra, "context": context}
        return msg, kwargs

    def with_context(self, **fields: Any) -> "ContextAdapter":
        return ContextAdapter(self.logger, {**self.extra, **fields})


def get_logger(name: str, **context: Any) -> ContextAdapter:
    return ContextAdapter(logging.getLogger(name), context)


def _formatter(config: LoggingConfig) -> logging.Formatter:
    if config.json_format:
        return JsonFormatter()
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(config: LoggingConfig | None = None) -> list[logging.Handler]:
    """Install redacting handlers on the root logger, replacing existing ones."""
    config = config or LoggingConfig.from_environment()

    root = logging.getLogger()
    root.setLevel(config.level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handlers: list[logging.Handler] = []
    if config.to_file:
        log_dir = config.log_dir or Path.home() / ".config" / "toncoin-wallet"
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8"))
    if config.to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(_formatter(config))
        handler.addFilter(RedactingFilter())
        root.addHandler(handler)
    return handlers


_NETWORK_MESSAGES = {
    NetworkErrorType.TIMEOUT: "The node did not answer in time. Try again later.",
    NetworkErrorType.CONNECTION_ERROR: "Unable to connect to the node. Check your connection.",
    NetworkErrorType.HTTP_ERROR: "The node rejected the request. Try again later.",
}


def describe_error(error: BaseException) -> str:
    """Short user-facing text for an error raised by the wallet."""
    if isinstance(error, InsufficientCoinForTransactionFeeError):
        return f"Not enough TON to pay the network fee of {error.amount}."
    if isinstance(error, BigAmountError):
        return f"The amount exceeds the spendable balance of {error.amount}."
    if isinstance(error, SmallAmountError):
        return f"The amount must be at least {error.amount}."
    if isinstance(error, AmountError):
        return "The amount is not valid."
    if isinstance(error, InvalidNetworkAddressError):
        return "The address belongs to a different network."
    if isinstance(error, DestinationEqualsSourceError):
        return "You cannot send funds to your own address."
    if isinstance(error, InvalidAddressError):
        return "The address is not valid."
    if isinstance(error, InvalidMetaError):
        return f"The {error.meta} is not valid."

    network_error = error if isinstance(error, NetworkError) else error.__cause__
    if isinstance(network_error, NetworkError) and network_error.error_type in _NETWORK_MESSAGES:
        return _NETWORK_MESSAGES[network_error.error_type]
    if isinstance(error, (NodeError, NetworkError)):
        return "The node returned an unexpected response. Try again later."
    return "An unexpected error occurred."


__all__ = [
    "LoggingConfig",
    "RedactingFilter",
    "JsonFormatter",
    "ContextAdapter",
    "redact",
    "redact_context",
    "get_logger",
    "setup_logging",
    "describe_error",
]
