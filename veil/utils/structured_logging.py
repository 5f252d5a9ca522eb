"""
Structured JSON logging for production environments.

Enables correlation IDs, structured data, and credential redaction.
"""

import json
import logging
import re
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

# Context-local correlation ID storage
_correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


class CredentialRedactionFilter(logging.Filter):
    """
    Security filter that redacts credentials from log messages.

    Redacts:
    - Ethereum private keys (0x followed by exactly 64 hex chars)
    - Session tokens (JWTs and Authorization: Bearer values)
    - Values of token/secret/mnemonic/password/private_key fields

    Usage:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(CredentialRedactionFilter())
        >>> logger.addHandler(handler)
    """

    PRIVATE_KEY_PATTERN = re.compile(r'0x[0-9a-fA-F]{64}(?![0-9a-fA-F])')
    JWT_PATTERN = re.compile(r'eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*')
    BEARER_PATTERN = re.compile(r'(Bearer\s+)[^\s"\',}]+', re.IGNORECASE)
    MNEMONIC_PATTERN = re.compile(
        r'(mnemonic["\']?\s*[:=]\s*["\']?)[a-z]+(?:\s+[a-z]+){0,23}',
        re.IGNORECASE
    )
    SECRET_FIELD_PATTERN = re.compile(
        r'((?:token|secret|password|private_key|privateKey)["\']?\s*[:=]\s*["\']?)'
        r'[^"\'\s,}]+',
        re.IGNORECASE
    )

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact credentials from log record.

        Returns:
            Always True (record is never filtered out, just sanitized)
        """
        if record.msg:
            record.msg = self._redact_credentials(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact_credentials(str(v))
                    for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._redact_credentials(str(arg))
                    for arg in record.args
                )

        if record.exc_text:
            record.exc_text = self._redact_credentials(record.exc_text)

        return True

    def _redact_credentials(self, text: str) -> str:
        """Redact all credential patterns from text."""
        if not text:
            return text

        text = self.PRIVATE_KEY_PATTERN.sub('0x[REDACTED]', text)
        text = self.JWT_PATTERN.sub('[REDACTED_TOKEN]', text)
        text = self.BEARER_PATTERN.sub(r'\1[REDACTED_TOKEN]', text)
        text = self.MNEMONIC_PATTERN.sub(r'\1[REDACTED]', text)
        text = self.SECRET_FIELD_PATTERN.sub(r'\1[REDACTED]', text)
        return text


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = _correlation_id.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_data, default=str)


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """
    Set correlation ID for current context.

    Args:
        correlation_id: Correlation ID (generates one if None)

    Returns:
        The correlation ID set
    """
    if correlation_id is None:
        correlation_id = f"req_{uuid.uuid4().hex[:12]}"

    _correlation_id.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    """Get current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear correlation ID from current context."""
    _correlation_id.set(None)


def configure_structured_logging(
    level: str = "INFO",
    enable_json: bool = True,
    enable_credential_redaction: bool = True
) -> None:
    """
    Configure structured logging on the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        enable_json: Use JSON formatter (True for production)
        enable_credential_redaction: Add credential redaction filter
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if enable_credential_redaction:
        handler.addFilter(CredentialRedactionFilter())

    if enable_json:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
