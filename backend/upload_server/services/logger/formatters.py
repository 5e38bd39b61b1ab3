"""
Message formatting for the logger service.

Builds the final console/file line from an emoji, a message and an
optional context dictionary.
"""

from typing import Any, Dict, Optional

from ...enums import LogEmoji
from .constants import (
    CONSOLE_CONTEXT_INDENTATION,
    CONSOLE_MAX_CONTEXT_ITEMS,
    CONTEXT_STRING_TRUNCATE_LENGTH,
    CONTEXT_TRUNCATE_SUFFIX,
    MAX_CONTEXT_STRING_LENGTH,
    REDACTED_CONTEXT_KEYS,
    REDACTED_PLACEHOLDER,
)


class LogMessageFormatter:
    """Formats log messages and sanitizes attached context."""

    @staticmethod
    def format_message(message: str, emoji: Optional[LogEmoji] = None) -> str:
        if emoji is None:
            return message
        return f"{emoji.value} {message}"

    @staticmethod
    def sanitize_context(context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Drop secrets and truncate oversized values.

        Args:
            context: Arbitrary context dictionary attached to a log call

        Returns:
            A new dictionary safe to hand to the sinks
        """
        if not context:
            return {}

        sanitized: Dict[str, Any] = {}
        for key, value in context.items():
            if str(key).lower() in REDACTED_CONTEXT_KEYS:
                sanitized[key] = REDACTED_PLACEHOLDER
                continue
            if isinstance(value, dict):
                sanitized[key] = LogMessageFormatter.sanitize_context(value)
                continue
            if isinstance(value, str) and len(value) > MAX_CONTEXT_STRING_LENGTH:
                value = value[:CONTEXT_STRING_TRUNCATE_LENGTH] + CONTEXT_TRUNCATE_SUFFIX
            sanitized[key] = value
        return sanitized

    @staticmethod
    def format_context_preview(context: Dict[str, Any]) -> str:
        """Short single-line preview of the first few context items."""
        if not context:
            return ""
        items = list(context.items())[:CONSOLE_MAX_CONTEXT_ITEMS]
        preview = ", ".join(f"{key}={value}" for key, value in items)
        return f"\n{CONSOLE_CONTEXT_INDENTATION}{preview}"
