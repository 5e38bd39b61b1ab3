"""
Logger Service Constants

Local constants for the logger service to avoid hardcoded values
and provide centralized configuration for logger-specific settings.
"""

# ====================================================================
# CONSOLE SINK CONSTANTS
# ====================================================================

CONSOLE_FORMAT = (
    "<dim>[{time:YYYY-MM-DD HH:mm:ss}]</dim> "
    "<level>{level: ^8}</level> "
    "<cyan>{extra[source]}</cyan>:<cyan>{extra[logger_name]}</cyan> "
    "{message}"
)
CONSOLE_MAX_CONTEXT_ITEMS = 3
CONSOLE_CONTEXT_INDENTATION = "  ↳ "

# ====================================================================
# MESSAGE FORMATTER CONSTANTS
# ====================================================================

MAX_CONTEXT_STRING_LENGTH = 500
CONTEXT_STRING_TRUNCATE_LENGTH = 497
CONTEXT_TRUNCATE_SUFFIX = "..."

# Context keys never written to a sink
REDACTED_CONTEXT_KEYS = {"authorization", "cookie", "token", "jwt_secret"}
REDACTED_PLACEHOLDER = "***"

# ====================================================================
# FILE SINK CONSTANTS
# ====================================================================

LOG_FILE_ROTATION = "10 MB"
LOG_FILE_RETENTION = "7 days"
LOG_FILE_COMPRESSION = "gz"

# ====================================================================
# FALLBACK VALUES
# ====================================================================

FALLBACK_LOG_SOURCE = "system"
FALLBACK_LOGGER_NAME = "unknown"
