# backend/upload_server/enums.py
"""
Centralized enums for the upload server.

Type-safe constants for media categories, pipeline stages and the
logging system.
"""

from enum import Enum


# =============================================================================
# MEDIA SYSTEMS
# =============================================================================


class MediaCategory(str, Enum):
    """Top-level MIME category that decides which derivative generator runs."""

    IMAGE = "image"
    VIDEO = "video"


class UploadCategory(str, Enum):
    """Storage root an upload is written to. The two roots never cross over."""

    GENERAL = "general"
    PROFILE = "profile"


class PipelineStage(str, Enum):
    """Stages of the video derivative pipeline, in execution order."""

    PROBE = "probe"
    SCREENSHOTS = "screenshots"
    PALETTE = "palette"
    GIF = "gif"


class UserLevel(str, Enum):
    """User levels issued by the auth service inside the token."""

    ADMIN = "Admin"
    USER = "User"
    GUEST = "Guest"


# =============================================================================
# LOGGING SYSTEM
# =============================================================================


class LogLevel(str, Enum):
    """Log level constants for centralized logging system."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogSource(str, Enum):
    """Log source constants for identifying log origins."""

    API = "api"
    SYSTEM = "system"
    PIPELINE = "pipeline"
    MIDDLEWARE = "middleware"
    STORAGE = "storage"
    HEALTH = "health"


class LogEmoji(str, Enum):
    """Type-safe emoji constants for log messages."""

    # Request/Response emojis
    REQUEST = "📥"
    RESPONSE = "📤"

    # Status emojis
    SUCCESS = "✅"
    FAILED = "❌"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    DEBUG = "🐞"
    CANCELED = "🚫"
    TIMEOUT = "⏱️"

    # Work emojis
    PROCESSING = "🔄"

    # Media emojis
    VIDEO = "🎥"
    IMAGE = "🖼️"
    THUMBNAIL = "🖼️"
    UPLOAD = "📦"

    # System emojis
    STARTUP = "🚀"
    SHUTDOWN = "🛑"
    HEALTH = "💓"
    CLEANUP = "🧹"
    SECURITY = "🔒"
    STORAGE = "💾"

    # Action emojis
    DELETE = "🗑️"

    # Other emojis
    FIRE = "🔥"


class LoggerName(str, Enum):
    """Logger name constants for categorizing log entries."""

    # API/Request loggers
    REQUEST_LOGGER = "request_logger"
    ERROR_HANDLER = "error_handler"
    MIDDLEWARE = "middleware"

    # Pipeline loggers
    MEDIA_PIPELINE = "media_pipeline"
    IMAGE_PIPELINE = "image_pipeline"
    VIDEO_PIPELINE = "video_pipeline"

    # Service loggers
    STORAGE_SERVICE = "storage_service"
    AUTH = "auth"

    # System loggers
    SYSTEM = "system"
    FFMPEG = "ffmpeg"
    API = "api"
    UTILITY = "utility"

    # Generic
    UNKNOWN = "unknown"
