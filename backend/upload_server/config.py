# backend/upload_server/config.py
from pathlib import Path
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import LogLevel, UserLevel


class Settings(BaseSettings):
    environment: str = "development"

    # API
    api_host: str = Field(default="0.0.0.0", description="API host to bind to")
    api_port: int = Field(
        default=3003, ge=1, le=65535, description="API port to bind to"
    )
    api_reload: bool = Field(
        default=False, description="Enable auto-reload for development"
    )
    api_prefix: str = Field(default="/api/v1", description="Prefix for API routes")

    # CORS - use Union to handle both string and list inputs
    # Can be set via CORS_ORIGINS env var as comma-separated string
    cors_origins: Union[str, List[str]] = Field(
        default=["*"],
        description="Allowed CORS origins. Can be comma-separated string.",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert cors_origins to a list of strings"""
        if isinstance(self.cors_origins, str):
            return [origin.strip() for origin in self.cors_origins.split(",")]
        return self.cors_origins

    # ============= AUTH =============
    # Tokens are signed by the auth service with the same secret
    jwt_secret: str = Field(
        default="dev-secret-change-me", description="Shared JWT signing secret"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    admin_level_name: str = Field(
        default=UserLevel.ADMIN.value,
        description="Token level_name that may delete any user's files",
    )

    # ============= STORAGE =============
    upload_directory: str = Field(
        default="./uploads", description="Root for general uploads and derivatives"
    )
    profile_directory: str = Field(
        default="./uploads/profile", description="Root for profile pictures"
    )
    max_upload_size_mb: int = Field(
        default=100, ge=1, le=2048, description="Maximum accepted upload size in MB"
    )

    @property
    def upload_path(self) -> Path:
        """Get general upload directory as Path object"""
        return Path(self.upload_directory)

    @property
    def profile_path(self) -> Path:
        """Get profile picture directory as Path object"""
        return Path(self.profile_directory)

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def ensure_directories(self):
        """Create all required directories if they don't exist"""
        for directory in (self.upload_path, self.profile_path):
            directory.mkdir(parents=True, exist_ok=True)

    # ============= MEDIA PIPELINE =============
    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg executable")
    ffprobe_path: str = Field(default="ffprobe", description="ffprobe executable")
    ffmpeg_command_timeout_seconds: int = Field(
        default=120,
        ge=5,
        le=3600,
        description="Timeout for a single ffmpeg/ffprobe invocation",
    )
    pipeline_timeout_seconds: int = Field(
        default=300,
        ge=10,
        le=7200,
        description="Upper bound for a whole derivative pipeline run",
    )
    parallel_derivatives: bool = Field(
        default=False,
        description="Run screenshot extraction concurrently with palette/GIF generation",
    )

    # ============= RATE LIMITING =============
    upload_rate_limit_requests: int = Field(
        default=10, ge=1, le=1000, description="Uploads allowed per identity per window"
    )
    upload_rate_limit_window_seconds: int = Field(
        default=60, ge=1, le=86400, description="Upload rate limit window"
    )
    api_rate_limit_requests: int = Field(
        default=60, ge=1, le=10000, description="API requests allowed per identity per window"
    )
    api_rate_limit_window_seconds: int = Field(
        default=60, ge=1, le=86400, description="General API rate limit window"
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (optional)"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v) -> LogLevel:
        """Validate log level is one of the allowed values"""
        if isinstance(v, LogLevel):
            return v
        allowed_levels = LogLevel.__members__.keys()
        v_upper = str(v).upper()
        if v_upper not in allowed_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(allowed_levels)}"
            )
        return LogLevel[v_upper]

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values"""
        allowed_envs = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {', '.join(allowed_envs)}"
            )
        return v_lower

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Global settings instance
settings = Settings()
