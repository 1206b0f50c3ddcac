"""Configuration module for RemindMe Service.

This module provides configuration settings using Pydantic Settings.
Environment variables can be used to override default values.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings for RemindMe Service.

    All settings can be overridden via environment variables.
    Example: export REDIS_URL="redis://cache:6379/0"
    """

    APP_NAME: str = "RemindMe"
    """Name shown in reminder message subjects"""

    # Database Configuration (scheduled jobs)
    DATABASE_URL: str = "sqlite:///./remindme_jobs.db"
    """Database connection URL for the durable job table"""

    # Redis Configuration (form handoff)
    REDIS_URL: str = "redis://127.0.0.1:6379/0"
    """Redis connection URL for the stage 1 -> stage 2 handoff"""

    HANDOFF_TTL_SECONDS: int = 60 * 60
    """Expiry for unconsumed handoff records (default: one hour)"""

    # API Server Configuration
    API_HOST: str = "0.0.0.0"
    """API server host address"""

    API_PORT: int = 8005
    """API server port"""

    # MCP Server Configuration
    MCP_HOST: str = "127.0.0.1"
    """MCP server host address"""

    MCP_PORT: int = 8006
    """MCP server port for SSE transport (separate from REST API)"""

    MCP_TRANSPORT: str = "sse"
    """MCP transport type: 'stdio' for local, 'sse' for network access"""

    # Background Worker Configuration
    WORKER_ENABLED: bool = True
    """Enable/disable the background worker that fires due jobs"""

    WORKER_CHECK_INTERVAL: int = 15
    """Interval in seconds for checking due jobs"""

    WORKER_BATCH_SIZE: int = 100
    """Maximum number of due jobs fired per iteration"""

    # Platform (user/post lookup + private messages)
    PLATFORM_API_URL: str = "http://127.0.0.1:1801"
    """Base URL of the platform API"""

    PLATFORM_API_TOKEN: Optional[str] = None
    """Bearer token for the platform API"""

    PLATFORM_TIMEOUT_SECONDS: float = 30.0
    """Timeout for platform API calls"""

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    """Level for the service loggers (DEBUG shows every worker iteration)"""

    LOG_DIR: Optional[str] = None
    """Directory for the rotating log files (default: logs/ next to the code)"""

    class Config:
        """Pydantic config"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
