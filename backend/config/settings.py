"""
Configuration Management for the deployer
Centralizes all environment-based configuration and settings
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


class HealthCheckFilter(logging.Filter):
    """Filter out health check and status polling requests to reduce log noise"""
    def filter(self, record: logging.LogRecord) -> bool:
        # For uvicorn access logs, the message format is:
        # 'IP:PORT - "METHOD /path HTTP/1.1" STATUS'
        message = record.getMessage()

        if '200 OK' in message or '200' in str(getattr(record, 'args', '')):
            if '/health' in message:
                return False
            # Frontend polls backend status on every page load
            if '/api/status' in message:
                return False
        return True


def setup_logging():
    """Configure application logging with rotation"""
    from .paths import LOG_DIR, ensure_data_dirs

    ensure_data_dirs()

    root_logger = logging.getLogger()

    # Close and clear any existing handlers to prevent file descriptor leaks
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    level = getattr(logging, AppConfig.LOG_LEVEL.upper(), logging.INFO)
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)

    # Max 10MB per file, keep 14 backups
    file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, 'deployer.log'),
        maxBytes=10*1024*1024,
        backupCount=14,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(console_formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.addFilter(HealthCheckFilter())


def get_cors_origins() -> Optional[str]:
    """
    Get CORS origins from environment.

    Returns:
        - Comma-separated string of specific origins if DEPLOYER_CORS_ORIGINS is set
        - None to allow all origins if empty
    """
    custom_origins = os.getenv('DEPLOYER_CORS_ORIGINS')
    if custom_origins:
        return custom_origins

    return None


class AppConfig:
    """Main application configuration"""

    # Server settings
    HOST = os.getenv('DEPLOYER_HOST', '0.0.0.0')
    PORT = int(os.getenv('DEPLOYER_PORT', 8081))

    # Security settings
    CORS_ORIGINS = get_cors_origins()

    # Logging
    LOG_LEVEL = os.getenv('DEPLOYER_LOG_LEVEL', 'INFO')

    # Path validation probe:
    #   create - create the directory to test writability, remove it again if it was new and empty
    #   access - permission check on the nearest existing ancestor, never touches the filesystem
    PATH_PROBE_MODE = os.getenv('DEPLOYER_PATH_PROBE_MODE', 'create').lower()

    VALID_PROBE_MODES = ('create', 'access')

    @classmethod
    def validate(cls):
        """Validate configuration"""
        if cls.PORT < 1 or cls.PORT > 65535:
            raise ValueError(f"Invalid port: {cls.PORT}")

        if cls.PATH_PROBE_MODE not in cls.VALID_PROBE_MODES:
            raise ValueError(
                f"Invalid path probe mode: {cls.PATH_PROBE_MODE} "
                f"(expected one of {', '.join(cls.VALID_PROBE_MODES)})"
            )

        return True
