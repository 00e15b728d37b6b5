"""
Logging configuration for production use.

Provides structured logging with file and console output.
Integrates with config for environment-specific log levels.
"""

import logging
import logging.handlers
from typing import Optional

from .config import Config, config


def setup_logging(
    logger_name: str = "src",
    settings: Optional[Config] = None,
) -> logging.Logger:
    """
    Configure and return a logger instance.
    
    Module loggers are created with ``logging.getLogger(__name__)`` and all
    live under the ``src`` namespace, so configuring the package logger once
    covers the whole pipeline.
    
    Args:
        logger_name: Name of the logger (typically the package name)
        settings: Configuration to read levels and directories from
    
    Returns:
        Configured logger instance
    """
    settings = settings or config
    logger = logging.getLogger(logger_name)
    
    # Don't add handlers if logger already configured
    if logger.handlers:
        return logger
    
    logger.setLevel(settings.log_level)
    settings.logs_dir.mkdir(parents=True, exist_ok=True)
    
    # Formatter for consistent output
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    
    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    
    # File handler (rotated by size)
    log_file = settings.logs_dir / "trace_sentinel.log"
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
    )
    file_handler.setLevel(settings.log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    
    return logger
