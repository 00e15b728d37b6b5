"""
Core module: Configuration, logging, observability hooks and exception handling.
"""

from .config import Config, config
from .exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    DataValidationError,
    DiagnosticOutputError,
    LengthMismatchError,
    ModelNotFittedError,
)
from .observability import EventHook, EventRecorder, PipelineEvent, logging_hook, timed

__all__ = [
    "Config",
    "config",
    "AnomalyDetectionError",
    "LengthMismatchError",
    "ModelNotFittedError",
    "DataValidationError",
    "ConfigurationError",
    "DiagnosticOutputError",
    "EventHook",
    "EventRecorder",
    "PipelineEvent",
    "logging_hook",
    "timed",
]
