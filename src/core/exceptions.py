"""
Custom exceptions for Trace Sentinel.

These exceptions provide clear error semantics across the pipeline.
Use them to distinguish between data issues, lifecycle misuse, and
configuration or output errors.
"""


class AnomalyDetectionError(Exception):
    """Base exception for anomaly detection failures."""
    pass


class LengthMismatchError(AnomalyDetectionError, ValueError):
    """Raised when a reconstruction does not line up with the scored data."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Reconstructed signal has {actual} samples, data has {expected}"
        )


class ModelNotFittedError(AnomalyDetectionError, RuntimeError):
    """Raised when a signal model is used before build_model()."""
    pass


class DataValidationError(Exception):
    """Raised when input data fails validation or ingestion."""
    pass


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


class DiagnosticOutputError(Exception):
    """Raised when a diagnostic artefact (TSV dump) cannot be written."""
    pass
