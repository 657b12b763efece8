"""
Exception hierarchy for CoughScan.

Every error raised on purpose by the screening pipeline derives from
CoughScanError. Each subclass records its context as attributes and in
`details`, which is appended to the message when the error is printed.
"""

from typing import Any, Dict, Optional


class CoughScanError(Exception):
    """Base exception for all CoughScan errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        # Unset context keys stay out of the rendered message
        self.details: Dict[str, Any] = {
            key: value for key, value in context.items() if value is not None
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} (Details: {self.details})"


class InvalidInputError(CoughScanError):
    """A waveform, frame or analysis record is malformed (e.g. empty)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)
        self.field = field


class NotReadyError(CoughScanError):
    """A component was used before it was set up (no rule table installed)."""

    def __init__(self, message: str, component: Optional[str] = None):
        super().__init__(message, component=component)
        self.component = component


class AudioLoadError(CoughScanError):
    """A recording could not be read or decoded."""

    def __init__(self, message: str, file_path: Optional[str] = None, **context: Any):
        super().__init__(message, file_path=file_path, **context)
        self.file_path = file_path


class UnsupportedFormatError(AudioLoadError):
    """The file suffix is not an accepted audio format."""

    def __init__(self, message: str, format: Optional[str] = None):
        super().__init__(message, format=format)
        self.format = format


class FileTooLargeError(AudioLoadError):
    """The file exceeds the size limit, or the recording the duration limit."""

    def __init__(
        self,
        message: str,
        file_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        super().__init__(message, file_size=file_size, max_size=max_size)
        self.file_size = file_size
        self.max_size = max_size


class AnalysisError(CoughScanError):
    """An analyzer failed with an unexpected error."""

    def __init__(
        self,
        message: str,
        analyzer_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
        **context: Any,
    ):
        super().__init__(
            message,
            analyzer_name=analyzer_name,
            original_error=str(original_error) if original_error else None,
            **context,
        )
        self.analyzer_name = analyzer_name
        self.original_error = original_error


class FeatureExtractionError(AnalysisError):
    """The MFCC feature set could not be computed."""

    def __init__(self, message: str, feature_name: Optional[str] = None):
        super().__init__(message, analyzer_name="feature_extractor", feature_name=feature_name)
        self.feature_name = feature_name


class ConfigurationError(CoughScanError):
    """Configuration is missing, unreadable or invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, config_key=config_key)
        self.config_key = config_key
