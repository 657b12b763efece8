"""
Utility modules for configuration, logging, and error handling.
"""

from coughscan.utils.errors import (
    CoughScanError,
    InvalidInputError,
    NotReadyError,
    AudioLoadError,
    UnsupportedFormatError,
    FileTooLargeError,
    AnalysisError,
    FeatureExtractionError,
    ConfigurationError,
)
from coughscan.utils.logging import get_logger, setup_logging, JSONFormatter
from coughscan.utils.config import ConfigManager, load_config, get_default_config

__all__ = [
    "CoughScanError",
    "InvalidInputError",
    "NotReadyError",
    "AudioLoadError",
    "UnsupportedFormatError",
    "FileTooLargeError",
    "AnalysisError",
    "FeatureExtractionError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
    "get_default_config",
]
