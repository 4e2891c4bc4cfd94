"""Core module - Configuration, Constants, and Exceptions"""

from .config import Config, ConfigLoader, AnalysisConfig, ExecutionConfig, validate_parameters
from .constants import *
from .exceptions import (
    ConnectednessError,
    ConfigError,
    ConfigValidationError,
    DataLoadError,
    AnalysisError,
    InsufficientDataError,
    InvalidWindowError,
    DegenerateInputError,
    TaskFailureError,
    IncompleteResultsError,
)

__all__ = [
    "Config",
    "ConfigLoader",
    "AnalysisConfig",
    "ExecutionConfig",
    "validate_parameters",
    "ConnectednessError",
    "ConfigError",
    "ConfigValidationError",
    "DataLoadError",
    "AnalysisError",
    "InsufficientDataError",
    "InvalidWindowError",
    "DegenerateInputError",
    "TaskFailureError",
    "IncompleteResultsError",
]
