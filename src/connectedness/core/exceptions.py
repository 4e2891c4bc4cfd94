"""
Custom exceptions for the connectedness engine.

Exception Hierarchy:
    ConnectednessError (Base)
    ├── ConfigError
    │   ├── ConfigNotFoundError
    │   └── ConfigValidationError
    ├── DataLoadError
    │   ├── InvalidFormatError
    │   └── MissingColumnError
    └── AnalysisError
        ├── InsufficientDataError
        │   └── InvalidWindowError
        ├── DegenerateInputError
        ├── TaskFailureError
        └── IncompleteResultsError
"""

from typing import Optional, List


class ConnectednessError(Exception):
    """Base exception for all connectedness errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


# =============================================================================
# Config Errors
# =============================================================================

class ConfigError(ConnectednessError):
    """Configuration related errors."""
    pass


class ConfigNotFoundError(ConfigError):
    """Config file not found."""

    def __init__(self, path: str):
        super().__init__(
            f"Configuration file not found: {path}",
            "Please provide a valid config file path or use default configuration."
        )
        self.path = path


class ConfigValidationError(ConfigError):
    """Config validation failed."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        error_list = "\n  - ".join(errors)
        super().__init__(
            f"Configuration validation failed with {len(errors)} error(s)",
            f"Errors:\n  - {error_list}"
        )


# =============================================================================
# Data Load Errors
# =============================================================================

class DataLoadError(ConnectednessError):
    """Data loading related errors."""
    pass


class InvalidFormatError(DataLoadError):
    """Data file has invalid format."""

    def __init__(self, filepath: str, expected_format: str, actual_issue: str):
        self.filepath = filepath
        self.expected_format = expected_format
        self.actual_issue = actual_issue
        super().__init__(
            f"Invalid data format in {filepath}",
            f"Expected: {expected_format}\nIssue: {actual_issue}"
        )


class MissingColumnError(DataLoadError):
    """Required column is missing from data."""

    def __init__(self, column: str, available_columns: Optional[List[str]] = None):
        self.column = column
        self.available_columns = available_columns
        details = None
        if available_columns:
            available = ", ".join(str(c) for c in available_columns[:10])
            if len(available_columns) > 10:
                available += f"... ({len(available_columns)} total)"
            details = f"Available columns: {available}"
        super().__init__(
            f"Required column '{column}' not found in data",
            details
        )


# =============================================================================
# Analysis Errors
# =============================================================================

class AnalysisError(ConnectednessError):
    """Analysis related errors."""
    pass


class InsufficientDataError(AnalysisError):
    """Not enough data for analysis."""

    def __init__(self, required: int, actual: int, analysis_type: str = "analysis"):
        self.required = required
        self.actual = actual
        self.analysis_type = analysis_type
        super().__init__(
            f"Insufficient data for {analysis_type}",
            f"Required: {required}, Actual: {actual}"
        )


class InvalidWindowError(InsufficientDataError):
    """Rolling window is longer than the available observations."""

    def __init__(self, bw: int, observations: int):
        self.bw = bw
        self.observations = observations
        super().__init__(bw, observations, f"rolling windows of length {bw}")


class DegenerateInputError(AnalysisError):
    """Regression input is constant, singular or non-finite."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Degenerate regression input: {reason}")


class TaskFailureError(AnalysisError):
    """A window task raised an unexpected error."""

    def __init__(self, window_index: int, reason: str):
        self.window_index = window_index
        self.reason = reason
        super().__init__(
            f"Window task {window_index} failed",
            reason
        )


class IncompleteResultsError(AnalysisError):
    """Finalization was attempted with missing window results."""

    def __init__(self, expected: int, missing: List[int]):
        self.expected = expected
        self.missing = missing
        shown = ", ".join(str(i) for i in missing[:10])
        if len(missing) > 10:
            shown += f"... ({len(missing)} total)"
        super().__init__(
            f"Missing {len(missing)} of {expected} window results",
            f"Missing windows: {shown}"
        )


# =============================================================================
# Utility Functions
# =============================================================================

def format_exception_chain(exc: Exception) -> str:
    """Format exception with cause chain for logging."""
    messages = [str(exc)]
    current = exc.__cause__
    while current:
        messages.append(f"  Caused by: {current}")
        current = current.__cause__
    return "\n".join(messages)
