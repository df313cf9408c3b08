"""
Exception hierarchy for Rehearse.

All Rehearse exceptions inherit from RehearseError, allowing callers to catch
all harness-specific exceptions with a single except clause.

Exception Categories:
    - PathError: A property path could not be resolved against live state
    - CaptureError: A property could not be captured while recording
    - ComparisonError: Two values could not be normalized or compared
    - LoadError: A scenario could not be read from storage
    - RunInProgressError: A run was requested while another is in flight
    - ConfigError: Harness configuration is invalid

Errors local to one property, one assertion or one scenario file are
reported through outcomes and logs; they never abort a whole run.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Path errors: 1xxx
ERROR_PATH_SYNTAX = 1001
ERROR_PATH_ROOT_NOT_FOUND = 1002
ERROR_PATH_ENTITY_NOT_FOUND = 1003
ERROR_PATH_SEGMENT_NOT_FOUND = 1004

# Capture and input errors: 2xxx
ERROR_CAPTURE_FAILED = 2001
ERROR_RECORDER_STATE = 2002
ERROR_UNKNOWN_CONTROL = 2003

# Comparison errors: 3xxx
ERROR_COMPARISON_FAILED = 3001

# Load/storage errors: 4xxx
ERROR_SCENARIO_NOT_FOUND = 4001
ERROR_SCENARIO_CORRUPT = 4002
ERROR_SCENARIO_DIR_MISSING = 4003
ERROR_STORAGE_WRITE = 4004

# Run errors: 5xxx
ERROR_RUN_IN_PROGRESS = 5001

# Config errors: 6xxx
ERROR_CONFIG_INVALID = 6001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class RehearseError(Exception):
    """
    Base exception for all Rehearse errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Path Errors
# =============================================================================


@dataclass
class PathError(RehearseError):
    """
    Base class for property path resolution failures.

    Attributes:
        path: The full dotted path being resolved
        segment: The segment that could not be resolved
    """

    path: str = ""
    segment: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "path": self.path,
            "segment": self.segment,
        })


@dataclass
class PathSyntaxError(PathError):
    """Raised when a property path cannot be parsed."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Malformed property path: {self.path!r}"
        if self.code == 0:
            self.code = ERROR_PATH_SYNTAX
        if not self.suggestion:
            self.suggestion = "Paths look like 'Scene.EntityCount' or 'Entity[Player].Position.X'"
        super().__post_init__()


@dataclass
class RootNotFoundError(PathError):
    """Raised when the root selector is unknown or an intermediate value is absent."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Root not found for segment '{self.segment}' in {self.path}"
        if self.code == 0:
            self.code = ERROR_PATH_ROOT_NOT_FOUND
        super().__post_init__()


@dataclass
class EntityNotFoundError(PathError):
    """Raised when an Entity[<name>] selector names no live entity."""

    entity_name: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Entity '{self.entity_name}' not found in scene"
        if self.code == 0:
            self.code = ERROR_PATH_ENTITY_NOT_FOUND
        super().__post_init__()
        self.context["entity_name"] = self.entity_name


@dataclass
class SegmentNotFoundError(PathError):
    """Raised when a member segment does not exist on the current object."""

    type_name: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Property or field '{self.segment}' not found on type '{self.type_name}'"
            )
        if self.code == 0:
            self.code = ERROR_PATH_SEGMENT_NOT_FOUND
        super().__post_init__()
        self.context["type_name"] = self.type_name


# =============================================================================
# Capture and Input Errors
# =============================================================================


@dataclass
class CaptureError(RehearseError):
    """
    Raised when a single property fails to capture during recording.

    The recorder logs it and skips the property; the capture continues.
    """

    path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to capture property {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CAPTURE_FAILED
        self.context.update({
            "path": self.path,
            "underlying_error": self.underlying_error,
        })


@dataclass
class RecorderStateError(RehearseError):
    """Raised when a recorder operation is invalid in the current state."""

    state: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Recorder operation not allowed while {self.state}"
        if self.code == 0:
            self.code = ERROR_RECORDER_STATE
        if not self.suggestion:
            self.suggestion = "Call begin_session() before ending a session"
        self.context["state"] = self.state


@dataclass
class UnknownControlError(RehearseError):
    """Raised when an input source is queried for a control it does not track."""

    control: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Control not found: {self.control}"
        if self.code == 0:
            self.code = ERROR_UNKNOWN_CONTROL
        self.context["control"] = self.control


# =============================================================================
# Comparison Errors
# =============================================================================


@dataclass
class ComparisonError(RehearseError):
    """Raised when expected and actual values cannot be normalized or compared."""

    expected: str = ""
    actual: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Cannot compare {self.expected} with {self.actual}: {self.underlying_error}"
            )
        if self.code == 0:
            self.code = ERROR_COMPARISON_FAILED
        self.context.update({
            "expected": self.expected,
            "actual": self.actual,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Load/Storage Errors
# =============================================================================


@dataclass
class LoadError(RehearseError):
    """
    Base class for scenario loading errors.

    Attributes:
        file_path: The scenario file or directory involved
    """

    file_path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["file_path"] = self.file_path


@dataclass
class ScenarioNotFoundError(LoadError):
    """Raised when a named scenario has no file in storage."""

    scenario_name: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Scenario not found: {self.scenario_name}"
        if self.code == 0:
            self.code = ERROR_SCENARIO_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Run 'rehearse list' to see recorded scenarios"
        super().__post_init__()
        self.context["scenario_name"] = self.scenario_name


@dataclass
class ScenarioCorruptError(LoadError):
    """Raised when a scenario file cannot be read or decoded."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unreadable scenario file {self.file_path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_SCENARIO_CORRUPT
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class ScenarioDirectoryMissingError(LoadError):
    """Raised when the scenario directory does not exist."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Scenario directory does not exist: {self.file_path}"
        if self.code == 0:
            self.code = ERROR_SCENARIO_DIR_MISSING
        if not self.suggestion:
            self.suggestion = "Record a scenario first or pass --dir"
        super().__post_init__()


@dataclass
class StorageWriteError(LoadError):
    """Raised when a scenario cannot be written to storage."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to write scenario {self.file_path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_WRITE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


# =============================================================================
# Run Errors
# =============================================================================


@dataclass
class RunInProgressError(RehearseError):
    """Raised when a new run is requested while scenarios are still queued."""

    current_scenario: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"A run is already in progress ({self.current_scenario})"
        if self.code == 0:
            self.code = ERROR_RUN_IN_PROGRESS
        if not self.suggestion:
            self.suggestion = "Wait for the queue to drain or cancel the current run"
        self.context["current_scenario"] = self.current_scenario


# =============================================================================
# Config Errors
# =============================================================================


@dataclass
class ConfigError(RehearseError):
    """Raised when the harness configuration cannot be loaded."""

    config_path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration {self.config_path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context.update({
            "config_path": self.config_path,
            "underlying_error": self.underlying_error,
        })
