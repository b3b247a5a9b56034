"""testplane error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Discovery
- 4xxx: Planning
- 5xxx: Spawn
- 6xxx: Ownership
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Discovery (3xxx)
    DISCOVERY_LIST_FAILED = 3001
    DISCOVERY_UNPARSABLE_OUTPUT = 3002
    DISCOVERY_CONFIG_ERROR = 3003

    # Planning (4xxx)
    PLANNING_NO_OWNER = 4001
    PLANNING_DETACHED_NODE = 4002

    # Spawn (5xxx)
    SPAWN_BINARY_MISSING = 5001
    SPAWN_OS_ERROR = 5002
    SPAWN_EARLY_EXIT = 5003

    # Ownership (6xxx)
    OWNERSHIP_OUTSIDE_PROFILE = 6001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class TestPlaneError(Exception):
    """Base error with structured context."""

    __test__ = False

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SPAWN_BINARY_MISSING')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(TestPlaneError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class DiscoveryError(TestPlaneError):
    """A config could not be listed. Scoped to that config's subtree."""

    @classmethod
    def list_failed(cls, config: str, exit_code: int | None, stderr: str) -> "DiscoveryError":
        return cls(
            code=ErrorCode.DISCOVERY_LIST_FAILED,
            message=f"Listing {config} failed with exit code {exit_code}",
            retryable=True,
            details={"config": config, "exit_code": exit_code, "stderr": stderr},
        )

    @classmethod
    def unparsable_output(cls, config: str, reason: str) -> "DiscoveryError":
        return cls(
            code=ErrorCode.DISCOVERY_UNPARSABLE_OUTPUT,
            message=f"Could not parse listing output for {config}: {reason}",
            details={"config": config, "reason": reason},
        )

    @classmethod
    def config_error(
        cls, config: str, message: str, location: dict[str, Any] | None = None
    ) -> "DiscoveryError":
        return cls(
            code=ErrorCode.DISCOVERY_CONFIG_ERROR,
            message=message,
            details={"config": config, "location": location},
        )


class PlanningError(TestPlaneError):
    """A selection cannot be turned into invocations."""

    @classmethod
    def no_owner(cls, path: str) -> "PlanningError":
        return cls(
            code=ErrorCode.PLANNING_NO_OWNER,
            message=f"No config owns {path}",
            details={"path": path},
        )

    @classmethod
    def detached_node(cls, key: str) -> "PlanningError":
        return cls(
            code=ErrorCode.PLANNING_DETACHED_NODE,
            message=f"Node {key} is no longer part of the test tree",
            details={"key": key},
        )


class SpawnError(TestPlaneError):
    """The CLI process could not be started or died before reporting."""

    @classmethod
    def binary_missing(cls, executable: str) -> "SpawnError":
        return cls(
            code=ErrorCode.SPAWN_BINARY_MISSING,
            message=f"Executable not found: {executable}",
            details={"executable": executable},
        )

    @classmethod
    def os_error(cls, args: list[str], reason: str) -> "SpawnError":
        return cls(
            code=ErrorCode.SPAWN_OS_ERROR,
            message=f"OS error executing command: {reason}",
            details={"args": args, "reason": reason},
        )

    @classmethod
    def early_exit(cls, config: str, exit_code: int, stderr: str) -> "SpawnError":
        return cls(
            code=ErrorCode.SPAWN_EARLY_EXIT,
            message=f"Test process for {config} exited with code {exit_code} before reporting",
            details={"config": config, "exit_code": exit_code, "stderr": stderr},
        )


class OwnershipWarning(TestPlaneError):
    """A selected node does not belong to the profile that was run."""

    @classmethod
    def outside_profile(cls, profile: str, keys: list[str]) -> "OwnershipWarning":
        return cls(
            code=ErrorCode.OWNERSHIP_OUTSIDE_PROFILE,
            message=f"Selected test is outside of the {profile}",
            details={"profile": profile, "keys": keys},
        )


class InternalError(TestPlaneError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
