"""Error Hierarchy — typed, categorized exceptions for every planning-canvas failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PlanningPokerError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - PartialCompletionError carries the counts achieved so callers can report progress
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    room_id: str | None = None
    user_id: str | None = None
    node_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class PlanningPokerError(Exception):
    """Base exception for all planning-canvas errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "room_id": self.context.room_id,
                    "user_id": self.context.user_id,
                    "node_id": self.context.node_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(PlanningPokerError):
    """Requested room/user/node/vote does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidStateError(PlanningPokerError):
    """Action rejected by the current state (e.g. pausing a stopped timer)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )


class NodeLockedError(PlanningPokerError):
    """Position change blocked by the node's lock flag."""
    def __init__(self, node_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.node_id = node_id
        super().__init__(
            f"Node '{node_id}' is locked",
            "NODE_LOCKED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 423,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreUnavailableError(PlanningPokerError):
    """Entity store operation failed. Callers may retry; the core never does."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class PartialCompletionError(PlanningPokerError):
    """Multi-record cleanup finished with some steps failed.

    `completed` holds the counts that did succeed; a later sweep converges the rest.
    """
    def __init__(
        self,
        operation: str,
        completed: dict[str, int],
        failures: list[str],
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.debug_info = {"completed": completed, "failures": failures}
        super().__init__(
            f"{operation} partially completed ({len(failures)} step(s) failed)",
            "PARTIAL_COMPLETION", ErrorCategory.DATABASE,
            ErrorSeverity.WARNING, ctx, 500,
        )
        self.operation = operation
        self.completed = completed
        self.failures = failures

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["completed"] = self.completed
        response["error"]["failed_steps"] = len(self.failures)
        return response
