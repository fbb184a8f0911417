"""Domain exception hierarchy for type-safe error handling.

This module provides the base exception hierarchy for all domain errors.
Exceptions include structured error codes and context for consistent
error mapping at the application boundary.

Error kinds:
    - Validation (``ValidationError`` and subclasses): malformed input,
      never retried automatically.
    - State (``InvalidStateTransitionError``): transition rejected by a
      state machine.
    - Conflict (``ConflictError``, ``ConcurrencyConflictError``): the request
      collides with current state; concurrency conflicts are resolved by
      re-reading and retrying the whole operation.
    - Infrastructure (``InfrastructureRequiredError``): a required port was
      not wired; fatal to the operation.

Example:
    >>> from strata.foundation.domain.exceptions import NotFoundError
    >>> from uuid import UUID
    >>> raise NotFoundError("User", UUID("550e8400-e29b-41d4-a716-446655440000"))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID

__all__ = [
    "ConcurrencyConflictError",
    "ConflictError",
    "DomainError",
    "FormatError",
    "HierarchyError",
    "InfrastructureRequiredError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "ValidationError",
]


class DomainError(Exception):
    """Base class for all domain errors.

    Provides error code and structured context for debugging. All domain
    exceptions inherit from this class to enable consistent error mapping
    at the application boundary.

    Attributes:
        error_code: Machine-readable error code for client handling.
        message: Human-readable error description.
        context: Structured debugging information (aggregate IDs, field names).

    Example:
        >>> raise DomainError("Operation failed", context={"aggregate_id": "123"})
        DomainError: Operation failed (aggregate_id=123)
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize domain error with message and optional context.

        Args:
            message: Human-readable error description.
            context: Structured debugging information. Keys should be snake_case.
                     Values are typically strings, UUIDs, or primitive types.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation including context for logging."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist.

    Use when aggregate lookup fails or entity cannot be found by identifier.

    Attributes:
        error_code: "RESOURCE_NOT_FOUND" (class constant).
        resource_type: Type of missing resource.
        resource_id: Identifier of missing resource.

    Example:
        >>> from uuid import UUID
        >>> raise NotFoundError("User", UUID("550e8400-e29b-41d4-a716-446655440000"))
        NotFoundError: User not found: 550e8400-e29b-41d4-a716-446655440000
    """

    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        resource_type: str,
        resource_id: UUID | str,
        **extra_context: Any,
    ) -> None:
        """Initialize not found error.

        Args:
            resource_type: Type of resource (e.g., "User", "UserTenantAssignment").
            resource_id: Identifier of missing resource. UUID is converted to string.
            **extra_context: Additional debugging context (e.g., tenant_id).
        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} not found: {resource_id}"
        context = {
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            **extra_context,
        }
        super().__init__(message, context)


class ValidationError(DomainError):
    """Raised when input fails domain validation rules.

    Validation errors are raised synchronously at construction or mutation
    time and are always recoverable by correcting the input.

    Attributes:
        error_code: "VALIDATION_ERROR" (class constant).
        field: Field path that failed validation.
        reason: Human-readable validation failure reason.

    Example:
        >>> raise ValidationError("nickname", "Nickname must be 1-50 characters")
        ValidationError: Validation failed for 'nickname': Nickname must be 1-50 characters
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        field: str,
        reason: str,
        **extra_context: Any,
    ) -> None:
        """Initialize validation error.

        Args:
            field: Field path that failed validation. Supports dot notation
                   for nested fields (e.g., "organization_id.parent").
            reason: Human-readable validation failure reason.
            **extra_context: Additional debugging context.
        """
        self.field = field
        self.reason = reason
        message = f"Validation failed for '{field}': {reason}"
        context = {
            "field": field,
            "reason": reason,
            **extra_context,
        }
        super().__init__(message, context)


class FormatError(ValidationError):
    """Raised when a raw identifier value does not match the expected shape.

    Attributes:
        error_code: "INVALID_IDENTIFIER_FORMAT" (class constant).
        identifier_type: Name of the identifier type being parsed.
        raw: The rejected raw value.

    Example:
        >>> raise FormatError("TenantId", "not-a-uuid")
        FormatError: Validation failed for 'TenantId': Invalid identifier format: 'not-a-uuid'
    """

    error_code: str = "INVALID_IDENTIFIER_FORMAT"

    def __init__(self, identifier_type: str, raw: object) -> None:
        self.identifier_type = identifier_type
        self.raw = raw
        super().__init__(identifier_type, f"Invalid identifier format: {raw!r}")


class HierarchyError(ValidationError):
    """Raised when an identifier violates the tenant/organization hierarchy.

    Examples are a parent organization owned by a different tenant, or a
    department identifier without an owning organization.

    Attributes:
        error_code: "INVALID_HIERARCHY" (class constant).
    """

    error_code: str = "INVALID_HIERARCHY"


class ConflictError(DomainError):
    """Raised when operation conflicts with current system state.

    Use for duplicate resource creation, missing prerequisites, or state
    transition conflicts.

    Attributes:
        error_code: "CONFLICT" (class constant).
        reason: Description of the conflict.

    Example:
        >>> raise ConflictError(
        ...     "User already assigned to organization",
        ...     user_id="550e8400-e29b-41d4-a716-446655440000",
        ... )
    """

    error_code: str = "CONFLICT"

    def __init__(
        self,
        reason: str,
        **context: Any,
    ) -> None:
        """Initialize conflict error.

        Args:
            reason: Description of conflict (e.g., "Resource already exists",
                    "Invalid state transition").
            **context: Additional debugging context.
        """
        self.reason = reason
        message = f"Conflict: {reason}"
        super().__init__(message, context)


class InvalidStateTransitionError(ConflictError):
    """Raised when a state machine transition is not allowed.

    Not retryable without changing the request.

    Attributes:
        error_code: "INVALID_STATE_TRANSITION" (class constant).

    Example:
        >>> raise InvalidStateTransitionError(
        ...     "Cannot activate user: current state is DISABLED"
        ... )
    """

    error_code: str = "INVALID_STATE_TRANSITION"

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize invalid state transition error.

        Args:
            message: Description of the invalid transition attempt.
            **context: Additional debugging context (e.g., current_state, target_state).
        """
        super().__init__(message, **context)


class ConcurrencyConflictError(ConflictError):
    """Raised by the persistence boundary when a version compare-and-swap fails.

    The stored aggregate has advanced past the version the caller read.
    Callers should re-read the aggregate and retry the whole operation
    rather than resubmitting the stale instance.

    Attributes:
        error_code: "CONCURRENCY_CONFLICT" (class constant).
        aggregate_id: Identifier of the conflicting aggregate.
        expected_version: Version the caller based its change on.
    """

    error_code: str = "CONCURRENCY_CONFLICT"

    def __init__(
        self,
        aggregate_type: str,
        aggregate_id: UUID | str,
        expected_version: int,
        **extra_context: Any,
    ) -> None:
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version
        super().__init__(
            f"Optimistic lock failure on {aggregate_type} {aggregate_id}",
            aggregate_type=aggregate_type,
            aggregate_id=str(aggregate_id),
            expected_version=expected_version,
            **extra_context,
        )


class InfrastructureRequiredError(DomainError):
    """Raised when a domain operation needs a port that was not wired.

    Always fatal to the operation; never retried.

    Attributes:
        error_code: "INFRASTRUCTURE_REQUIRED" (class constant).
        capability: Name of the missing capability (e.g., "password_hasher").

    Example:
        >>> raise InfrastructureRequiredError("password_hasher", operation="change_password")
    """

    error_code: str = "INFRASTRUCTURE_REQUIRED"

    def __init__(self, capability: str, **extra_context: Any) -> None:
        self.capability = capability
        message = f"Operation requires a '{capability}' implementation"
        super().__init__(message, {"capability": capability, **extra_context})
