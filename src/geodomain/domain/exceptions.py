"""Domain exceptions for the GeoDomain marketplace.

These exceptions are framework-agnostic and represent business rule violations.
They are caught and translated to HTTP responses by the API layer's middleware.
"""


class GeoDomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "GEODOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Lookup / Access Errors ---


class NotFoundError(GeoDomainError):
    """Raised when an entity is missing or the caller does not own it."""

    def __init__(self, entity: str, entity_id: str, message: str | None = None) -> None:
        super().__init__(
            message=message or f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
        )
        self.entity = entity
        self.entity_id = entity_id


class UnauthorizedError(GeoDomainError):
    """Raised when no authenticated user is attached to the request."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message=message, code="UNAUTHORIZED")


class ForbiddenError(GeoDomainError):
    """Raised when the caller's role does not allow the operation.

    Example: a seller trying to buy their own wholesale domain.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="FORBIDDEN")


# --- Conflict / State Errors ---


class ConflictError(GeoDomainError):
    """Raised on duplicate submissions, e.g. a second pending verification attempt."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="CONFLICT")


class InvalidStateError(GeoDomainError):
    """Raised when an operation's precondition on the current status fails.

    Example: submitting a PUBLISHED domain for verification.
    """

    def __init__(self, entity: str, current_state: str, message: str | None = None) -> None:
        super().__init__(
            message=message or f"{entity} is in invalid state for this operation: {current_state}",
            code="INVALID_STATE",
        )
        self.entity = entity
        self.current_state = current_state


class InvalidTransitionError(GeoDomainError):
    """Raised when an attempted status transition is not in the transition table.

    Example: AGREED -> TRANSFER_INITIATED (must go through payment first).
    """

    def __init__(self, current_state: str, attempted: str) -> None:
        super().__init__(
            message=f"Invalid state transition: {current_state} -> {attempted}",
            code="INVALID_TRANSITION",
        )
        self.current_state = current_state
        self.attempted = attempted


# --- Input / Availability Errors ---


class ValidationError(GeoDomainError):
    """Raised when a request is well-formed but violates a business rule."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="BAD_REQUEST")


class ServiceUnavailableError(GeoDomainError):
    """Raised when a feature is switched off, e.g. the wholesale marketplace."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="SERVICE_UNAVAILABLE")


# --- Idempotency Errors ---


class DuplicateOperationError(GeoDomainError):
    """Raised when a duplicate idempotency key is detected."""

    def __init__(self, idempotency_key: str) -> None:
        super().__init__(
            message=f"Duplicate operation detected for key: {idempotency_key}",
            code="DUPLICATE_OPERATION",
        )
