"""
Domain error taxonomy

Services raise these; the API layer maps them to HTTP status codes
(see ``shared.infrastructure.exception_handler``). Nothing here knows
about HTTP.
"""


class DomainError(Exception):
    """Base class for all expected business-rule failures."""

    code = "domain_error"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or (self.__class__.__doc__ or "").strip()
        self.context = context

    def __str__(self) -> str:
        return self.message


class NotFound(DomainError):
    """Requested object does not exist."""

    code = "not_found"

    def __init__(self, entity: str, identifier=None):
        message = f"{entity} not found" if identifier is None else f"{entity} {identifier} not found"
        super().__init__(message, entity=entity, identifier=identifier)


class InvalidRequest(DomainError):
    """Request violates a business rule (capacity, stay length, dates)."""

    code = "invalid_request"


class Conflict(DomainError):
    """Request collides with existing state (overlapping dates, duplicates)."""

    code = "conflict"


class IllegalStateTransition(DomainError):
    """Status change is not allowed from the current state."""

    code = "illegal_state_transition"

    def __init__(self, current: str, target: str, message: str = ""):
        super().__init__(
            message or f"Cannot change status from {current} to {target}",
            current=current,
            target=target,
        )


class Forbidden(DomainError):
    """Caller is not a party allowed to perform the operation."""

    code = "forbidden"
