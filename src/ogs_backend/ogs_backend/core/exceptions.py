class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when the requested subject entity does not exist."""


class AuthenticationError(DomainError):
    """Raised when the request carries no verified identity."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
