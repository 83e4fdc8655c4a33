"""
Service Domain Exceptions

All exceptions raised by the admission and referral service layer.

DomainError subclasses are caller-facing and recoverable: the request was
refused and nothing changed. InfrastructureError subclasses mean the
operation could not run at all; the service boundary retries them with
backoff before letting them propagate.
"""


class BizCircleError(Exception):
    """Base exception for service errors"""
    pass


class DomainError(BizCircleError):
    """Base exception for caller-facing domain errors"""
    pass


class ValidationError(DomainError):
    """Raised when input is malformed"""
    pass


class EmailAlreadyRegistered(ValidationError):
    """Raised when a registration would reuse an existing account email"""
    pass


class NotFound(DomainError):
    """Raised when a referenced entity does not exist"""
    pass


class AlreadyDecided(DomainError):
    """Raised when an application has already been approved or rejected"""
    pass


class AlreadyTerminal(DomainError):
    """Raised when a referral is already closed or rejected"""
    pass


class InvalidToken(DomainError):
    """
    Raised for any unusable invitation token.

    Unknown, expired and already-used tokens all raise this with the same
    message so callers cannot tell them apart.
    """

    def __init__(self):
        super().__init__("Invitation token is invalid or has expired")


class Forbidden(DomainError):
    """Raised when the actor is not allowed to perform the operation"""
    pass


class SelfReferral(DomainError):
    """Raised when a member refers a lead to themselves"""
    pass


class MemberInactive(DomainError):
    """Raised when a referral party is not an active member"""
    pass


class IllegalTransition(DomainError):
    """Raised when a referral status change is not in the transition table"""
    pass


class InfrastructureError(BizCircleError):
    """Base exception for fatal infrastructure failures"""
    pass


class TokenGenerationError(InfrastructureError):
    """Raised when the OS entropy source cannot produce a token"""
    pass


class StoreUnavailableError(InfrastructureError):
    """Raised when the transactional store cannot be reached"""
    pass
