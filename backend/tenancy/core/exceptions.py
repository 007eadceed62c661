"""Domain errors for the tenant authorization core.

Every rejection names the rule that blocked it. The classes subclass
``HTTPException`` so FastAPI maps them to a status code even without the
dedicated handler registered in ``tenancy.main``.
"""

from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for rejections raised by the services."""

    code = "domain_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request rejected"

    def __init__(self, message: str | None = None, *, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(status_code=type(self).status_code, detail=self.message)


class Unauthenticated(DomainError):
    """No verified principal on the request."""

    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, message: str | None = None, *, details: dict | None = None):
        super().__init__(message, details=details)
        self.headers = {"WWW-Authenticate": "Bearer"}


class NotAuthorized(DomainError):
    code = "not_authorized"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You don't have permission to perform this action"


class PrivilegeEscalation(DomainError):
    code = "privilege_escalation"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Only owners can grant the owner role"


class NotFound(DomainError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class MemberNotFound(NotFound):
    code = "member_not_found"
    default_message = "Member not found"


class PrincipalNotFound(NotFound):
    code = "principal_not_found"
    default_message = "User not found. They must sign up before being added to an organization"


class NotAMember(NotFound):
    code = "not_a_member"
    default_message = "You are not a member of this organization"


class SlugConflict(DomainError):
    code = "slug_conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "An organization with this slug already exists"


class AlreadyMember(DomainError):
    code = "already_member"
    status_code = status.HTTP_409_CONFLICT
    default_message = "User is already a member of this organization"


class MustTransferOwnership(DomainError):
    code = "must_transfer_ownership"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You must transfer ownership before leaving the organization"


class CannotRemoveOwner(DomainError):
    code = "cannot_remove_owner"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Owners cannot be removed; use leave after transferring ownership"


class NoRemainingOwner(DomainError):
    code = "no_remaining_owner"
    status_code = status.HTTP_409_CONFLICT
    default_message = "The organization must keep at least one owner"


class ValidationError(DomainError):
    """Input rejected against a field rule."""

    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Request validation failed"

    def __init__(self, field: str, message: str, *, details: dict | None = None):
        self.field = field
        super().__init__(message, details=details or {field: message})
