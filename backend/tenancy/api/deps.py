"""FastAPI dependencies for resolving the calling principal."""
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tenancy.core.exceptions import Unauthenticated
from tenancy.core.security import principal_id_from_token

# HTTP Bearer token security scheme; missing credentials are handled below
security = HTTPBearer(auto_error=False)


async def resolve_principal_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID | None:
    """Return the verified principal id for the request, or None.

    The id always comes from a verified token; nothing the client sends in
    a body or query is trusted as identity.
    """
    if credentials is None:
        return None
    return principal_id_from_token(credentials.credentials)


async def get_current_principal(
    principal_id: UUID | None = Depends(resolve_principal_id),
) -> UUID:
    """Require an authenticated principal.

    Raises:
        Unauthenticated: 401 if the token is missing, invalid or expired
    """
    if principal_id is None:
        raise Unauthenticated("Invalid or expired token")
    return principal_id
