# ============================================================================
# SCOPE: GLOBAL
# Description: FastAPI dependencies shared by every router (DI container,
#              bearer token authentication).
# ============================================================================
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.container import DependencyContainer, get_container
from app.domains.scheduling.application.dto import RequestContext
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_token_service: TokenService | None = None


def get_token_service() -> TokenService:
    global _token_service
    if _token_service is None:
        _token_service = TokenService()
    return _token_service


def get_di_container() -> DependencyContainer:
    """Get Dependency Injection Container singleton."""
    return get_container()


async def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    token_service: TokenService = Depends(get_token_service),  # noqa: B008
) -> RequestContext:
    """
    Caller identity decoded from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    context = token_service.get_request_context(credentials.credentials)
    logger.debug(f"Authenticated user {context.user_id} as {context.role.value}")
    return context
