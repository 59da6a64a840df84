from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from lms.db import engine as db_engine
from lms.middleware.request_context import user_id_var
from lms.models.principal import Principal
from lms.repos.bundle import Repos
from lms.services import token_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def require_user(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Used as a FastAPI dependency on any protected endpoint.  The user id
    goes on ``request.state`` for the request summary log line and into
    ``user_id_var`` for every log line the route emits; async so that the
    ContextVar write lands in the route's own context, not a worker thread.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = token_service.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    request.state.user_id = principal.user_id
    user_id_var.set(principal.user_id)
    logger.debug(
        "Token validated for user=%s roles=%s",
        principal.user_id,
        principal.roles,
    )
    return principal


def require_role(role: str):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role("master_practitioner"))
    Returns the Principal if the role is present, else 403.
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s",
                principal.user_id,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden",
            )
        return principal

    return _guard


async def get_repos() -> AsyncGenerator[Repos, None]:
    """Request-scoped repositories.

    With DATABASE_URL set, every repo shares one session that commits on
    success and rolls back on error.  Without it, the in-memory store.
    """
    if db_engine.async_session_factory is None:
        yield Repos.in_memory()
        return
    async with db_engine.session_scope() as session:
        yield Repos.postgres(session)


CurrentUser = Annotated[Principal, Depends(require_user)]
RequestRepos = Annotated[Repos, Depends(get_repos)]
