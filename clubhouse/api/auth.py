"""Bearer identity resolution.

Stub implementation: the bearer token is the numeric user id. Real token
validation happens upstream of this service.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from clubhouse.db.context import RequestContext


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Resolve the caller from the authorization header.

    A missing header resolves to an anonymous context so callers can decide
    how to treat it; a malformed one is rejected outright.

    Args:
        authorization: Authorization header (e.g., "Bearer 42")

    Returns:
        RequestContext, anonymous when no header was sent

    Raises:
        HTTPException: If the header is present but invalid
    """
    if not authorization:
        return RequestContext.anonymous()

    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid authorization header format")

    token = authorization[7:].strip()  # Strip "Bearer "

    try:
        user_id = int(token)
    except ValueError as e:
        raise _unauthorized("Invalid bearer token (expected user id)") from e

    if user_id <= 0:
        raise _unauthorized("Invalid bearer token (expected user id)")

    return RequestContext(user_id=user_id)


async def get_current_context(
    ctx: Annotated[RequestContext, Depends(resolve_context)],
) -> RequestContext:
    """Require an authenticated caller.

    Raises:
        HTTPException: 401 if no identity was resolved
    """
    if not ctx.is_authenticated:
        raise _unauthorized("Authentication required")
    return ctx
