"""
Shared API dependencies: session identity, session token and outcome mapping.
"""
from datetime import timedelta
from typing import Optional
from fastapi import HTTPException, Request, status
from blog.core.config import settings
from blog.core.outcomes import Outcome, OutcomeKind
from blog.core.sessions import SessionIdentity

# Process-wide; created at import, entries added at login and dropped at logout or expiry
session_identity = SessionIdentity(ttl=timedelta(minutes=settings.SESSION_TTL_MINUTES))

_STATUS_BY_KIND = {
    OutcomeKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OutcomeKind.CONFLICT: status.HTTP_409_CONFLICT,
    OutcomeKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    OutcomeKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    OutcomeKind.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def get_sessions() -> SessionIdentity:
    """Dependency for the session identity store."""
    return session_identity


def get_session_token(request: Request) -> Optional[str]:
    """Read the session token from the request cookie."""
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def unwrap(outcome: Outcome):
    """Return the outcome's value or raise the matching HTTPException."""
    if outcome.is_ok:
        return outcome.value
    raise HTTPException(
        status_code=_STATUS_BY_KIND[outcome.kind],
        detail=outcome.detail,
    )
