"""
User service for registration, authentication and self-service updates.
"""
import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from blog.core.outcomes import Outcome
from blog.core.security import get_password_hash, verify_password
from blog.core.sessions import Principal, SessionIdentity
from blog.db.store import EntityNotFoundError, EntityStore
from blog.models.user import USER, User
from blog.schemas.user import Login, Register, UpdateUserPassword

logger = logging.getLogger(__name__)


def find_by_username(username: str, store: EntityStore) -> Optional[User]:
    """Lookup used for the username uniqueness check."""
    return store.find_one(USER, username=username)


def register(payload: Register, store: EntityStore) -> Outcome[User]:
    """Create a new user unless the username is already taken."""
    if find_by_username(payload.username, store) is not None:
        logger.info(f"Registration rejected, username '{payload.username}' already exists")
        return Outcome.conflict(f"Username already exists: {payload.username}")

    user = User(
        username=payload.username,
        password=get_password_hash(payload.password),
        email=str(payload.email),
    )
    try:
        store.insert(USER, user)
        store.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same username
        store.rollback()
        logger.info(f"Registration rejected, username '{payload.username}' already exists")
        return Outcome.conflict(f"Username already exists: {payload.username}")

    logger.info(f"Registered user {user.id} ({user.username})")
    return Outcome.ok(user)


def authenticate(username: str, password: str, store: EntityStore) -> Optional[User]:
    """Return the user matching the credentials, or None."""
    user = find_by_username(username, store)
    if user is None or not verify_password(password, user.password):
        return None
    return user


def login(payload: Login, token: str, store: EntityStore, sessions: SessionIdentity) -> Outcome[Principal]:
    """Check credentials and bind the user to the session token."""
    user = authenticate(payload.username, payload.password, store)
    if user is None:
        logger.warning(f"Failed login for '{payload.username}'")
        return Outcome.unauthenticated("Incorrect username or password")

    principal = Principal.from_user(user)
    sessions.set(token, principal)
    logger.info(f"User {user.id} logged in")
    return Outcome.ok(principal)


def logout(token: Optional[str], sessions: SessionIdentity) -> Outcome[None]:
    """Invalidate the session. Always succeeds."""
    sessions.invalidate(token)
    return Outcome.ok(None)


def current_principal(token: Optional[str], sessions: SessionIdentity) -> Outcome[Principal]:
    principal = sessions.get(token)
    if principal is None:
        return Outcome.unauthenticated()
    return Outcome.ok(principal)


def update_password(
    payload: UpdateUserPassword,
    token: Optional[str],
    store: EntityStore,
    sessions: SessionIdentity,
) -> Outcome[Principal]:
    """
    Change the logged-in user's password.

    No ownership check is needed since the target is the session's own
    principal. After the write the session copy is replaced so later checks
    never see the pre-update values, unless the session ended meanwhile.
    """
    principal = sessions.get(token)
    if principal is None:
        return Outcome.unauthenticated()

    hashed = get_password_hash(payload.password)

    def apply(user: User) -> None:
        user.password = hashed

    try:
        user = store.tracked_update(USER, principal.id, apply)
    except EntityNotFoundError:
        logger.warning(f"Session user {principal.id} no longer exists")
        return Outcome.not_found("User not found")
    store.commit()

    updated = Principal.from_user(user)
    logger.info(f"User {user.id} changed password")
    if not sessions.replace(token, updated):
        # Logged out (or expired) while the update ran; stay anonymous
        logger.info(f"Session for user {user.id} ended during password change")
    return Outcome.ok(updated)
