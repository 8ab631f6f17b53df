"""
Explicit session context passed into every report.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional
from errors import AccessDeniedError, MissingFieldError, NotAuthenticatedError
from transformation.records import UserProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    uid: str
    email: Optional[str] = None
    roles: Dict[str, bool] = field(default_factory=dict)
    restaurant_id: Optional[str] = None

    @property
    def is_business(self):
        return self.roles.get('business') is True


def require_session(session):
    if session is None:
        raise NotAuthenticatedError()
    return session


def require_business(session):
    session = require_session(session)
    if not session.is_business:
        raise AccessDeniedError()
    return session


def require_restaurant(session):
    """Return the session's restaurant id; reports scoped to a restaurant cannot run without it."""
    session = require_session(session)
    if not session.restaurant_id:
        raise MissingFieldError('users', session.uid, 'restaurantId')
    return session.restaurant_id


def load_session(store, uid, business_only=True):
    """
    Build a session for a signed-in user id from the users collection.

    An unknown uid is treated as no session at all. Unless `business_only`
    is off, users without the business role are refused.
    """
    if not uid:
        raise NotAuthenticatedError()

    document = store.get(UserProfile.collection, uid)
    if document is None:
        logger.warning(f"No user profile for uid {uid}")
        raise NotAuthenticatedError(f"No user profile for '{uid}'")

    profile = UserProfile.from_document(document)
    session = AuthSession(
        uid=profile.id,
        email=profile.email,
        roles=profile.roles,
        restaurant_id=profile.restaurant_id
    )
    if business_only and not session.is_business:
        logger.warning(f"User {uid} has no business role")
        raise AccessDeniedError()
    return session
