"""
JWT utilities and FastAPI dependencies for authenticated, role-checked routes.

Functions
---------
create_access_token(data: dict) -> str
    Creates a signed JWT access token with an expiration (`exp`) claim.
verify_token(token: str) -> dict | None
    Verify a JWT's signature & expiration and return its claims if valid.
get_identity / require_roles / get_acting_staff / get_current_tenant
    Dependencies that turn the `Authorization: Bearer` header into an identity,
    enforce roles and resolve the staff member or tenant behind it.

Environment contract (from `settings`)
--------------------------------------
SECRET_KEY : str
    HMAC signing key for JWTs.
ALGORITHM : str
    JWT signing algorithm (e.g., "HS256").
ACCESS_TOKEN_EXPIRE_MINUTES : int
    Token lifetime window in minutes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from condo_parcels.api.models import Identity
from condo_parcels.database.config.config import settings
from condo_parcels.database.core.directory import resolve_staff, resolve_tenant_profile
from condo_parcels.database.core.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

STAFF_ROLES = ("OFFICER", "ADMIN")

bearer_scheme = HTTPBearer(auto_error=False)
"""Reads `Authorization: Bearer <token>`; missing headers are reported by `get_identity`."""


def create_access_token(data: dict) -> str:
    """
    Create a signed JWT access token.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (`sub` and `role`).
        Retrieved in the `verify_token` function.

    Returns
    -------
    str
        Encoded JWT string.

    Notes
    ----------
    - Adds an `exp` (expiration) claim calculated from ACCESS_TOKEN_EXPIRE_MINUTES.
    - Uses `settings.SECRET_KEY` and `settings.ALGORITHM` for signing.
    """
    expiration_time = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    encoding = data.copy()
    # exp is a NumericDate (seconds since epoch)
    expires = int(datetime.now(timezone.utc).timestamp()) + (int(expiration_time) * 60)
    encoding.update({"exp": expires})
    return jwt.encode(encoding, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify a JWT and return its claims.

    Parameters
    ----------
    token : str
        Encoded JWT string from the `Authorization` header.

    Returns
    ----------
    dict | None
        The decoded claims if the token is valid, otherwise None.

    Notes
    ----------
    - Decodes and validates the signature and expiration using SECRET_KEY/ALGORITHM.
    - On any JWTError (invalid signature, expired, malformed), returns None.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("Rejected access token: %s", e)
        return None


def get_identity(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Identity:
    """Identity of the caller; UNAUTHORIZED when the token is missing, invalid or expired."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing token")
    claims = verify_token(credentials.credentials)
    if not claims or claims.get("sub") is None or not claims.get("role"):
        raise UnauthorizedError("Invalid or expired token")
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token") from None
    return Identity(user_id=user_id, role=claims["role"])


def require_roles(*roles: str):
    """
    Dependency factory: allow only callers whose role is in `roles`.

    Example
    -------
    >>> @router.delete("/admin/packages/{package_id}")
    ... def remove(package_id: int, identity: Identity = Depends(require_roles("ADMIN"))):
    ...     ...
    """
    def checker(identity: Identity = Depends(get_identity)) -> Identity:
        if identity.role not in roles:
            raise ForbiddenError("You do not have permission to perform this action")
        return identity

    return checker


def get_acting_staff(identity: Identity = Depends(require_roles(*STAFF_ROLES))) -> dict:
    """Staff record of an officer/admin caller; every package write is attributed to it."""
    staff = resolve_staff(user_id=identity.user_id)
    staff["role"] = identity.role
    return staff


def get_current_tenant(identity: Identity = Depends(require_roles("TENANT"))) -> dict:
    """Tenant profile of the caller; tenant reads are scoped to its `tenant_id`."""
    return resolve_tenant_profile(user_id=identity.user_id)
