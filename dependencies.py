"""
Shared API dependencies.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)

from database import CatalogStore, db
from security import DUMMY_HASH, decode_access_token, verify_password

logger = logging.getLogger(__name__)

basic_scheme = HTTPBasic(auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


def get_store() -> CatalogStore:
    return db


def require_admin(
    basic: Optional[HTTPBasicCredentials] = Depends(basic_scheme),
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: CatalogStore = Depends(get_store),
) -> dict:
    """
    Accept either Basic admin credentials or a Bearer token issued by
    /api/auth/login. No usable credentials is 401, invalid ones are 403.
    """
    if basic is None and bearer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization header",
            headers={"WWW-Authenticate": "Basic"},
        )

    forbidden = HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")

    if bearer is not None:
        payload = decode_access_token(bearer.credentials)
        if not payload or payload.get("role") != "admin":
            logger.warning("Rejected admin request with invalid token")
            raise forbidden
        user = store.find_user(payload.get("sub"))
    else:
        user = store.find_user(basic.username)
        hashed = user.get("passwordHash") if user is not None else DUMMY_HASH
        if not verify_password(basic.password, hashed):
            user = None

    if user is None or user.get("role") != "admin":
        logger.warning("Rejected admin request")
        raise forbidden
    return user
