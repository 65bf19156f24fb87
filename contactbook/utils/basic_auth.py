# contactbook/utils/basic_auth.py

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

logger = logging.getLogger(__name__)

REALM = "Authorization Required"

# Missing credentials are rejected by HTTPBasic itself with the same challenge
security = HTTPBasic(realm=REALM)


def verify_basic_auth(request: Request, credentials: HTTPBasicCredentials = Depends(security)) -> str:
    settings = request.app.state.settings
    user_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.admin_user.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    if not (user_ok and password_ok):
        logger.warning("Rejected basic auth for user %r", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
        )
    return credentials.username
