from typing import Optional, Dict, Any

from fastapi import Header, HTTPException
from jose import jwt, JWTError
from loguru import logger

from app.core.config import ADMIN_JWT_SECRET


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def _get_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header format")

    token = parts[1].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    return token


def _verify_jwt_hs256(token: str) -> Dict[str, Any]:
    """
    HS256 verification using ADMIN_JWT_SECRET.
    Tokens are issued by the admin sign-in flow, not by this service.
    """
    if not ADMIN_JWT_SECRET:
        raise HTTPException(status_code=500, detail="ADMIN_JWT_SECRET not set")

    try:
        return jwt.decode(
            token,
            ADMIN_JWT_SECRET,
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


# ------------------------------------------------------------
# Main Dependency
# ------------------------------------------------------------
def require_admin(
    authorization: Optional[str] = Header(default=None),
) -> str:
    token = _get_bearer_token(authorization)
    payload = _verify_jwt_hs256(token)

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Token missing sub claim")

    if payload.get("role") != "admin":
        logger.warning(f"[auth] non-admin token rejected sub={sub}")
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required.")

    logger.debug(f"[auth] admin={sub}")
    return str(sub)
