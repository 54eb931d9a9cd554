from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sixloans.core.security import decode_token
from sixloans.schemas.enums import RoleEnum
from sixloans.services.auth_service import AuthService, get_auth_service
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

# Decodes the bearer token and rejects revoked ones
async def get_token_payload(
    token: str = Depends(oauth2_scheme),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    payload = decode_token(token)
    if payload is None or not payload.get("sub"):
        logger.warning("Token validation failed")
        raise _credentials_exception("Invalid or expired token")

    if await service.is_token_revoked(payload):
        raise _credentials_exception("Token has been revoked. Please login again.")
    return payload

# Loads the user behind a valid token; tokens minted before a logout-all are refused
async def get_current_user(
    payload: Dict[str, Any] = Depends(get_token_payload),
    service: AuthService = Depends(get_auth_service),
):
    user = await service.users.get(payload["sub"])
    if user is None:
        raise _credentials_exception()
    if payload.get("ver", 0) != (user.token_version or 0):
        raise _credentials_exception("Token has been revoked. Please login again.")
    return user

# Admins and moderators manage the catalog and applications
async def get_staff_user(current_user=Depends(get_current_user)):
    if RoleEnum(current_user.role) not in (RoleEnum.admin, RoleEnum.moderator):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied. Admins or Moderators only.")
    return current_user

# Only admins may change roles
async def get_admin_user(current_user=Depends(get_current_user)):
    if RoleEnum(current_user.role) != RoleEnum.admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied. Admins only.")
    return current_user
