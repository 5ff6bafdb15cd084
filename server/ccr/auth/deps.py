from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ccr.core.config import settings
from ccr.core.db import get_db
from ccr.core.roles import get_admin_level, has_permission, resolve_role
from ccr.models.user import User
from ccr.services.validations import has_approval_rights

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    token = credentials.credentials
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if subject is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    user: User | None = None
    try:
        user = db.get(User, int(subject))
    except (TypeError, ValueError):
        user = None

    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")
    return user


def user_role_id(user: User) -> str | None:
    if user.profile is None:
        return None
    role = resolve_role(user.profile.role)
    return role.id if role else None


def require_permissions(*permissions: str) -> Callable[[User], User]:
    """Allow the request when the caller's role grants any of ``permissions``."""

    def checker(user: User = Depends(get_current_user)) -> User:
        role_id = user_role_id(user)
        if role_id is None or not any(has_permission(role_id, permission) for permission in permissions):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return checker


def require_admin_access(user: User = Depends(get_current_user)) -> User:
    profile = user.profile
    level = get_admin_level(profile.role if profile else None, is_admin=bool(profile and profile.is_admin))
    if level == "none":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def require_approver(user: User = Depends(get_current_user)) -> User:
    if not has_approval_rights(user.profile.role if user.profile else None):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Approval rights required")
    return user
