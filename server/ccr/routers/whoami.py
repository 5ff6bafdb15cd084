from fastapi import APIRouter, Depends

from ccr.auth.deps import get_current_user
from ccr.core.roles import get_admin_level, resolve_role
from ccr.models.user import User
from ccr.schemas.auth import WhoAmIResponse
from ccr.services.formatting import full_name

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/whoami", response_model=WhoAmIResponse)
def whoami(user: User = Depends(get_current_user)) -> WhoAmIResponse:
    profile = user.profile
    if profile is None:
        return WhoAmIResponse(id=user.id, user=user.email)
    role = resolve_role(profile.role)
    return WhoAmIResponse(
        id=user.id,
        user=user.email,
        full_name=full_name(profile.first_name, profile.last_name) or None,
        role=role.id if role else profile.role,
        role_display_name=role.display_name if role else None,
        admin_level=get_admin_level(profile.role, is_admin=profile.is_admin),
    )
