from fastapi import APIRouter, Depends, HTTPException, status

from ccr.auth.deps import get_current_user
from ccr.core.roles import get_approvable_roles, get_role_by_id, get_roles_sorted, has_permission
from ccr.models.user import User
from ccr.schemas.role import PermissionCheckResponse, RoleOut

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=list[RoleOut])
def list_roles(_: User = Depends(get_current_user)) -> list[RoleOut]:
    return [RoleOut.from_definition(role) for role in get_roles_sorted()]


@router.get("/{role_id}", response_model=RoleOut)
def get_role(role_id: str, _: User = Depends(get_current_user)) -> RoleOut:
    role = get_role_by_id(role_id)
    if role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return RoleOut.from_definition(role)


@router.get("/{role_id}/approvable", response_model=list[RoleOut])
def list_approvable_roles(role_id: str, _: User = Depends(get_current_user)) -> list[RoleOut]:
    return [RoleOut.from_definition(role) for role in get_approvable_roles(role_id)]


@router.get("/{role_id}/permissions/{permission}", response_model=PermissionCheckResponse)
def check_permission(role_id: str, permission: str, _: User = Depends(get_current_user)) -> PermissionCheckResponse:
    return PermissionCheckResponse(
        role_id=role_id,
        permission=permission,
        granted=has_permission(role_id, permission),
    )
