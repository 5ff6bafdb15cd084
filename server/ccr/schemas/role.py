from __future__ import annotations

from pydantic import BaseModel

from ccr.core.roles import RoleDefinition


class RoleOut(BaseModel):
    id: str
    name: str
    display_name: str
    level: int
    description: str
    permissions: list[str]
    can_approve: list[str]

    @classmethod
    def from_definition(cls, role: RoleDefinition) -> "RoleOut":
        return cls(
            id=role.id,
            name=role.name,
            display_name=role.display_name,
            level=role.level,
            description=role.description,
            permissions=sorted(role.permissions),
            can_approve=list(role.can_approve),
        )


class PermissionCheckResponse(BaseModel):
    role_id: str
    permission: str
    granted: bool
