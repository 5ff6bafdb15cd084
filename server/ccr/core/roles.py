"""Church role hierarchy. Level 1 carries the most authority."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

WILDCARD_PERMISSION = "*"

AdminLevel = Literal["full", "readonly", "none"]

FULL_ADMIN_ROLES = frozenset({"pasteur_principal", "pasteur_consacre", "pasteur_residant"})
READONLY_ADMIN_ROLES = frozenset({"pasteur_assistant", "assistant_pasteur"})


@dataclass(frozen=True)
class RoleDefinition:
    id: str
    name: str
    display_name: str
    level: int
    description: str
    permissions: frozenset[str]
    can_approve: tuple[str, ...] = ()

    @property
    def has_wildcard(self) -> bool:
        return WILDCARD_PERMISSION in self.permissions


ROLES: tuple[RoleDefinition, ...] = (
    RoleDefinition(
        id="pasteur_principal",
        name="PasteurPrincipal",
        display_name="Pasteur Principal",
        level=1,
        description="Pasteur fondateur, autorité suprême de l'église",
        permissions=frozenset({WILDCARD_PERMISSION}),
        can_approve=("pasteur_consacre", "pasteur_residant", "pasteur_assistant"),
    ),
    RoleDefinition(
        id="pasteur_consacre",
        name="PasteurConsacre",
        display_name="Pasteur Consacré",
        level=2,
        description="Chef de centre, a ouvert 3+ assemblées",
        permissions=frozenset(
            {
                "view:own_church",
                "view:child_churches",
                "manage:members",
                "manage:finances",
                "manage:events",
                "approve:roles",
            }
        ),
        can_approve=("pasteur_residant", "pasteur_assistant", "assistant_pasteur"),
    ),
    RoleDefinition(
        id="pasteur_residant",
        name="PasteurResidant",
        display_name="Pasteur Résidant",
        level=3,
        description="Pasteur établi sur une assemblée",
        permissions=frozenset(
            {"view:own_church", "manage:members", "manage:finances", "manage:events", "approve:roles"}
        ),
        # "berger" is a pastoral grade with no role record yet; it never resolves.
        can_approve=("pasteur_assistant", "assistant_pasteur", "berger"),
    ),
    RoleDefinition(
        id="pasteur_assistant",
        name="PasteurAssistant",
        display_name="Pasteur Assistant",
        level=4,
        description="Adjoint d'un Pasteur",
        permissions=frozenset({"view:own_church", "manage:members", "view:finances", "manage:events"}),
        can_approve=("assistant_pasteur", "berger"),
    ),
    RoleDefinition(
        id="assistant_pasteur",
        name="AssistantPasteur",
        display_name="Assistant Pasteur",
        level=5,
        description="Pasteur stagiaire",
        permissions=frozenset({"view:own_church", "view:members", "view:finances", "manage:events"}),
    ),
    RoleDefinition(
        id="patriarche",
        name="Patriarche",
        display_name="Patriarche",
        level=6,
        description="Chef de Tribu (homme)",
        permissions=frozenset({"view:own_church", "manage:tribu", "view:members", "manage:events"}),
        can_approve=("chef_zone", "chef_famille"),
    ),
    RoleDefinition(
        id="matriarche",
        name="Matriarche",
        display_name="Matriarche",
        level=6,
        description="Chef de Tribu (femme)",
        permissions=frozenset({"view:own_church", "manage:tribu", "view:members", "manage:events"}),
        can_approve=("chef_zone", "chef_famille"),
    ),
    RoleDefinition(
        id="responsable_departement",
        name="ResponsableDepartement",
        display_name="Responsable de Département",
        level=7,
        description="Responsable d'un département de service",
        permissions=frozenset({"view:own_church", "manage:department", "view:members"}),
        can_approve=("serviteur",),
    ),
    RoleDefinition(
        id="chef_zone",
        name="ChefZone",
        display_name="Chef de Zone",
        level=8,
        description="Responsable d'une zone géographique",
        permissions=frozenset({"view:own_church", "manage:zone", "view:members"}),
        can_approve=("chef_famille", "mobilisateur"),
    ),
    RoleDefinition(
        id="chef_famille",
        name="ChefFamille",
        display_name="Chef de Famille",
        level=9,
        description="Responsable d'une Famille de Réveil",
        permissions=frozenset({"view:own_church", "manage:famille", "view:members"}),
    ),
    RoleDefinition(
        id="mobilisateur",
        name="Mobilisateur",
        display_name="Mobilisateur",
        level=9,
        description="Responsable de la mobilisation dans une zone",
        permissions=frozenset({"view:own_church", "view:members"}),
    ),
    RoleDefinition(
        id="serviteur",
        name="Serviteur",
        display_name="Serviteur",
        level=10,
        description="Membre servant dans un département",
        permissions=frozenset({"view:own_church", "view:department"}),
    ),
    RoleDefinition(
        id="fidele",
        name="Fidele",
        display_name="Fidèle",
        level=11,
        description="Membre de l'église",
        permissions=frozenset({"view:own_profile", "view:events", "view:formations"}),
    ),
)


def get_role_by_id(role_id: str) -> RoleDefinition | None:
    for role in ROLES:
        if role.id == role_id:
            return role
    return None


def get_approvable_roles(role_id: str) -> list[RoleDefinition]:
    """Roles the given role may approve or assign, in hierarchy order."""

    role = get_role_by_id(role_id)
    if role is None:
        return []
    return [candidate for candidate in ROLES if candidate.id in role.can_approve]


def has_permission(role_id: str, permission: str) -> bool:
    role = get_role_by_id(role_id)
    if role is None:
        return False
    if role.has_wildcard:
        return True
    return permission in role.permissions


def get_roles_sorted() -> list[RoleDefinition]:
    return sorted(ROLES, key=lambda role: role.level)


def resolve_role(value: str | None) -> RoleDefinition | None:
    """Match a stored role label against ids, internal names, then display names."""

    if not value:
        return None
    for role in ROLES:
        if value in (role.id, role.name, role.display_name):
            return role
    return None


def can_assign_role(actor_role: str | None, target_role: str | None) -> tuple[bool, str | None]:
    """Apply the N+1 rule: leaders only hand out roles strictly below their own.

    Returns ``(allowed, reason)``. The rule only applies when both labels
    resolve; callers gate the action on ``manage:members`` separately.
    """

    actor = resolve_role(actor_role)
    target = resolve_role(target_role)
    if actor is None or target is None:
        return True, None
    if target.level <= actor.level:
        return False, (
            "Vous ne pouvez pas attribuer un rôle de niveau égal ou supérieur "
            f"au vôtre ({actor.display_name})"
        )
    if actor.can_approve and target.id not in actor.can_approve:
        return False, f"Votre rôle ({actor.display_name}) ne peut pas attribuer le rôle {target.display_name}"
    return True, None


def can_manage_member(actor_role: str | None, member_role: str | None) -> tuple[bool, str | None]:
    """Leaders only act on members strictly below them; the wildcard role acts on anyone."""

    actor = resolve_role(actor_role)
    member = resolve_role(member_role)
    if actor is None or member is None or actor.has_wildcard:
        return True, None
    if member.level <= actor.level:
        return False, (
            "Vous ne pouvez pas modifier un membre de niveau égal ou supérieur "
            f"au vôtre ({actor.display_name})"
        )
    return True, None


def get_admin_level(role_value: str | None, is_admin: bool = False) -> AdminLevel:
    if is_admin:
        return "full"
    role = resolve_role(role_value)
    if role is None:
        return "none"
    if role.id in FULL_ADMIN_ROLES:
        return "full"
    if role.id in READONLY_ADMIN_ROLES:
        return "readonly"
    return "none"
