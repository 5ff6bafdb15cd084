from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from ccr.core.clock import now_utc
from ccr.core.config import settings
from ccr.core.roles import can_assign_role, can_manage_member, resolve_role
from ccr.models.activity_log import ActivityLog
from ccr.models.profile import Profile
from ccr.models.user import User
from ccr.services.profile_completion import calculate_profile_completion

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "first_name",
    "last_name",
    "gender",
    "date_of_birth",
    "photo_url",
    "phone",
    "whatsapp",
    "address",
    "city",
    "neighborhood",
    "marital_status",
    "profession",
    "employer",
    "is_baptized",
    "baptism_date",
}

_REGISTRATION_FIELDS = ("first_name", "last_name", "phone")
_NON_NULLABLE_FIELDS = {"is_baptized"}

MEMBER_STATUSES = ("Active", "Pending", "Suspended")


class MemberAuthorityError(Exception):
    """Raised when the acting leader has no authority over the member."""


class RoleAssignmentError(MemberAuthorityError):
    """Raised when a role change is refused by the hierarchy."""


def _to_string(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def log_activity(
    db: Session,
    *,
    action: str,
    entity_type: str,
    entity_id: int | None,
    actor_id: int | None,
    description: str | None = None,
    payload: dict[str, Any] | None = None,
) -> ActivityLog:
    entry = ActivityLog(
        actor_user_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
        payload=payload,
    )
    db.add(entry)
    return entry


def refresh_completion(profile: Profile) -> int:
    profile.profile_completion = calculate_profile_completion(profile)
    return profile.profile_completion


def create_profile(db: Session, user: User, metadata: Mapping[str, Any] | None = None) -> Profile:
    """Create the profile attached to a freshly registered user."""

    metadata = metadata or {}
    profile = Profile(
        email=user.email,
        role=settings.DEFAULT_ROLE,
        status=settings.DEFAULT_STATUS,
        **{field: (metadata.get(field) or "").strip() for field in _REGISTRATION_FIELDS},
    )
    refresh_completion(profile)
    user.profile = profile
    db.add(profile)
    db.flush()
    logger.info(
        "profile_created",
        extra={"user_id": user.id, "profile_completion": profile.profile_completion},
    )
    return profile


def update_profile(
    db: Session,
    profile: Profile,
    changes: Mapping[str, Any],
    actor_id: int | None,
) -> list[str]:
    """Apply editable ``changes`` and recompute the stored completion score.

    Returns the names of the fields whose value changed. The caller commits.
    """

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    cleared = {field for field in _NON_NULLABLE_FIELDS if field in changes and changes[field] is None}
    if cleared:
        raise ValueError(f"Fields cannot be cleared: {', '.join(sorted(cleared))}")

    changed: dict[str, dict[str, str | None]] = {}
    for field, value in changes.items():
        if isinstance(value, str):
            value = value.strip()
        current = getattr(profile, field)
        if current == value:
            continue
        changed[field] = {"old": _to_string(current), "new": _to_string(value)}
        setattr(profile, field, value)

    if not changed:
        return []

    previous_completion = profile.profile_completion
    refresh_completion(profile)
    profile.updated_at = now_utc()
    log_activity(
        db,
        action="profile_updated",
        entity_type="profile",
        entity_id=profile.id,
        actor_id=actor_id,
        payload=changed,
    )
    if previous_completion != profile.profile_completion:
        logger.info(
            "profile_completion_changed",
            extra={
                "profile_id": profile.id,
                "previous": previous_completion,
                "current": profile.profile_completion,
            },
        )
    return list(changed)


def _ensure_authority(actor: Profile, target: Profile, error: type[MemberAuthorityError]) -> None:
    if actor.id == target.id:
        raise error("Vous ne pouvez pas modifier votre propre profil")
    allowed, reason = can_manage_member(actor.role, target.role)
    if not allowed:
        raise error(reason)


def assign_role(db: Session, actor: Profile, target: Profile, new_role: str) -> Profile:
    role = resolve_role(new_role)
    if role is None:
        raise ValueError(f"Unknown role: {new_role}")

    try:
        _ensure_authority(actor, target, RoleAssignmentError)
        allowed, reason = can_assign_role(actor.role, role.id)
        if not allowed:
            raise RoleAssignmentError(reason)
    except RoleAssignmentError:
        logger.warning(
            "role_assignment_refused",
            extra={"actor_profile_id": actor.id, "target_profile_id": target.id, "role": role.id},
        )
        raise

    previous = target.role
    target.role = role.id
    target.updated_at = now_utc()
    actor_label = resolve_role(actor.role)
    log_activity(
        db,
        action="member_role_changed",
        entity_type="profile",
        entity_id=target.id,
        actor_id=actor.user_id,
        description=f"Rôle changé à {role.display_name} par {actor_label.display_name if actor_label else actor.role}",
        payload={"old": previous, "new": role.id},
    )
    logger.info(
        "role_assigned",
        extra={"actor_profile_id": actor.id, "target_profile_id": target.id, "old": previous, "new": role.id},
    )
    return target


def update_member_status(db: Session, actor: Profile, target: Profile, new_status: str) -> Profile:
    """Move a member between Active, Pending and Suspended. The caller commits."""

    if new_status not in MEMBER_STATUSES:
        raise ValueError(f"Unknown status: {new_status}")
    _ensure_authority(actor, target, MemberAuthorityError)

    previous = target.status
    if previous == new_status:
        return target
    target.status = new_status
    target.updated_at = now_utc()
    log_activity(
        db,
        action="member_status_changed",
        entity_type="profile",
        entity_id=target.id,
        actor_id=actor.user_id,
        description=f"Statut changé à {new_status}",
        payload={"old": previous, "new": new_status},
    )
    logger.info(
        "member_status_changed",
        extra={"actor_profile_id": actor.id, "target_profile_id": target.id, "old": previous, "new": new_status},
    )
    return target
