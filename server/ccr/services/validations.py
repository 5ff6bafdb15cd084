from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ccr.core.clock import now_utc
from ccr.core.roles import can_assign_role, can_manage_member, resolve_role
from ccr.models.profile import Profile
from ccr.models.validation_request import ValidationRequest
from ccr.services.profiles import RoleAssignmentError, assign_role, log_activity

logger = logging.getLogger(__name__)


class ValidationConflictError(Exception):
    """Raised for duplicate pending requests and requests already decided."""


def has_approval_rights(role_value: str | None) -> bool:
    role = resolve_role(role_value)
    return role is not None and (role.has_wildcard or bool(role.can_approve))


def can_decide(actor: Profile, request: ValidationRequest) -> tuple[bool, str | None]:
    """Whether ``actor`` may approve or reject ``request``, with the refusal reason."""

    if request.request_type != "role_change":
        return False, f"Type de demande non pris en charge: {request.request_type}"
    if not has_approval_rights(actor.role):
        return False, "Votre rôle ne permet pas de valider des demandes"
    if actor.id == request.requester_id:
        return False, "Vous ne pouvez pas valider votre propre demande"
    allowed, reason = can_manage_member(actor.role, request.requester.role)
    if not allowed:
        return allowed, reason
    return can_assign_role(actor.role, request.requested_value)


def create_role_change_request(
    db: Session,
    requester: Profile,
    requested_role: str,
    reason: str | None = None,
) -> ValidationRequest:
    role = resolve_role(requested_role)
    if role is None:
        raise ValueError(f"Unknown role: {requested_role}")
    if role.id == requester.role:
        raise ValueError("Role already held")

    pending = (
        db.query(ValidationRequest)
        .filter(
            ValidationRequest.requester_id == requester.id,
            ValidationRequest.request_type == "role_change",
            ValidationRequest.status == "pending",
        )
        .first()
    )
    if pending:
        raise ValidationConflictError("A role change request is already pending")

    request = ValidationRequest(
        requester_id=requester.id,
        request_type="role_change",
        entity_type="profile",
        entity_id=requester.id,
        current_value=requester.role,
        requested_value=role.id,
        reason=(reason or "").strip() or None,
        status="pending",
    )
    request.requester = requester
    db.add(request)
    db.flush()
    logger.info(
        "validation_requested",
        extra={"request_id": request.id, "requester_profile_id": requester.id, "requested": role.id},
    )
    return request


def pending_requests_for(db: Session, actor: Profile) -> list[ValidationRequest]:
    """Pending requests the actor is entitled to decide, newest first."""

    requests = (
        db.query(ValidationRequest)
        .filter(ValidationRequest.status == "pending")
        .order_by(ValidationRequest.created_at.desc(), ValidationRequest.id.desc())
        .all()
    )
    return [request for request in requests if can_decide(actor, request)[0]]


def process_validation(
    db: Session,
    actor: Profile,
    request: ValidationRequest,
    approved: bool,
    notes: str | None = None,
) -> ValidationRequest:
    """Approve or reject a pending request. Approved role changes are applied. The caller commits."""

    if request.status != "pending":
        raise ValidationConflictError("Demande déjà traitée")
    allowed, reason = can_decide(actor, request)
    if not allowed:
        raise RoleAssignmentError(reason)

    if approved:
        assign_role(db, actor, request.requester, request.requested_value)

    decided_at = now_utc()
    request.status = "approved" if approved else "rejected"
    request.validator_id = actor.user_id
    request.validated_at = decided_at
    request.validator_notes = notes
    request.updated_at = decided_at

    outcome = "approuvée" if approved else "rejetée"
    log_activity(
        db,
        action="validation_approved" if approved else "validation_rejected",
        entity_type="validation_request",
        entity_id=request.id,
        actor_id=actor.user_id,
        description=f"{request.request_type} {outcome}{': ' + notes if notes else ''}",
        payload={"requester_id": request.requester_id, "requested": request.requested_value},
    )
    logger.info(
        "validation_processed",
        extra={"request_id": request.id, "approved": approved, "validator_user_id": actor.user_id},
    )
    return request
