from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from ccr.auth.deps import require_admin_access, require_permissions
from ccr.core.db import get_db
from ccr.core.roles import resolve_role
from ccr.models.activity_log import ActivityLog
from ccr.models.profile import Profile
from ccr.models.user import User
from ccr.schemas.activity import ActivityItem
from ccr.schemas.profile import (
    MemberListResponse,
    MemberStatusRequest,
    ProfileOut,
    ProfileStatusValue,
    RoleAssignmentRequest,
)
from ccr.services.formatting import format_relative_date, full_name
from ccr.services.profiles import MemberAuthorityError, assign_role, update_member_status

READ_PERMISSIONS = ("view:members", "manage:members")
WRITE_PERMISSIONS = ("manage:members",)

router = APIRouter(prefix="/members", tags=["members"])


def _get_profile_or_404(db: Session, profile_id: int) -> Profile:
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return profile


def _actor_name(actor: User | None) -> str | None:
    if not actor:
        return None
    if actor.profile:
        name = full_name(actor.profile.first_name, actor.profile.last_name)
        if name:
            return name
    return actor.email


@router.get("", response_model=MemberListResponse)
def list_members(
    *,
    q: str | None = Query(default=None, min_length=1),
    role: str | None = Query(default=None),
    member_status: ProfileStatusValue | None = Query(default=None, alias="status"),
    incomplete: bool | None = Query(default=None, description="Only profiles below 100% completion"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(require_permissions(*READ_PERMISSIONS)),
) -> MemberListResponse:
    query = db.query(Profile)
    if q:
        pattern = f"%{q.lower()}%"
        query = query.filter(
            or_(
                func.lower(func.coalesce(Profile.first_name, "")).like(pattern),
                func.lower(func.coalesce(Profile.last_name, "")).like(pattern),
                func.lower(func.coalesce(Profile.email, "")).like(pattern),
                func.lower(func.coalesce(Profile.phone, "")).like(pattern),
            )
        )
    if role:
        resolved = resolve_role(role)
        if resolved is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown role")
        query = query.filter(Profile.role == resolved.id)
    if member_status:
        query = query.filter(Profile.status == member_status)
    if incomplete:
        query = query.filter(Profile.profile_completion < 100)

    total = query.order_by(None).count()
    items = (
        query.order_by(Profile.last_name.asc(), Profile.first_name.asc(), Profile.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return MemberListResponse(
        items=[ProfileOut.from_orm(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/activity", response_model=list[ActivityItem])
def recent_activity(
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin_access),
) -> list[ActivityItem]:
    entries = (
        db.query(ActivityLog)
        .options(joinedload(ActivityLog.actor))
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
    return [
        ActivityItem(
            id=entry.id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            description=entry.description,
            actor=_actor_name(entry.actor),
            created_at=entry.created_at,
            time_ago=format_relative_date(entry.created_at),
        )
        for entry in entries
    ]


@router.get("/{profile_id}", response_model=ProfileOut)
def get_member(
    profile_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_permissions(*READ_PERMISSIONS)),
) -> ProfileOut:
    return ProfileOut.from_orm(_get_profile_or_404(db, profile_id))


@router.patch("/{profile_id}/role", response_model=ProfileOut)
def update_member_role(
    profile_id: int,
    payload: RoleAssignmentRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_permissions(*WRITE_PERMISSIONS)),
) -> ProfileOut:
    target = _get_profile_or_404(db, profile_id)
    actor = db.get(Profile, user.profile.id)
    try:
        assign_role(db, actor, target, payload.role)
    except MemberAuthorityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    db.refresh(target)
    return ProfileOut.from_orm(target)


@router.patch("/{profile_id}/status", response_model=ProfileOut)
def update_status(
    profile_id: int,
    payload: MemberStatusRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_permissions(*WRITE_PERMISSIONS)),
) -> ProfileOut:
    target = _get_profile_or_404(db, profile_id)
    actor = db.get(Profile, user.profile.id)
    try:
        update_member_status(db, actor, target, payload.status)
    except MemberAuthorityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    db.commit()
    db.refresh(target)
    return ProfileOut.from_orm(target)
