from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ccr.auth.deps import get_current_user, require_approver
from ccr.core.db import get_db
from ccr.models.profile import Profile
from ccr.models.user import User
from ccr.models.validation_request import ValidationRequest
from ccr.schemas.validation import RoleChangeRequestCreate, ValidationDecision, ValidationRequestOut
from ccr.services.formatting import full_name
from ccr.services.profiles import MemberAuthorityError
from ccr.services.validations import (
    ValidationConflictError,
    create_role_change_request,
    pending_requests_for,
    process_validation,
)

router = APIRouter(prefix="/validations", tags=["validations"])


def _serialize(request: ValidationRequest) -> ValidationRequestOut:
    base = ValidationRequestOut.from_orm(request)
    requester = request.requester
    name = full_name(requester.first_name, requester.last_name) if requester else ""
    return base.model_copy(update={"requester_name": name or None})


def _actor_profile(db: Session, user: User) -> Profile:
    if user.profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return db.get(Profile, user.profile.id)


def _get_request_or_404(db: Session, request_id: int) -> ValidationRequest:
    request = db.get(ValidationRequest, request_id)
    if not request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Validation request not found")
    return request


@router.post("", response_model=ValidationRequestOut, status_code=status.HTTP_201_CREATED)
def request_role_change(
    payload: RoleChangeRequestCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ValidationRequestOut:
    requester = _actor_profile(db, user)
    try:
        request = create_role_change_request(db, requester, payload.requested_value, payload.reason)
    except ValidationConflictError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    db.refresh(request)
    return _serialize(request)


@router.get("/pending", response_model=list[ValidationRequestOut])
def list_pending(
    db: Session = Depends(get_db),
    user: User = Depends(require_approver),
) -> list[ValidationRequestOut]:
    actor = _actor_profile(db, user)
    return [_serialize(request) for request in pending_requests_for(db, actor)]


@router.post("/{request_id}/decision", response_model=ValidationRequestOut)
def decide(
    request_id: int,
    payload: ValidationDecision,
    db: Session = Depends(get_db),
    user: User = Depends(require_approver),
) -> ValidationRequestOut:
    request = _get_request_or_404(db, request_id)
    actor = _actor_profile(db, user)
    try:
        process_validation(db, actor, request, payload.approved, payload.notes)
    except ValidationConflictError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except MemberAuthorityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    db.refresh(request)
    return _serialize(request)
