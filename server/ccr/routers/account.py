from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ccr.auth.deps import get_current_user
from ccr.core.db import get_db
from ccr.core.roles import resolve_role
from ccr.models.profile import Profile
from ccr.models.user import User
from ccr.schemas.profile import AccountProfileResponse, ProfileUpdateRequest
from ccr.services.formatting import full_name, initials
from ccr.services.profile_completion import missing_fields
from ccr.services.profiles import update_profile

router = APIRouter(prefix="/account", tags=["account"])


def _serialize_account_profile(profile: Profile) -> AccountProfileResponse:
    base = AccountProfileResponse.from_orm(profile)
    role = resolve_role(profile.role)
    return base.model_copy(
        update={
            "full_name": full_name(profile.first_name, profile.last_name),
            "initials": initials(profile.first_name, profile.last_name),
            "role_display_name": role.display_name if role else None,
            "missing_fields": missing_fields(profile),
        }
    )


def _profile_or_404(user: User) -> Profile:
    if user.profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return user.profile


@router.get("/me", response_model=AccountProfileResponse)
def get_my_account(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> AccountProfileResponse:
    profile = db.get(Profile, _profile_or_404(user).id)
    return _serialize_account_profile(profile)


@router.patch("/me/profile", response_model=AccountProfileResponse)
def update_my_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AccountProfileResponse:
    profile = db.get(Profile, _profile_or_404(user).id)
    try:
        changed = update_profile(db, profile, payload.model_dump(exclude_unset=True), actor_id=user.id)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if changed:
        db.commit()
        db.refresh(profile)
    return _serialize_account_profile(profile)
