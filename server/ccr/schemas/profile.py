from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, validator

ProfileGenderValue = Literal["Homme", "Femme"]
ProfileMaritalStatusValue = Literal["Célibataire", "Marié(e)", "Veuf(ve)", "Divorcé(e)"]
MemberStatusValue = Literal["Active", "Pending", "Suspended"]
ProfileStatusValue = Literal["Pending", "Active", "Suspended", "Deleted"]
DATE_OF_BIRTH_FORMAT = "%Y-%m-%d"


class ProfileOut(BaseModel):
    id: int
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    photo_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    marital_status: Optional[str] = None
    profession: Optional[str] = None
    employer: Optional[str] = None
    date_joined: Optional[date] = None
    is_baptized: bool = False
    baptism_date: Optional[date] = None
    role: str
    status: str
    profile_completion: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccountProfileResponse(ProfileOut):
    full_name: str = ""
    initials: str = ""
    role_display_name: Optional[str] = None
    missing_fields: list[str] = []


class ProfileUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(None, max_length=120)
    last_name: Optional[str] = Field(None, max_length=120)
    gender: Optional[ProfileGenderValue] = None
    date_of_birth: Optional[str] = None
    photo_url: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=25)
    whatsapp: Optional[str] = Field(None, max_length=25)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=120)
    neighborhood: Optional[str] = Field(None, max_length=120)
    marital_status: Optional[ProfileMaritalStatusValue] = None
    profession: Optional[str] = Field(None, max_length=120)
    employer: Optional[str] = Field(None, max_length=120)
    is_baptized: Optional[bool] = None
    baptism_date: Optional[date] = None

    @validator("date_of_birth")
    def validate_date_of_birth(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return value
        try:
            parsed = datetime.strptime(value, DATE_OF_BIRTH_FORMAT).date()
        except ValueError as exc:
            raise ValueError("Date of birth must use the YYYY-MM-DD format") from exc
        if parsed > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return value


class MemberListResponse(BaseModel):
    items: list[ProfileOut]
    total: int
    page: int
    page_size: int


class RoleAssignmentRequest(BaseModel):
    role: str = Field(..., min_length=1, max_length=64)


class MemberStatusRequest(BaseModel):
    status: MemberStatusValue
