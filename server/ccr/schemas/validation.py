from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class RoleChangeRequestCreate(BaseModel):
    request_type: Literal["role_change"] = "role_change"
    requested_value: str = Field(..., min_length=1, max_length=64)
    reason: Optional[str] = Field(None, max_length=500)


class ValidationDecision(BaseModel):
    approved: bool
    notes: Optional[str] = Field(None, max_length=500)


class ValidationRequestOut(BaseModel):
    id: int
    requester_id: int
    requester_name: Optional[str] = None
    request_type: str
    current_value: Optional[str] = None
    requested_value: Optional[str] = None
    reason: Optional[str] = None
    status: str
    validator_id: Optional[int] = None
    validated_at: Optional[datetime] = None
    validator_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
