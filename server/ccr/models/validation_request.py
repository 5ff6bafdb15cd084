from __future__ import annotations

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ccr.core.db import Base

ValidationRequestType = Enum(
    "role_change",
    "department_join",
    "tribu_change",
    "profile_validation",
    name="validation_request_type",
)
ValidationRequestStatus = Enum("pending", "approved", "rejected", "cancelled", name="validation_request_status")


class ValidationRequest(Base):
    __tablename__ = "validation_requests"

    id = Column(Integer, primary_key=True)
    requester_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    request_type = Column(ValidationRequestType, nullable=False)
    entity_type = Column(String(64), nullable=True)
    entity_id = Column(Integer, nullable=True)
    current_value = Column(String(120), nullable=True)
    requested_value = Column(String(120), nullable=True)
    reason = Column(String(500), nullable=True)
    status = Column(ValidationRequestStatus, nullable=False, default="pending", index=True)
    validator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    validated_at = Column(DateTime(timezone=True), nullable=True)
    validator_notes = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    requester = relationship("Profile", lazy="joined")
