from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ccr.core.db import Base

ProfileGender = Enum("Homme", "Femme", name="profile_gender")
ProfileMaritalStatus = Enum(
    "Célibataire",
    "Marié(e)",
    "Veuf(ve)",
    "Divorcé(e)",
    name="profile_marital_status",
)
ProfileStatus = Enum("Pending", "Active", "Suspended", "Deleted", name="profile_status")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    gender = Column(ProfileGender, nullable=True)
    date_of_birth = Column(String(10), nullable=True)
    photo_url = Column(String(500), nullable=True)

    email = Column(String(255), nullable=True)
    phone = Column(String(25), nullable=True)
    whatsapp = Column(String(25), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    neighborhood = Column(String(120), nullable=True)

    marital_status = Column(ProfileMaritalStatus, nullable=True)
    profession = Column(String(120), nullable=True)
    employer = Column(String(120), nullable=True)

    date_joined = Column(Date, nullable=True)
    is_baptized = Column(Boolean, default=False, nullable=False)
    baptism_date = Column(Date, nullable=True)

    role = Column(String(64), nullable=False, default="fidele")
    is_admin = Column(Boolean, default=False, nullable=False)
    status = Column(ProfileStatus, nullable=False, default="Active")
    profile_completion = Column(Integer, nullable=False, default=0)

    consent_data_processing = Column(Boolean, default=False, nullable=False)
    consent_communications = Column(Boolean, default=False, nullable=False)
    consent_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="profile")
