from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from sqlalchemy import exists, func
from sqlalchemy.orm import Session

from ccr.auth.security import hash_password
from ccr.core.clock import now_utc
from ccr.core.config import settings
from ccr.models.user import User
from ccr.services.profiles import create_profile, log_activity

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_password_strength(password: str) -> None:
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long.")
    if not re.search(r"[A-Za-z]", password):
        raise ValueError("Password must include at least one letter.")
    if not re.search(r"[0-9]", password):
        raise ValueError("Password must include at least one digit.")


def email_taken(db: Session, email: str) -> bool:
    return bool(db.query(exists().where(func.lower(User.email) == normalize_email(email))).scalar())


def register_user(db: Session, email: str, password: str, metadata: Mapping[str, Any] | None = None) -> User:
    """Create the account and its profile. The caller commits."""

    validate_password_strength(password)
    if email_taken(db, email):
        raise ValueError("An account already exists for this email")

    user = User(
        email=normalize_email(email),
        hashed_password=hash_password(password),
        is_active=True,
        created_at=now_utc(),
        updated_at=now_utc(),
    )
    db.add(user)
    db.flush()
    profile = create_profile(db, user, metadata)
    log_activity(
        db,
        action="user_registered",
        entity_type="profile",
        entity_id=profile.id,
        actor_id=user.id,
    )
    logger.info("user_registered", extra={"user_id": user.id})
    return user
