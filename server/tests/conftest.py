from __future__ import annotations

import os
from collections.abc import Generator

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ccr.auth.deps import get_current_user
from ccr.auth.security import hash_password
from ccr.core.db import Base, get_db
from ccr.main import app
from ccr.models.profile import Profile
from ccr.models.user import User
from ccr.services.profile_completion import calculate_profile_completion

SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///:memory:"
engine = create_engine(SQLALCHEMY_TEST_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

PASSWORD = "Benediction2024"


def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def authorize(client: TestClient):
    def _apply(user: User):
        app.dependency_overrides[get_current_user] = lambda: user

    yield _apply
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def make_member(db_session: Session):
    def _make(email: str, role: str = "fidele", **fields) -> User:
        user = User(email=email, hashed_password=hash_password(PASSWORD), is_active=True)
        profile = Profile(email=email, role=role, status="Active", **fields)
        profile.profile_completion = calculate_profile_completion(profile)
        user.profile = profile
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def pasteur_principal(make_member) -> User:
    return make_member("principal@ccr.ci", role="pasteur_principal", first_name="Paul", last_name="Kouassi")


@pytest.fixture()
def pasteur_residant(make_member) -> User:
    return make_member("residant@ccr.ci", role="pasteur_residant", first_name="Marc", last_name="Yao")


@pytest.fixture()
def patriarche(make_member) -> User:
    return make_member("patriarche@ccr.ci", role="patriarche", first_name="Abel", last_name="Koné")


@pytest.fixture()
def fidele(make_member) -> User:
    return make_member("fidele@ccr.ci", first_name="Jean", last_name="Dupont")
