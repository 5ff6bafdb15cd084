import logging

import ccr.models
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ccr.core.config import settings
from ccr.core.db import Base, engine
from ccr.routers import account as account_router
from ccr.routers import auth as auth_router
from ccr.routers import members as members_router
from ccr.routers import roles as roles_router
from ccr.routers import validations as validations_router
from ccr.routers import whoami as whoami_router

app = FastAPI(title="CCR API", version="0.1.0")

logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(whoami_router.router)
app.include_router(roles_router.router)
app.include_router(account_router.router)
app.include_router(members_router.router)
app.include_router(validations_router.router)


@app.on_event("startup")
def ensure_tables() -> None:
    """Create missing tables. Test runs manage their own schema."""

    if settings.ENVIRONMENT == "test":
        return
    Base.metadata.create_all(bind=engine)
    logger.info("tables_ensured", extra={"dialect": engine.dialect.name})


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok"}
