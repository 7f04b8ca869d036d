from __future__ import annotations

from typing import Generator

from fastapi import Header, HTTPException, status

from backend.app.db.models.core_types import Role
from backend.app.db.session import SessionLocal
from backend.services.auth import Actor


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_actor(
    x_user_name: str | None = Header(default=None, alias="X-User-Name"),
    x_user_role: str | None = Header(default=None, alias="X-User-Role"),
) -> Actor:
    """Identity comes from the authentication proxy in front of the API."""
    if not x_user_name or not x_user_name.strip() or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Name / X-User-Role headers",
        )
    try:
        role = Role(x_user_role.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role {x_user_role!r}",
        )
    return Actor(name=x_user_name.strip(), role=role)
