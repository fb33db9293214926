"""FastAPI application that serves the user directory."""

from __future__ import annotations

import logging
import os
from typing import Dict, List

from fastapi import Depends, FastAPI, HTTPException, Response, status
from pydantic import BaseModel, Field, field_validator

from .database import Database, resolve_database_path
from .models import User

logger = logging.getLogger("userdir.service")


class UserResponse(BaseModel):
    id: int
    name: str
    email: str


class AddUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be empty")
        return stripped

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        stripped = value.strip().lower()
        if "@" not in stripped:
            raise ValueError("email must contain '@'")
        return stripped


def user_to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email)


def create_app(
    *,
    database: Database | None = None,
    initialize_database: bool = False,
) -> FastAPI:
    """Build the directory API around ``database``.

    When no database is supplied one is opened at ``USERDIR_DB_PATH`` (or the
    default data directory) and initialised.
    """

    if database is None:
        db_path = resolve_database_path(os.getenv("USERDIR_DB_PATH"))
        database = Database(db_path)
        database.initialize()
    elif initialize_database:
        database.initialize()

    app = FastAPI(
        title="User Directory",
        description="Directory of user accounts consumed by the user list console",
        version="1.0.0",
    )
    app.state.database = database

    def get_db() -> Database:
        return database

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/users", response_model=List[UserResponse])
    async def list_users(db: Database = Depends(get_db)) -> List[UserResponse]:
        return [user_to_response(user) for user in db.list_users()]

    @app.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    async def create_user(payload: AddUserRequest, db: Database = Depends(get_db)) -> UserResponse:
        try:
            user = db.create_user(payload.name, payload.email)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        logger.info("Created user #%s <%s>", user.id, user.email)
        return user_to_response(user)

    @app.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user(user_id: int, db: Database = Depends(get_db)) -> Response:
        if not db.delete_user(user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        logger.info("Deleted user #%s", user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["AddUserRequest", "UserResponse", "create_app", "user_to_response"]
