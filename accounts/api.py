"""FastAPI application exposing the user directory over HTTP."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import DirectoryError
from .models import User, UserStatus
from .service import UserDirectory

logger = logging.getLogger("accounts.api")


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserPostRequest(_Schema):
    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class LoginRequest(_Schema):
    username: str
    password: str


class UserPutRequest(_Schema):
    username: Optional[str] = Field(default=None, max_length=255)
    birthdate: Optional[str] = Field(default=None, max_length=64)
    token: Optional[str] = None


class TokenRequest(_Schema):
    token: Optional[str] = None


class UserResponse(_Schema):
    id: int
    username: str
    email: str
    status: UserStatus
    birthdate: Optional[str]
    registration_date: str
    creation_date: datetime


class UserAuthResponse(UserResponse):
    """User view returned to the account owner right after register/login."""

    token: str


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        status=user.status,
        birthdate=user.birthdate,
        registration_date=user.registration_date,
        creation_date=user.creation_date,
    )


def user_to_auth_response(user: User) -> UserAuthResponse:
    return UserAuthResponse(
        **user_to_response(user).model_dump(),
        token=user.token,
    )


def create_app(*, directory: UserDirectory) -> FastAPI:
    """Create the HTTP application around an existing :class:`UserDirectory`."""

    app = FastAPI(title="Accounts API")
    app.state.directory = directory

    def get_directory(request: Request) -> UserDirectory:
        return request.app.state.directory

    @app.get("/health")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/users", response_model=List[UserResponse])
    def list_users(service: UserDirectory = Depends(get_directory)) -> List[UserResponse]:
        return [user_to_response(user) for user in service.list_users()]

    @app.get("/users/{user_id}", response_model=UserResponse)
    def read_user(user_id: int, service: UserDirectory = Depends(get_directory)) -> UserResponse:
        return user_to_response(service.get_user(user_id))

    @app.post("/users", response_model=UserAuthResponse, status_code=status.HTTP_201_CREATED)
    def create_user(
        payload: UserPostRequest,
        service: UserDirectory = Depends(get_directory),
    ) -> UserAuthResponse:
        user = service.register(payload.username, payload.email, payload.password)
        return user_to_auth_response(user)

    @app.post("/login", response_model=UserAuthResponse)
    def login(payload: LoginRequest, service: UserDirectory = Depends(get_directory)) -> UserAuthResponse:
        user = service.login(payload.username, payload.password)
        return user_to_auth_response(user)

    @app.put("/users/offline/{user_id}", response_model=UserResponse)
    def set_offline(
        user_id: int,
        payload: TokenRequest,
        service: UserDirectory = Depends(get_directory),
    ) -> UserResponse:
        return user_to_response(service.set_offline(user_id, payload.token))

    @app.put("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def update_user(
        user_id: int,
        payload: UserPutRequest,
        service: UserDirectory = Depends(get_directory),
    ) -> Response:
        service.update(user_id, payload.token, username=payload.username, birthdate=payload.birthdate)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.exception_handler(DirectoryError)
    async def handle_directory_error(request: Request, exc: DirectoryError):
        logger.info("%s %s failed with %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    return app


__all__ = [
    "LoginRequest",
    "TokenRequest",
    "UserAuthResponse",
    "UserPostRequest",
    "UserPutRequest",
    "UserResponse",
    "create_app",
    "user_to_auth_response",
    "user_to_response",
]
