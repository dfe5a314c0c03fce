"""
api/routes/v1/users.py -- User management REST endpoints (admin app only).

Routes:
  GET    /api/v1/users          -- list persisted user names
  GET    /api/v1/users/{name}   -- user record (name + channels)
  PUT    /api/v1/users/{name}   -- create or replace a user
  DELETE /api/v1/users/{name}   -- delete a user; 404 if missing
  GET    /api/v1/guest          -- the guest record (or the all-access default)
  PUT    /api/v1/guest          -- replace the guest's channel list

The guest's name is "", which cannot be a path segment, hence /guest.

Auth policy: none at the HTTP layer. This router is mounted only on
admin_app (api/main.py), which must be bound to a private interface.

Errors from auth/ (ValidationError, NotFoundError, StoreError) propagate to
the HTTPError handler in api/main.py unchanged.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from api.models import UserPut, UserResponse
from auth.authenticator import Authenticator
from auth.models import User
from core.errors import NotFoundError

router = APIRouter()


def _authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def _put_user(authenticator: Authenticator, name: str, body: UserPut) -> User:
    """Create or replace a user, keeping the existing credential when no password is sent."""
    try:
        user = authenticator.get_user(name)
    except NotFoundError:
        user = User(name=name)
    user.channels = list(body.channels)
    user.password = body.password
    authenticator.save_user(user)
    return user


@router.get("/users", response_model=list[str])
def list_users(request: Request) -> list[str]:
    """Return the names of all persisted users."""
    return _authenticator(request).list_users()


@router.get("/users/{name}", response_model=UserResponse)
def get_user(request: Request, name: str) -> UserResponse:
    return UserResponse.from_user(_authenticator(request).get_user(name))


@router.put("/users/{name}", response_model=UserResponse)
def put_user(request: Request, name: str, body: UserPut) -> UserResponse:
    """Create or replace a user.

    A new user needs a non-empty password; the 400 comes from
    validate_user() in the auth layer, not from request validation.
    """
    user = _put_user(_authenticator(request), name, body)
    return UserResponse.from_user(user)


@router.delete("/users/{name}", status_code=204)
def delete_user(request: Request, name: str) -> Response:
    _authenticator(request).delete_user(name)
    return Response(status_code=204)


@router.get("/guest", response_model=UserResponse)
def get_guest(request: Request) -> UserResponse:
    return UserResponse.from_user(_authenticator(request).get_user(""))


@router.put("/guest", response_model=UserResponse)
def put_guest(request: Request, body: UserPut) -> UserResponse:
    """Replace the guest record. Once saved, it overrides the all-access default."""
    user = _put_user(_authenticator(request), "", body)
    return UserResponse.from_user(user)
