"""
api/routes/v1/access.py -- Identity and channel access endpoints (public app).

Routes:
  GET  /api/v1/me         -- the identity the request resolves to
  POST /api/v1/authorize  -- check channels or a document's channel map

Request routing and replication fan-out call /authorize per request or per
document. 204 means allowed; a denial is the standard error envelope with
401 (guest: log in first) or 403 (named user lacks the channel).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response

from api.models import AuthorizeRequest, CheckMode, MeResponse
from auth.channels import authorize_all_channels, authorize_any_channels, authorize_any_doc_channels
from auth.dependencies import get_current_user
from auth.models import WILDCARD, User

router = APIRouter()


@router.get("/me", response_model=MeResponse)
def me(current_user: Optional[User] = Depends(get_current_user)) -> MeResponse:
    """Return the resolved identity and its channels."""
    if current_user is None:
        return MeResponse(name=None, channels=[WILDCARD], access_control=False)
    return MeResponse(name=current_user.name, channels=list(current_user.channels))


@router.post("/authorize", status_code=204)
def authorize(body: AuthorizeRequest, current_user: Optional[User] = Depends(get_current_user)) -> Response:
    """Raise the auth layer's AuthorizationError on denial; 204 otherwise."""
    if current_user is None:
        # Access control disabled: everything is allowed, and the "any" check
        # must not be asked about an absent user.
        return Response(status_code=204)
    if body.doc_channels is not None:
        authorize_any_doc_channels(current_user, body.doc_channels)
    elif body.mode is CheckMode.any:
        authorize_any_channels(current_user, body.channels)
    else:
        authorize_all_channels(current_user, body.channels)
    return Response(status_code=204)
