"""
core/errors.py -- Error taxonomy shared by auth/, store/, and api/.

Every failure a caller can act on is an HTTPError carrying an HTTP-style
status code and a human-readable message. Callers branch on the class or on
status_code, never on message text. api/main.py turns any HTTPError into the
standard ErrorResponse envelope.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or store/.
"""

from __future__ import annotations


class HTTPError(Exception):
    """Base class for failures that map onto an HTTP status class."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.status_code}, {self.message!r})"


class ValidationError(HTTPError):
    """Malformed username, or password/anonymous-status mismatch."""

    status_code = 400
    code = "bad_request"


class AuthorizationError(HTTPError):
    """Raised only by the authorize_* family in auth/channels.py.

    channels lists the denied channel names when the check knows them
    (authorize_all_channels); it is empty for the generic "any of" denials.
    """

    def __init__(self, message: str, channels: list[str] | None = None) -> None:
        super().__init__(message)
        self.channels = list(channels or [])


class AuthenticationRequired(AuthorizationError):
    # The acting identity is the guest; logging in might help.
    status_code = 401
    code = "unauthorized"


class Forbidden(AuthorizationError):
    status_code = 403
    code = "forbidden"


class NotFoundError(HTTPError):
    status_code = 404
    code = "not_found"


class StoreError(HTTPError):
    """Backend failure in the document store. The cause is chained via `from`."""

    status_code = 500
    code = "store_error"
