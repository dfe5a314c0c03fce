"""Unit tests for auth/channels.py -- channel authorization decisions.

Covers:
- absent user (access control disabled) allows everything
- wildcard as requested channel and as entitlement
- all-of / any-of predicates, including the wildcard fallback for any-of
- authorize_* error flavor: 401 for the guest, 403 for named users
- authorize_any_doc_channels() current vs historical membership
"""

from __future__ import annotations

import pytest

from auth.channels import (
    authorize_all_channels,
    authorize_any_channels,
    authorize_any_doc_channels,
    can_see_all_channels,
    can_see_any_channels,
    can_see_channel,
    unauthorized_error,
)
from auth.models import User
from core.errors import AuthenticationRequired, Forbidden


def _user(*channels: str, name: str = "bob") -> User:
    return User(name=name, channels=list(channels), credential=None if name == "" else "hash")


# ---------------------------------------------------------------------------
# can_see_channel
# ---------------------------------------------------------------------------


class TestCanSeeChannel:
    @pytest.mark.parametrize("channel", ["secret", "", "*", "anything_at_all"])
    def test_absent_user_sees_everything(self, channel: str) -> None:
        assert can_see_channel(None, channel)

    def test_listed_channel(self) -> None:
        assert can_see_channel(_user("a", "b"), "a")

    def test_unlisted_channel(self) -> None:
        assert not can_see_channel(_user("a", "b"), "z")

    def test_wildcard_entitlement(self) -> None:
        assert can_see_channel(_user("a", "*"), "z")

    def test_wildcard_request_always_allowed(self) -> None:
        assert can_see_channel(_user(), "*")

    def test_no_channels(self) -> None:
        assert not can_see_channel(_user(), "a")


# ---------------------------------------------------------------------------
# can_see_all_channels / can_see_any_channels
# ---------------------------------------------------------------------------


class TestCanSeeAllChannels:
    def test_all_listed(self) -> None:
        assert can_see_all_channels(_user("a", "b"), ["a", "b"])

    def test_one_missing(self) -> None:
        assert not can_see_all_channels(_user("a"), ["a", "b"])

    @pytest.mark.parametrize("channels", [None, []])
    def test_empty_request_allowed(self, channels) -> None:
        assert can_see_all_channels(_user(), channels)

    def test_absent_user(self) -> None:
        assert can_see_all_channels(None, ["x", "y"])


class TestCanSeeAnyChannels:
    def test_one_listed(self) -> None:
        assert can_see_any_channels(_user("b"), ["a", "b"])

    def test_none_listed(self) -> None:
        assert not can_see_any_channels(_user("c"), ["a", "b"])

    def test_wildcard_fallback_for_unlisted(self) -> None:
        assert can_see_any_channels(_user("*"), ["z"])

    @pytest.mark.parametrize("channels", [None, []])
    def test_empty_request_needs_wildcard(self, channels) -> None:
        assert can_see_any_channels(_user("*"), channels)
        assert not can_see_any_channels(_user("a"), channels)

    def test_absent_user_with_channels(self) -> None:
        assert can_see_any_channels(None, ["x"])

    def test_absent_user_without_channels_must_be_guarded(self) -> None:
        with pytest.raises(TypeError):
            can_see_any_channels(None, [])


# ---------------------------------------------------------------------------
# authorize_*
# ---------------------------------------------------------------------------


class TestUnauthorizedError:
    def test_guest_gets_authentication_required(self) -> None:
        err = unauthorized_error(_user(name=""), "nope")
        assert isinstance(err, AuthenticationRequired)
        assert err.status_code == 401
        assert err.message == "login required"

    def test_named_user_gets_forbidden(self) -> None:
        err = unauthorized_error(_user(), "nope")
        assert isinstance(err, Forbidden)
        assert err.status_code == 403
        assert err.message == "nope"


class TestAuthorizeAllChannels:
    def test_names_forbidden_channels_in_order(self) -> None:
        with pytest.raises(Forbidden) as exc_info:
            authorize_all_channels(_user("a"), ["a", "b", "c"])
        assert exc_info.value.channels == ["b", "c"]
        assert "'b'" in exc_info.value.message and "'c'" in exc_info.value.message

    def test_allowed(self) -> None:
        authorize_all_channels(_user("a", "b"), ["b", "a"])

    def test_guest_denied_with_401(self) -> None:
        with pytest.raises(AuthenticationRequired):
            authorize_all_channels(_user("public", name=""), ["private"])

    def test_absent_user_allowed(self) -> None:
        authorize_all_channels(None, ["a", "b"])

    def test_empty_request_allowed(self) -> None:
        authorize_all_channels(_user(), [])


class TestAuthorizeAnyChannels:
    def test_allowed(self) -> None:
        authorize_any_channels(_user("x"), ["w", "x"])

    def test_denied_generic_message(self) -> None:
        with pytest.raises(Forbidden) as exc_info:
            authorize_any_channels(_user("x"), ["y"])
        assert exc_info.value.message == "You are not allowed to see this"
        assert exc_info.value.channels == []

    def test_wildcard_allows_empty_request(self) -> None:
        authorize_any_channels(_user("*"), [])

    def test_guest_denied_with_401(self) -> None:
        with pytest.raises(AuthenticationRequired):
            authorize_any_channels(_user(name=""), ["y"])


class TestAuthorizeAnyDocChannels:
    DOC = {"x": None, "y": "removed-at-rev-3"}

    def test_current_membership(self) -> None:
        authorize_any_doc_channels(_user("x"), self.DOC)

    def test_historical_membership_denied(self) -> None:
        with pytest.raises(Forbidden):
            authorize_any_doc_channels(_user("y"), self.DOC)

    def test_empty_marker_is_current(self) -> None:
        authorize_any_doc_channels(_user("z"), {"z": ""})

    def test_wildcard_entitlement(self) -> None:
        authorize_any_doc_channels(_user("nope", "*"), {})

    def test_unlisted_channel_denied(self) -> None:
        with pytest.raises(Forbidden):
            authorize_any_doc_channels(_user("q"), self.DOC)

    def test_no_channels_always_denied(self) -> None:
        with pytest.raises(Forbidden):
            authorize_any_doc_channels(_user(), {"*": None})

    def test_absent_user_allowed(self) -> None:
        authorize_any_doc_channels(None, {})

    def test_guest_denied_with_401(self) -> None:
        with pytest.raises(AuthenticationRequired):
            authorize_any_doc_channels(_user("y", name=""), self.DOC)
