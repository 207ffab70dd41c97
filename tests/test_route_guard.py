import itertools

import pytest

from toolhub.config.permissions_config import Role
from toolhub.core.route_guard import (
    GuardOutcome, GuardState, LOGIN_PATH, PROFILE_PATH, evaluate_route, is_profile_path, resolve_state
)
from toolhub.modules.auth.identity import IdentitySnapshot
from toolhub.modules.users.schemas import UserProfile

USER = UserProfile(id="u1", email="u1@example.com", name="User One", role=Role.OWNER)
PATHS = [
    "/dashboard", "/tools", "/profile", "/profile/security", "/profile/", "/", "/profiles",
    "/profile/../dashboard",
]


def snapshot(loading, user, mfa):
    return IdentitySnapshot(loading=loading, current_user=user, is_mfa_enabled=mfa)


@pytest.mark.parametrize(
    "loading,user,mfa,path",
    list(itertools.product([True, False], [None, USER], [True, False], PATHS)),
)
def test_every_combination_has_exactly_one_outcome(loading, user, mfa, path):
    decision = evaluate_route(snapshot(loading, user, mfa), path)

    if loading:
        expected = GuardOutcome.SPINNER
    elif user is None:
        expected = GuardOutcome.REDIRECT_LOGIN
    elif not mfa and path != PROFILE_PATH:
        expected = GuardOutcome.REDIRECT_PROFILE
    else:
        expected = GuardOutcome.RENDER

    assert decision.outcome is expected
    if path == PROFILE_PATH:
        assert decision.outcome is not GuardOutcome.REDIRECT_PROFILE


def test_loading_never_redirects_even_without_user():
    decision = evaluate_route(snapshot(True, None, False), "/dashboard")
    assert decision.state is GuardState.LOADING
    assert decision.outcome is GuardOutcome.SPINNER
    assert decision.location is None


def test_login_redirect_carries_requested_location():
    decision = evaluate_route(snapshot(False, None, False), "/tools/42")
    assert decision.location == LOGIN_PATH
    assert decision.navigation_state == {"from": "/tools/42"}


def test_profile_redirect_carries_mfa_flag():
    decision = evaluate_route(snapshot(False, USER, False), "/requests")
    assert decision.state is GuardState.AUTHENTICATED_MFA_PENDING
    assert decision.location == PROFILE_PATH
    assert decision.navigation_state == {"mfa_required": True}


def test_profile_page_renders_while_mfa_pending():
    decision = evaluate_route(snapshot(False, USER, False), "/profile")
    assert decision.outcome is GuardOutcome.RENDER


def test_resolve_state_for_enrolled_user():
    assert resolve_state(snapshot(False, USER, True)) is GuardState.AUTHENTICATED_MFA_OK


@pytest.mark.parametrize("path,expected", [
    ("/profile", True),
    ("/profile/", False),
    ("/profile/password", False),
    ("/profile/../dashboard", False),
    ("/profiles", False),
    ("/dashboard", False),
])
def test_is_profile_path(path, expected):
    assert is_profile_path(path) is expected


@pytest.mark.parametrize("path", ["/profile/anything", "/profile/", "/profile/../dashboard"])
def test_paths_beneath_profile_still_redirect_while_mfa_pending(path):
    decision = evaluate_route(snapshot(False, USER, False), path)
    assert decision.outcome is GuardOutcome.REDIRECT_PROFILE
    assert decision.navigation_state == {"mfa_required": True}
