"""
Route guard: decides whether a navigation is rendered, held on a spinner, or redirected.

States:
    LOADING                    -> SPINNER (no decision yet)
    UNAUTHENTICATED            -> REDIRECT_LOGIN, carrying the requested location
    AUTHENTICATED_MFA_PENDING  -> REDIRECT_PROFILE with mfa_required, unless the path is exactly the profile page
    AUTHENTICATED_MFA_OK       -> RENDER
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from toolhub.modules.auth.identity import IdentitySnapshot

LOGIN_PATH = "/login"
PROFILE_PATH = "/profile"


class GuardState(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_MFA_PENDING = "authenticated_mfa_pending"
    AUTHENTICATED_MFA_OK = "authenticated_mfa_ok"


class GuardOutcome(str, Enum):
    SPINNER = "spinner"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_PROFILE = "redirect_profile"
    RENDER = "render"


@dataclass(frozen=True)
class RouteDecision:
    state: GuardState
    outcome: GuardOutcome
    location: Optional[str] = None
    navigation_state: Dict[str, Any] = field(default_factory=dict)


def is_profile_path(path: str) -> bool:
    """Only the exact profile page stays reachable while MFA is pending."""
    return path == PROFILE_PATH


def resolve_state(snapshot: IdentitySnapshot) -> GuardState:
    if snapshot.loading:
        return GuardState.LOADING
    if snapshot.current_user is None:
        return GuardState.UNAUTHENTICATED
    if not snapshot.is_mfa_enabled:
        return GuardState.AUTHENTICATED_MFA_PENDING
    return GuardState.AUTHENTICATED_MFA_OK


def evaluate_route(snapshot: IdentitySnapshot, path: str) -> RouteDecision:
    state = resolve_state(snapshot)
    if state is GuardState.LOADING:
        return RouteDecision(state, GuardOutcome.SPINNER)
    if state is GuardState.UNAUTHENTICATED:
        return RouteDecision(
            state,
            GuardOutcome.REDIRECT_LOGIN,
            location=LOGIN_PATH,
            navigation_state={"from": path},
        )
    if state is GuardState.AUTHENTICATED_MFA_PENDING:
        if is_profile_path(path):
            return RouteDecision(state, GuardOutcome.RENDER)
        return RouteDecision(
            state,
            GuardOutcome.REDIRECT_PROFILE,
            location=PROFILE_PATH,
            navigation_state={"mfa_required": True},
        )
    if state is GuardState.AUTHENTICATED_MFA_OK:
        return RouteDecision(state, GuardOutcome.RENDER)
    raise ValueError(f"Unhandled guard state: {state}")
