"""
Identity gateway: resolves who is calling, once, and exposes the settled result.

Until initialize() completes the identity is *unknown* (loading=True), which is
different from *absent* (loading=False, current_user=None). Route decisions
must never treat the former as the latter.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from fastapi import HTTPException
from toolhub.modules.auth.service import AuthService
from toolhub.modules.users.schemas import UserProfile
from toolhub.modules.users.service import UserService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentitySnapshot:
    loading: bool
    current_user: Optional[UserProfile]
    is_mfa_enabled: bool


class IdentityGateway:
    def __init__(self, auth_service: AuthService, user_service: UserService):
        self.auth_service = auth_service
        self.user_service = user_service
        self.current_user: Optional[UserProfile] = None
        self.loading = True
        self.is_mfa_enabled = False
        self._listeners: List[Callable[[IdentitySnapshot], None]] = []

    def snapshot(self) -> IdentitySnapshot:
        return IdentitySnapshot(
            loading=self.loading,
            current_user=self.current_user,
            is_mfa_enabled=self.is_mfa_enabled,
        )

    def subscribe(self, listener: Callable[[IdentitySnapshot], None]) -> Callable[[], None]:
        """Register a listener called with the settled snapshot. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> IdentitySnapshot:
        settled = self.snapshot()
        for listener in list(self._listeners):
            listener(settled)
        return settled

    def initialize(self, token: Optional[str]) -> IdentitySnapshot:
        """Perform the single session lookup. A failed lookup means no session; there is no retry."""
        if not self.loading:
            return self.snapshot()
        return self._resolve(token)

    def sign_in(self, token: str) -> IdentitySnapshot:
        """A new session was established (login, MFA upgrade): resolve it and notify listeners."""
        return self._resolve(token)

    def sign_out(self) -> IdentitySnapshot:
        """The session ended. Identity becomes absent (not unknown) and listeners are told."""
        self.current_user = None
        self.is_mfa_enabled = False
        self.loading = False
        return self._notify()

    def _resolve(self, token: Optional[str]) -> IdentitySnapshot:
        self.current_user = None
        self.is_mfa_enabled = False
        try:
            if token:
                user_data = self.auth_service.get_current_user(token)
                profile = self.user_service.find_user_by_id(user_data["id"])
                if profile is None:
                    # Auth session is valid but the profile row is missing
                    logger.warning(f"Profile not found for auth user {user_data['id']}")
                self.current_user = profile
                self.is_mfa_enabled = bool(user_data.get("is_mfa_enabled")) if profile else False
        except HTTPException as e:
            logger.info(f"Session lookup rejected: {e.detail}")
            self.current_user = None
            self.is_mfa_enabled = False
        except Exception as e:
            logger.error(f"Session lookup failed: {e}")
            self.current_user = None
            self.is_mfa_enabled = False
        finally:
            self.loading = False
        return self._notify()
