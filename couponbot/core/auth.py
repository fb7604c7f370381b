import logging
import secrets
from typing import Callable, List, Set

from couponbot.core.config import ADMIN_EMAIL, ADMIN_PASSWORD
from couponbot.core.errors import AuthenticationError
from couponbot.core.i18n import translate

logger = logging.getLogger(__name__)


class AuthService:
    """Signs in the single configured administrator, per chat user."""

    def __init__(self, admin_email: str, admin_password: str):
        self.admin_email = (admin_email or "").strip().lower()
        self.admin_password = admin_password or ""
        self.signed_in: Set[int] = set()
        self.listeners: List[Callable[[int, bool], None]] = []

    def _emit(self, user_id: int, signed_in: bool):
        for listener in list(self.listeners):
            try:
                listener(user_id, signed_in)
            except Exception as e:
                logger.warning(f"Auth listener failed: {e}")

    def sign_in(self, user_id: int, email: str, password: str):
        if not self.admin_email or not self.admin_password:
            raise AuthenticationError(translate("auth.not_configured"))
        if (email or "").strip().lower() != self.admin_email:
            raise AuthenticationError(translate("auth.wrong_email"))
        if not secrets.compare_digest((password or "").encode(), self.admin_password.encode()):
            logger.warning(f"Wrong admin password from user {user_id}")
            raise AuthenticationError(translate("auth.wrong_password"))

        if user_id not in self.signed_in:
            self.signed_in.add(user_id)
            logger.info(f"Admin signed in: {user_id}")
            self._emit(user_id, True)

    def sign_out(self, user_id: int):
        if user_id in self.signed_in:
            self.signed_in.discard(user_id)
            logger.info(f"Admin signed out: {user_id}")
            self._emit(user_id, False)

    def sign_out_all(self):
        for user_id in list(self.signed_in):
            self.sign_out(user_id)

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.signed_in

    def on_auth_state_change(self, listener: Callable[[int, bool], None]) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe():
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe


auth_service = AuthService(ADMIN_EMAIL, ADMIN_PASSWORD)
