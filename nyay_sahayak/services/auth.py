"""
Mock Authentication Service
===========================
Builds local users without a real identity provider. The signed-in user is
kept in client storage.
"""
import time
from typing import Optional

from nyay_sahayak.config.constants import CURRENT_USER_STORAGE_KEY, MIN_PASSWORD_LENGTH
from nyay_sahayak.models.progress import User
from nyay_sahayak.storage.client_storage import ClientStorage
from nyay_sahayak.utils.logging import get_logger


class AuthError(Exception):
    """Rejected credentials; the message is shown to the user."""


def _timestamp_id() -> str:
    return str(int(time.time() * 1000))


class AuthService:
    """Mocked login, signup and Google sign-in for one client."""

    def __init__(self, storage: ClientStorage):
        self.storage = storage
        self.logger = get_logger().app_logger

    @staticmethod
    def _check_password(password: str):
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")

    def _sign_in(self, user: User) -> User:
        self.storage.set_json(CURRENT_USER_STORAGE_KEY, user.to_dict())
        self.logger.info(f"User signed in: {user.email} ({user.id})")
        return user

    def login(self, email: str, password: str) -> User:
        self._check_password(password)
        return self._sign_in(User(id=_timestamp_id(), email=email, name='Mock User'))

    def signup(self, name: str, email: str, password: str, confirm_password: str) -> User:
        if password != confirm_password:
            raise AuthError("Passwords do not match.")
        self._check_password(password)
        return self._sign_in(User(id=_timestamp_id(), email=email, name=name or None))

    def login_with_google(self) -> User:
        return self._sign_in(User(
            id=f"google-{_timestamp_id()}",
            email='user@google.com',
            name='Google User'
        ))

    def current_user(self) -> Optional[User]:
        """The signed-in user, or None. A corrupt stored user is cleared."""
        data = self.storage.get_json(CURRENT_USER_STORAGE_KEY)
        if data is None:
            if self.storage.get(CURRENT_USER_STORAGE_KEY) is not None:
                self.storage.remove(CURRENT_USER_STORAGE_KEY)
            return None
        try:
            return User.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            self.logger.warning(f"Discarding invalid stored user: {e}")
            self.storage.remove(CURRENT_USER_STORAGE_KEY)
            return None

    def logout(self) -> None:
        self.storage.remove(CURRENT_USER_STORAGE_KEY)
        self.logger.info("User signed out")
