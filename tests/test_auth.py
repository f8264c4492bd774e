"""
Unit Tests for Mock Authentication
==================================
"""
import pytest
import sys
import os

os.environ.setdefault('VERBOSE_DEBUG', 'false')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nyay_sahayak.config.constants import CURRENT_USER_STORAGE_KEY
from nyay_sahayak.services.auth import AuthService, AuthError
from nyay_sahayak.storage.connection import Database
from nyay_sahayak.storage.client_storage import ClientStorage


@pytest.fixture
def storage(tmp_path):
    db = Database(tmp_path / 'auth.db')
    yield ClientStorage('client-a', db)
    db.close()


@pytest.fixture
def auth(storage):
    return AuthService(storage)


class TestAuthService:
    """Test mocked login, signup and logout."""

    def test_login(self, auth):
        user = auth.login('asha@example.com', 'secret1')

        assert user.email == 'asha@example.com'
        assert user.name == 'Mock User'
        assert user.id.isdigit()
        assert auth.current_user() == user

    def test_login_short_password(self, auth):
        with pytest.raises(AuthError) as exc_info:
            auth.login('asha@example.com', '123')
        assert 'at least 6 characters' in str(exc_info.value)
        assert auth.current_user() is None

    def test_signup(self, auth):
        user = auth.signup('Asha', 'asha@example.com', 'secret1', 'secret1')
        assert user.name == 'Asha'
        assert auth.current_user().name == 'Asha'

    def test_signup_mismatch_checked_first(self, auth):
        with pytest.raises(AuthError) as exc_info:
            auth.signup('Asha', 'asha@example.com', '123', '456')
        assert str(exc_info.value) == "Passwords do not match."

    def test_signup_short_password(self, auth):
        with pytest.raises(AuthError) as exc_info:
            auth.signup('Asha', 'asha@example.com', '123', '123')
        assert str(exc_info.value) == "Password must be at least 6 characters long."

    def test_google_login(self, auth):
        user = auth.login_with_google()
        assert user.id.startswith('google-')
        assert user.email == 'user@google.com'
        assert user.name == 'Google User'

    def test_logout(self, auth):
        auth.login('asha@example.com', 'secret1')
        auth.logout()
        assert auth.current_user() is None

    def test_user_persists_across_services(self, auth, storage):
        auth.login('asha@example.com', 'secret1')
        assert AuthService(storage).current_user().email == 'asha@example.com'

    def test_malformed_user_is_cleared(self, auth, storage):
        storage.set(CURRENT_USER_STORAGE_KEY, '{broken')
        assert auth.current_user() is None
        assert storage.get(CURRENT_USER_STORAGE_KEY) is None

    def test_incomplete_user_is_cleared(self, auth, storage):
        storage.set_json(CURRENT_USER_STORAGE_KEY, {'name': 'No id'})
        assert auth.current_user() is None
        assert storage.get(CURRENT_USER_STORAGE_KEY) is None
