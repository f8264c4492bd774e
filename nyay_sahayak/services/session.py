"""
Session Context
===============
Per-client state: display language, translation cache and the services that
read them. Created when a client session starts and discarded when it ends.
"""
import threading
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from nyay_sahayak.config import config
from nyay_sahayak.config.constants import LANGUAGE_STORAGE_KEY, SUPPORTED_LANGUAGES
from nyay_sahayak.models.schemas import Language
from nyay_sahayak.services.auth import AuthService
from nyay_sahayak.services.chat import ChatConversation
from nyay_sahayak.services.documents import DocumentAnalysis
from nyay_sahayak.services.progress import ProgressService
from nyay_sahayak.services.translation_cache import TranslationCache
from nyay_sahayak.services.translator import TranslationDispatcher
from nyay_sahayak.storage.client_storage import ClientStorage
from nyay_sahayak.utils.logging import get_logger
from nyay_sahayak.utils.validators import validate_language


ENGLISH = Language(code='en', name='English')


def display_languages(bhashini) -> List[Language]:
    """Languages offered by Bhashini with English first; English only on failure."""
    languages = bhashini.supported_languages() if bhashini is not None else []
    english = next(
        (lang for lang in languages if lang.code == 'en' or lang.name.lower() == 'english'),
        ENGLISH
    )
    return [english] + [lang for lang in languages if lang.code and lang.code != english.code]


class SessionContext:
    """State owned by one client session."""

    def __init__(
        self,
        session_id: str,
        gemini,
        bhashini=None,
        storage: ClientStorage = None,
        client_id: str = None
    ):
        self.session_id = session_id
        self.client_id = client_id or session_id
        self.created_at = datetime.now()
        self.gemini = gemini
        self.bhashini = bhashini
        self.storage = storage or ClientStorage(self.client_id)
        self.logger = get_logger().app_logger

        self.display_language = (
            self.storage.get(LANGUAGE_STORAGE_KEY) or config.chat.default_display_language
        )
        self._languages: Optional[List[Language]] = None

        self.cache = TranslationCache()
        self.dispatcher = TranslationDispatcher(
            translator=gemini,
            cache=self.cache,
            current_language=lambda: self.display_language
        )
        self.chat = ChatConversation(
            gemini,
            self.dispatcher,
            bhashini=bhashini,
            current_language=lambda: self.display_language
        )
        self.documents = DocumentAnalysis(gemini)
        self.auth = AuthService(self.storage)
        self.progress = ProgressService(self.storage)

    def translate(self, text: str, target_language: str = None, source_language: str = None) -> str:
        return self.dispatcher.translate(text, target_language, source_language)

    def available_languages(self) -> List[Language]:
        """
        Languages offered for display, English first.

        Fetched from Bhashini once per session; English only when the
        service is unavailable.
        """
        if self._languages is not None:
            return self._languages

        ordered = display_languages(self.bhashini)
        # English alone means the service failed; do not remember it
        if len(ordered) > 1:
            self._languages = ordered
        return ordered

    def set_display_language(self, code: str) -> str:
        """
        Switch the display language and persist it.

        Cached translations for other languages are kept.

        Raises:
            ValueError: malformed or unsupported language code
        """
        valid, error = validate_language(code)
        if not valid:
            raise ValueError(error)

        known = {lang.code for lang in self.available_languages()} | set(SUPPORTED_LANGUAGES)
        if code not in known:
            raise ValueError(f"Unsupported language: {code}")

        previous = self.display_language
        self.display_language = code
        self.storage.set(LANGUAGE_STORAGE_KEY, code)
        if code != previous:
            self.chat.refresh_greeting()
            self.logger.info(f"Session {self.session_id}: display language {previous} -> {code}")
        return code

    def to_dict(self) -> dict:
        return {
            'session_id': self.session_id,
            'client_id': self.client_id,
            'display_language': self.display_language,
            'created_at': self.created_at.isoformat(),
        }


class SessionRegistry:
    """Live sessions by id."""

    def __init__(self, gemini=None, bhashini=None):
        self._gemini = gemini
        self._bhashini = bhashini
        self._sessions: Dict[str, SessionContext] = {}
        self._lock = threading.Lock()
        self.logger = get_logger().app_logger

    @property
    def gemini(self):
        if self._gemini is None:
            from nyay_sahayak.services.gemini_client import get_gemini_client
            self._gemini = get_gemini_client()
        return self._gemini

    @property
    def bhashini(self):
        if self._bhashini is None:
            from nyay_sahayak.services.bhashini_client import get_bhashini_client
            self._bhashini = get_bhashini_client()
        return self._bhashini

    def create(self, client_id: str = None) -> SessionContext:
        session_id = uuid.uuid4().hex
        session = SessionContext(
            session_id,
            gemini=self.gemini,
            bhashini=self.bhashini,
            client_id=client_id
        )
        with self._lock:
            self._sessions[session_id] = session
        self.logger.info(f"Session started: {session_id} (client {session.client_id})")
        return session

    def get(self, session_id: str) -> Optional[SessionContext]:
        with self._lock:
            return self._sessions.get(session_id)

    def end(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        self.logger.info(f"Session ended: {session_id}")
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_stats(self) -> dict:
        with self._lock:
            sessions = list(self._sessions.values())
        return {
            'active_sessions': len(sessions),
            'cached_translations': sum(len(session.cache) for session in sessions),
        }


# Global registry instance
_registry_instance: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Get or create the global session registry."""
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = SessionRegistry()
    return _registry_instance


def reset_session_registry(registry: SessionRegistry = None) -> None:
    """Replace the global registry (for testing)."""
    global _registry_instance
    _registry_instance = registry
