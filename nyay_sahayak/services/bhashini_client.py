"""
Bhashini API Client
===================
Client for the Bhashini language backend (supported languages, language
detection and text-to-speech).
"""
from typing import List, Optional

import requests

from nyay_sahayak.config import config
from nyay_sahayak.models.schemas import Language
from nyay_sahayak.utils.logging import get_logger, debug_print


class BhashiniError(Exception):
    """Bhashini returned an error or could not be reached."""


class BhashiniClient:
    """Client for Bhashini API interactions."""

    def __init__(self, base_url: str = None):
        self.base_url = (base_url or config.bhashini.base_url).rstrip('/')
        self.logger = get_logger().api_logger

        # Set up session with connection pooling
        self.session = requests.Session()
        adapter = requests.adapters.HTTPAdapter(
            max_retries=config.bhashini.max_retries,
            pool_connections=10,
            pool_maxsize=10
        )
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)
        self.session.headers.update({'Accept': 'application/json'})

    @property
    def supported_languages_url(self) -> str:
        return f"{self.base_url}/bhashini/supported-languages"

    @property
    def detect_language_url(self) -> str:
        return f"{self.base_url}/bhashini/detect-language"

    @property
    def tts_url(self) -> str:
        return f"{self.base_url}/bhashini/tts"

    @property
    def _timeout(self):
        return (config.bhashini.connect_timeout, config.bhashini.read_timeout)

    @staticmethod
    def _handle_response(response: requests.Response) -> dict:
        """Return the JSON body or raise BhashiniError for a failed response."""
        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                raise BhashiniError(
                    f"Bhashini API request failed with status {response.status_code}: "
                    f"{response.text or response.reason}"
                )
            error = error_data.get('error') if isinstance(error_data, dict) else None
            details = error_data.get('details') if isinstance(error_data, dict) else None
            message = f"Bhashini API Error: {error or response.reason} (Status: {response.status_code})"
            if details:
                message += f" - {details}"
            raise BhashiniError(message)

        try:
            return response.json()
        except ValueError as e:
            raise BhashiniError(f"Invalid JSON response: {e}") from e

    def is_healthy(self) -> bool:
        """Check if Bhashini is accessible."""
        try:
            response = self.session.get(
                self.supported_languages_url,
                timeout=config.bhashini.health_check_timeout
            )
            return response.status_code == 200
        except Exception as e:
            self.logger.warning(f"Bhashini health check failed: {e}")
            return False

    def supported_languages(self) -> List[Language]:
        """List supported languages. Returns [] on any failure."""
        try:
            response = self.session.get(self.supported_languages_url, timeout=self._timeout)
            data = self._handle_response(response)
        except (BhashiniError, requests.RequestException) as e:
            self.logger.error(f"Failed to fetch supported languages: {e}")
            return []

        if data.get('error'):
            self.logger.warning(f"Fetching supported languages returned an error: {data['error']}")
            return []

        languages = []
        for item in data.get('supported_languages') or []:
            code = item.get('code')
            if code:
                languages.append(Language(code=code, name=item.get('name') or code))
        return languages

    def detect_language(self, text: str) -> Optional[str]:
        """
        Detect the language of text.

        Returns:
            Language code, or None when it is blank, unknown or detection failed
        """
        if not text or not text.strip():
            return None

        try:
            response = self.session.post(
                self.detect_language_url,
                json={'text': text},
                timeout=self._timeout
            )
            data = self._handle_response(response)
        except (BhashiniError, requests.RequestException) as e:
            self.logger.error(f"Language detection failed: {e}")
            return None

        lang_code = data.get('langCode')
        if lang_code and lang_code.lower() != 'unknown':
            debug_print(f"[DETECT] {lang_code}", 'DEBUG', 'BHASHINI')
            return lang_code

        if data.get('error'):
            self.logger.warning(f"Language detection returned an error message: {data['error']}")
        return None

    def text_to_speech(self, text: str, source_language: str = None) -> Optional[str]:
        """
        Synthesize speech.

        Returns:
            Base64 audio content, or None when the backend returned none

        Raises:
            BhashiniError: the backend failed or could not be reached
        """
        payload = {'text': text}
        if source_language:
            payload['sourceLan'] = source_language

        try:
            response = self.session.post(self.tts_url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            self.logger.error(f"Bhashini text-to-speech failed: {e}")
            raise BhashiniError(f"Bhashini API request failed: {e}") from e

        data = self._handle_response(response)
        if data.get('error'):
            raise BhashiniError(data['error'])
        return data.get('audio_content') or None

    def close(self):
        """Close the session."""
        self.session.close()


# Global client instance
_client_instance: Optional[BhashiniClient] = None


def get_bhashini_client() -> BhashiniClient:
    """Get or create the global Bhashini client instance."""
    global _client_instance
    if _client_instance is None:
        _client_instance = BhashiniClient()
    return _client_instance
