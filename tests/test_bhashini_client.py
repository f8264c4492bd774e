"""
Unit Tests for the Bhashini Client
==================================
"""
import pytest
import sys
import os
from unittest.mock import MagicMock, patch

import requests

os.environ.setdefault('VERBOSE_DEBUG', 'false')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nyay_sahayak.services.bhashini_client import BhashiniClient, BhashiniError


def response(status=200, payload=None, reason='OK'):
    mock = MagicMock()
    mock.status_code = status
    mock.ok = status < 400
    mock.reason = reason
    mock.text = ''
    if isinstance(payload, Exception):
        mock.json.side_effect = payload
    else:
        mock.json.return_value = payload
    return mock


@pytest.fixture
def client():
    return BhashiniClient(base_url='http://bhashini.test/')


class TestBhashiniClient:
    """Test the Bhashini language backend client."""

    def test_urls(self, client):
        assert client.supported_languages_url == 'http://bhashini.test/bhashini/supported-languages'
        assert client.detect_language_url == 'http://bhashini.test/bhashini/detect-language'
        assert client.tts_url == 'http://bhashini.test/bhashini/tts'

    def test_supported_languages(self, client):
        payload = {'supported_languages': [
            {'code': 'hi', 'name': 'Hindi'},
            {'code': 'ta'},
            {'name': 'No code'},
        ]}
        with patch.object(client.session, 'get', return_value=response(payload=payload)):
            languages = client.supported_languages()

        assert [(l.code, l.name) for l in languages] == [('hi', 'Hindi'), ('ta', 'ta')]

    def test_supported_languages_failure_is_empty(self, client):
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError("refused")):
            assert client.supported_languages() == []

        error = response(status=500, payload={'error': 'down'}, reason='Server Error')
        with patch.object(client.session, 'get', return_value=error):
            assert client.supported_languages() == []

    def test_detect_language(self, client):
        with patch.object(client.session, 'post', return_value=response(payload={'langCode': 'hi'})) as post:
            assert client.detect_language('नमस्ते') == 'hi'
        assert post.call_args.kwargs['json'] == {'text': 'नमस्ते'}

    def test_detect_language_unknown(self, client):
        with patch.object(client.session, 'post', return_value=response(payload={'langCode': 'unknown'})):
            assert client.detect_language('???') is None

    def test_detect_language_blank_skips_request(self, client):
        with patch.object(client.session, 'post') as post:
            assert client.detect_language('   ') is None
        post.assert_not_called()

    def test_text_to_speech(self, client):
        with patch.object(client.session, 'post', return_value=response(payload={'audio_content': 'UklGRg=='})) as post:
            assert client.text_to_speech('Namaste', 'hi') == 'UklGRg=='
        assert post.call_args.kwargs['json'] == {'text': 'Namaste', 'sourceLan': 'hi'}

    def test_text_to_speech_error_message(self, client):
        error = response(status=400, payload={'error': 'Bad text', 'details': 'empty'}, reason='Bad Request')
        with patch.object(client.session, 'post', return_value=error):
            with pytest.raises(BhashiniError) as exc_info:
                client.text_to_speech('')
        assert str(exc_info.value) == "Bhashini API Error: Bad text (Status: 400) - empty"

    def test_text_to_speech_unreachable(self, client):
        with patch.object(client.session, 'post', side_effect=requests.Timeout("slow")):
            with pytest.raises(BhashiniError):
                client.text_to_speech('Namaste')

    def test_is_healthy(self, client):
        with patch.object(client.session, 'get', return_value=response()):
            assert client.is_healthy()
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError()):
            assert not client.is_healthy()
