"""
Unit Tests for Document Analysis
================================
"""
import pytest
import sys
import os

os.environ.setdefault('VERBOSE_DEBUG', 'false')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nyay_sahayak.config.constants import QNA_ERROR_MESSAGE, SUMMARY_ERROR_MESSAGE
from nyay_sahayak.services.chat import ConversationBusyError
from nyay_sahayak.services.documents import DocumentAnalysis, DocumentError
from tests.fakes import FakeGemini


PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 32


@pytest.fixture
def gemini():
    return FakeGemini(fragments=["The notice ", "demands rent."])


@pytest.fixture
def analysis(gemini):
    analysis = DocumentAnalysis(gemini)
    analysis.load('notice.png', 'image/png', PNG_BYTES)
    return analysis


class TestDocumentLoading:
    """Test document validation."""

    def test_load(self, gemini):
        analysis = DocumentAnalysis(gemini)
        document = analysis.load('notice.png', 'image/png', PNG_BYTES)
        assert document.size == len(PNG_BYTES)
        assert analysis.to_dict()['document'] == {'name': 'notice.png', 'type': 'image/png', 'size': len(PNG_BYTES)}

    def test_rejects_pdf(self, gemini):
        with pytest.raises(DocumentError) as exc_info:
            DocumentAnalysis(gemini).load('notice.pdf', 'application/pdf', b'%PDF')
        assert 'Invalid file type' in str(exc_info.value)

    def test_rejects_large_file(self, gemini):
        big = b'\x00' * (5 * 1024 * 1024 + 1)
        with pytest.raises(DocumentError) as exc_info:
            DocumentAnalysis(gemini).load('big.png', 'image/png', big)
        assert 'too large' in str(exc_info.value)

    def test_requires_document(self, gemini):
        analysis = DocumentAnalysis(gemini)
        with pytest.raises(DocumentError):
            analysis.summarize()
        with pytest.raises(DocumentError):
            analysis.ask("Who signed it?")


class TestDocumentSummary:
    """Test streamed summaries."""

    def test_summary_added_to_thread(self, analysis):
        snapshots = list(analysis.summarize())

        assert snapshots[-1].text == "The notice demands rent."
        assert analysis.summary == "The notice demands rent."
        assert analysis.messages[0].is_summary
        assert analysis.to_dict()['messages'] == []
        assert not analysis.to_dict()['is_summarizing']

    def test_failed_summary_not_added(self, gemini, analysis):
        gemini.error = RuntimeError("bad image")
        last = analysis.summarize().wait()

        assert last.is_error
        assert last.text == SUMMARY_ERROR_MESSAGE
        assert analysis.summary == ""
        assert analysis.messages == []

    def test_concurrent_summary_refused(self, analysis):
        handle = analysis.summarize()
        with pytest.raises(ConversationBusyError):
            analysis.summarize()
        handle.close()
        analysis.summarize().wait()

    def test_new_document_resets_state(self, analysis):
        analysis.summarize().wait()
        analysis.load('lease.jpg', 'image/jpeg', PNG_BYTES)
        assert analysis.summary == ""
        assert analysis.messages == []


class TestDocumentQuestions:
    """Test questions about the document."""

    def test_question_sees_summary(self, gemini, analysis):
        analysis.summarize().wait()
        analysis.ask("How much rent?").wait()

        question, document, history = gemini.answer_calls[-1]
        assert question == "How much rent?"
        assert document is analysis.document
        assert history[0].is_summary

        bot = analysis.messages[-1]
        assert bot.id.startswith('bot-qna-')
        assert bot.text == "The notice demands rent."
        assert bot.is_loading is False

    def test_placeholder_mirrors_stream(self, analysis):
        handle = analysis.ask("How much rent?")
        placeholder = analysis.messages[-1]
        iterator = iter(handle)

        first = next(iterator)
        assert placeholder.text == first.text
        assert placeholder.is_loading

        list(iterator)
        assert not placeholder.is_loading

    def test_answer_error(self, gemini, analysis):
        gemini.error = RuntimeError("boom")
        gemini.fragments = []
        last = analysis.ask("How much rent?").wait()
        assert last.text == QNA_ERROR_MESSAGE
        assert analysis.messages[-1].text == QNA_ERROR_MESSAGE

    def test_blank_question(self, analysis):
        with pytest.raises(ValueError):
            analysis.ask("  ")

    def test_clear(self, analysis):
        analysis.summarize().wait()
        analysis.clear()
        data = analysis.to_dict()
        assert data['document'] is None
        assert data['summary'] == ""
