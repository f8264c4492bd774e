"""
Document Analysis Service
=========================
Summaries of and questions about an uploaded document image.
"""
import time
from typing import List, Optional

from nyay_sahayak.config.constants import (
    SUMMARY_ERROR_MESSAGE,
    QNA_ERROR_MESSAGE,
    Sender
)
from nyay_sahayak.models.messages import ConversationMessage, ReplySnapshot, UploadedFile
from nyay_sahayak.services.aggregator import GenerationHandle, ReplyAggregator
from nyay_sahayak.services.chat import BusyFlag
from nyay_sahayak.utils.logging import get_logger
from nyay_sahayak.utils.text_processing import preview
from nyay_sahayak.utils.validators import validate_document


class DocumentError(Exception):
    """The document is missing or was rejected."""


def _timestamp_id() -> str:
    return str(int(time.time() * 1000))


class DocumentAnalysis:
    """
    Holds one uploaded document image with its summary and Q&A thread.

    A successful summary is appended to the Q&A thread (flagged is_summary)
    so that later questions see it as context.
    """

    def __init__(self, gemini):
        self.gemini = gemini
        self.logger = get_logger().chat_logger
        self.document: Optional[UploadedFile] = None
        self.summary: str = ""
        self.messages: List[ConversationMessage] = []
        self._summary_loading = BusyFlag("A summary is already being generated.")
        self._answer_loading = BusyFlag("An answer is still loading. Please wait.")

    def load(self, filename: str, mime_type: str, data: bytes) -> UploadedFile:
        """
        Replace the current document.

        Raises:
            DocumentError: the file is too large or of an unsupported type
        """
        valid, error = validate_document(filename, mime_type, len(data or b""))
        if not valid:
            raise DocumentError(error)

        self.document = UploadedFile(name=filename, type=mime_type, size=len(data), data=data)
        self.summary = ""
        self.messages = []
        self.logger.info(f"Document loaded: {filename} ({mime_type}, {len(data)} bytes)")
        return self.document

    def _require_document(self) -> UploadedFile:
        if self.document is None:
            raise DocumentError("No file uploaded.")
        return self.document

    def summarize(self) -> GenerationHandle:
        """
        Start streaming a summary of the document.

        Raises:
            DocumentError: no document is loaded
            ConversationBusyError: a summary is already loading
        """
        document = self._require_document()
        self._summary_loading.acquire()
        self.summary = ""
        reply_id = f"summary-{_timestamp_id()}"

        aggregator = ReplyAggregator(reply_id, SUMMARY_ERROR_MESSAGE)
        snapshots = aggregator.stream(self.gemini.stream_document_summary(document))

        def finish(last: Optional[ReplySnapshot]):
            try:
                if last is not None and not last.is_loading and not last.is_error and last.text:
                    self.summary = last.text
                    self.messages.append(ConversationMessage(
                        id=reply_id,
                        text=last.text,
                        sender=Sender.BOT,
                        is_summary=True
                    ))
            finally:
                self._summary_loading.release()

        return GenerationHandle(reply_id, snapshots, on_close=finish)

    def ask(self, question: str) -> GenerationHandle:
        """
        Ask a question about the document.

        Raises:
            ValueError: blank question
            DocumentError: no document is loaded
            ConversationBusyError: an answer is already loading
        """
        if not question or not question.strip():
            raise ValueError("Question is empty")
        document = self._require_document()

        self._answer_loading.acquire()
        history = list(self.messages)
        message_id = _timestamp_id()
        self.messages.append(ConversationMessage(id=message_id, text=question, sender=Sender.USER))
        placeholder = ConversationMessage(
            id=f"bot-qna-{message_id}",
            text="",
            sender=Sender.BOT,
            is_loading=True
        )
        self.messages.append(placeholder)
        self.logger.info(f"Document question: {preview(question)}")

        aggregator = ReplyAggregator(placeholder.id, QNA_ERROR_MESSAGE)
        snapshots = aggregator.stream(self.gemini.stream_document_answer(question, document, history))

        def mirror():
            try:
                for snapshot in snapshots:
                    placeholder.text = snapshot.text
                    placeholder.is_loading = snapshot.is_loading
                    yield snapshot
            finally:
                snapshots.close()

        def finish(last: Optional[ReplySnapshot]):
            placeholder.is_loading = False
            self._answer_loading.release()

        return GenerationHandle(placeholder.id, mirror(), on_close=finish)

    def clear(self):
        """Forget the document, its summary and the Q&A thread."""
        self.document = None
        self.summary = ""
        self.messages = []

    def to_dict(self) -> dict:
        return {
            'document': self.document.to_dict() if self.document else None,
            'summary': self.summary,
            'messages': [message.to_dict() for message in self.messages if not message.is_summary],
            'is_summarizing': self._summary_loading.is_set,
            'is_answering': self._answer_loading.is_set,
        }
