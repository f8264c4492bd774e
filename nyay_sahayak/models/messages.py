"""
Conversation Data Models
========================
Messages, uploaded files and streamed reply state.
"""
import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from nyay_sahayak.config.constants import Sender


@dataclass
class ConversationMessage:
    """A chat or document Q&A message."""
    id: str
    text: str
    sender: Sender
    timestamp: datetime = field(default_factory=datetime.now)
    is_loading: bool = False
    language: Optional[str] = None
    is_summary: bool = False

    @property
    def is_user(self) -> bool:
        return self.sender == Sender.USER

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            'id': self.id,
            'text': self.text,
            'sender': self.sender.value if isinstance(self.sender, Sender) else self.sender,
            'timestamp': self.timestamp.isoformat(),
            'is_loading': self.is_loading,
        }
        if self.language:
            result['language'] = self.language
        if self.is_summary:
            result['is_summary'] = True
        return result


@dataclass
class UploadedFile:
    """A document image held in memory for analysis."""
    name: str
    type: str
    size: int
    data: bytes = field(repr=False, default=b"")

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode('ascii')

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'type': self.type,
            'size': self.size,
        }


@dataclass
class AggregatedReply:
    """Accumulator for one in-flight generation request."""
    id: str
    accumulated_text: str = ""
    is_complete: bool = False
    failed: bool = False


@dataclass
class ReplySnapshot:
    """Point-in-time view of a streamed reply."""
    id: str
    text: str
    is_loading: bool
    is_error: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for SSE events."""
        return {
            'id': self.id,
            'text': self.text,
            'is_loading': self.is_loading,
            'is_error': self.is_error,
        }
