"""
Request/Response Schemas
========================
Validation schemas for API requests and responses.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict


@dataclass
class Language:
    """A selectable display language."""
    code: str
    name: str

    def to_dict(self) -> dict:
        return {'code': self.code, 'name': self.name}


@dataclass
class ChatRequest:
    """Request schema for sending a chat message."""
    message: str
    language: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict) -> 'ChatRequest':
        return cls(message=data.get('message') or '', language=data.get('language'))

    def validate(self) -> List[str]:
        errors = []
        if not self.message.strip():
            errors.append("message is required")
        return errors


@dataclass
class TranslateRequest:
    """Request schema for the translate endpoint."""
    text: str
    target_language: Optional[str] = None
    source_language: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict) -> 'TranslateRequest':
        return cls(
            text=data.get('text') or '',
            target_language=data.get('target_language'),
            source_language=data.get('source_language'),
        )

    def validate(self) -> List[str]:
        errors = []
        if not isinstance(self.text, str):
            errors.append("text must be a string")
        return errors


@dataclass
class QuestionRequest:
    """Request schema for a document question."""
    question: str

    @classmethod
    def from_json(cls, data: dict) -> 'QuestionRequest':
        return cls(question=data.get('question') or '')

    def validate(self) -> List[str]:
        errors = []
        if not self.question.strip():
            errors.append("question is required")
        return errors


@dataclass
class CredentialsRequest:
    """Request schema for login and signup."""
    email: str
    password: str
    name: str = ""
    confirm_password: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict) -> 'CredentialsRequest':
        return cls(
            email=data.get('email') or '',
            password=data.get('password') or '',
            name=data.get('name') or '',
            confirm_password=data.get('confirm_password'),
        )

    def validate(self) -> List[str]:
        errors = []
        if not self.email or '@' not in self.email:
            errors.append("a valid email is required")
        if not self.password:
            errors.append("password is required")
        return errors


@dataclass
class LessonProgressRequest:
    """Request schema for marking a lesson read or unread."""
    module_id: str
    lesson_id: str
    read: bool = True

    @classmethod
    def from_json(cls, data: dict) -> 'LessonProgressRequest':
        return cls(
            module_id=data.get('module_id') or '',
            lesson_id=data.get('lesson_id') or '',
            read=bool(data.get('read', True)),
        )

    def validate(self) -> List[str]:
        errors = []
        if not self.module_id:
            errors.append("module_id is required")
        if not self.lesson_id:
            errors.append("lesson_id is required")
        return errors


@dataclass
class QuizSubmission:
    """Request schema for submitting quiz answers ({question_id: option_id})."""
    module_id: str
    answers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict) -> 'QuizSubmission':
        answers = data.get('answers') or {}
        return cls(
            module_id=data.get('module_id') or '',
            answers=answers if isinstance(answers, dict) else {},
        )

    def validate(self) -> List[str]:
        errors = []
        if not self.module_id:
            errors.append("module_id is required")
        return errors


@dataclass
class HealthStatus:
    """Health check response."""
    status: str
    gemini_configured: bool
    bhashini_connected: bool
    version: str

    def to_dict(self) -> dict:
        return {
            'status': self.status,
            'gemini_configured': self.gemini_configured,
            'bhashini_connected': self.bhashini_connected,
            'version': self.version,
        }
