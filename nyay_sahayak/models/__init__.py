"""
Nyay Sahayak - Data Models
"""
from nyay_sahayak.models.messages import (
    ConversationMessage,
    UploadedFile,
    AggregatedReply,
    ReplySnapshot
)
from nyay_sahayak.models.progress import (
    User,
    QuizScoreData,
    UserProgress
)
from nyay_sahayak.models.learning import (
    ContentItem,
    Lesson,
    QuizOption,
    QuizQuestion,
    LearningModule,
    QuizResult
)
from nyay_sahayak.models.schemas import (
    Language,
    ChatRequest,
    TranslateRequest,
    HealthStatus
)

__all__ = [
    "ConversationMessage",
    "UploadedFile",
    "AggregatedReply",
    "ReplySnapshot",
    "User",
    "QuizScoreData",
    "UserProgress",
    "ContentItem",
    "Lesson",
    "QuizOption",
    "QuizQuestion",
    "LearningModule",
    "QuizResult",
    "Language",
    "ChatRequest",
    "TranslateRequest",
    "HealthStatus"
]
