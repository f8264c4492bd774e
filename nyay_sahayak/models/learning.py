"""
Learning Content Models
=======================
Static modules, lessons and quizzes.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from nyay_sahayak.config.constants import ContentType
from nyay_sahayak.models.progress import quiz_percentage


@dataclass
class ContentItem:
    """One block of structured lesson content."""
    type: ContentType
    content: str = ""
    level: int = 2
    ordered: bool = False
    items: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        if self.type == ContentType.LIST:
            return {'type': self.type.value, 'ordered': self.ordered, 'items': list(self.items)}
        if self.type == ContentType.HEADING:
            return {'type': self.type.value, 'level': self.level, 'content': self.content}
        return {'type': self.type.value, 'content': self.content}

    @classmethod
    def from_dict(cls, data: dict) -> 'ContentItem':
        return cls(
            type=ContentType(data['type']),
            content=data.get('content', ''),
            level=int(data.get('level', 2)),
            ordered=bool(data.get('ordered', False)),
            items=list(data.get('items', [])),
        )


@dataclass
class Lesson:
    id: str
    title: str
    content: List[ContentItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'content': [item.to_dict() for item in self.content],
        }


@dataclass
class QuizOption:
    id: str
    text: str

    def to_dict(self) -> dict:
        return {'id': self.id, 'text': self.text}


@dataclass
class QuizQuestion:
    id: str
    question_text: str
    options: List[QuizOption]
    correct_option_id: str
    explanation: Optional[str] = None

    def to_dict(self, include_answer: bool = False) -> dict:
        result = {
            'id': self.id,
            'question_text': self.question_text,
            'options': [option.to_dict() for option in self.options],
        }
        if include_answer:
            result['correct_option_id'] = self.correct_option_id
            if self.explanation:
                result['explanation'] = self.explanation
        return result


@dataclass
class LearningModule:
    id: str
    title: str
    description: str
    long_description: Optional[str] = None
    lessons: List[Lesson] = field(default_factory=list)
    quiz: List[QuizQuestion] = field(default_factory=list)

    def lesson_ids(self) -> List[str]:
        return [lesson.id for lesson in self.lessons]

    def to_dict(self, include_content: bool = True) -> dict:
        result = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'lesson_count': len(self.lessons),
            'question_count': len(self.quiz),
        }
        if self.long_description:
            result['long_description'] = self.long_description
        if include_content:
            result['lessons'] = [lesson.to_dict() for lesson in self.lessons]
            result['quiz'] = [question.to_dict() for question in self.quiz]
        return result


@dataclass
class QuizQuestionResult:
    question_id: str
    selected_option_id: Optional[str]
    correct_option_id: str
    is_correct: bool
    explanation: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'question_id': self.question_id,
            'selected_option_id': self.selected_option_id,
            'correct_option_id': self.correct_option_id,
            'is_correct': self.is_correct,
            'explanation': self.explanation,
        }


@dataclass
class QuizResult:
    module_id: str
    score: int
    total: int
    questions: List[QuizQuestionResult] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        return quiz_percentage(self.score, self.total)

    def to_dict(self) -> dict:
        return {
            'module_id': self.module_id,
            'score': self.score,
            'total': self.total,
            'percentage': self.percentage,
            'questions': [question.to_dict() for question in self.questions],
        }
