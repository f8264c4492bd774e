"""
User and Progress Data Models
=============================
Stored in client storage with the camelCase keys the web client reads.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


def quiz_percentage(score: int, total: int) -> int:
    """Percentage rounded half up, 0 when the quiz has no questions."""
    if total <= 0:
        return 0
    return int(score * 100 / total + 0.5)


@dataclass
class User:
    """A (mock) authenticated user."""
    id: str
    email: str
    name: Optional[str] = None

    def to_dict(self) -> dict:
        result = {'id': self.id, 'email': self.email}
        if self.name:
            result['name'] = self.name
        return result

    @classmethod
    def from_dict(cls, data: dict) -> 'User':
        return cls(id=str(data['id']), email=data['email'], name=data.get('name'))


@dataclass
class QuizScoreData:
    """Latest result of a module quiz."""
    score: int
    total: int
    percentage: int
    last_attempt: int  # epoch milliseconds

    def to_dict(self) -> dict:
        return {
            'score': self.score,
            'total': self.total,
            'percentage': self.percentage,
            'lastAttempt': self.last_attempt,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'QuizScoreData':
        return cls(
            score=int(data.get('score', 0)),
            total=int(data.get('total', 0)),
            percentage=int(data.get('percentage', 0)),
            last_attempt=int(data.get('lastAttempt', 0)),
        )


@dataclass
class UserProgress:
    """Lessons read ("moduleId_lessonId" keys) and quiz scores by module."""
    read_lessons: List[str] = field(default_factory=list)
    quiz_scores: Dict[str, QuizScoreData] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'readLessons': list(self.read_lessons),
            'quizScores': {module_id: score.to_dict() for module_id, score in self.quiz_scores.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserProgress':
        return cls(
            read_lessons=[str(key) for key in data.get('readLessons', [])],
            quiz_scores={
                module_id: QuizScoreData.from_dict(score)
                for module_id, score in (data.get('quizScores') or {}).items()
            },
        )
