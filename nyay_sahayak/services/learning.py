"""
Learning Catalog Service
========================
Static learning modules, quiz grading and localization of module text.
"""
import json
from pathlib import Path
from typing import Dict, List, Optional

from nyay_sahayak.config import config
from nyay_sahayak.config.constants import ContentType
from nyay_sahayak.models.learning import (
    ContentItem,
    Lesson,
    QuizOption,
    QuizQuestion,
    LearningModule,
    QuizQuestionResult,
    QuizResult
)
from nyay_sahayak.utils.logging import get_logger


def _parse_module(data: dict) -> LearningModule:
    return LearningModule(
        id=data['id'],
        title=data['title'],
        description=data.get('description', ''),
        long_description=data.get('long_description'),
        lessons=[
            Lesson(
                id=lesson['id'],
                title=lesson['title'],
                content=[ContentItem.from_dict(item) for item in lesson.get('content', [])]
            )
            for lesson in data.get('lessons', [])
        ],
        quiz=[
            QuizQuestion(
                id=question['id'],
                question_text=question['question_text'],
                options=[QuizOption(id=opt['id'], text=opt['text']) for opt in question['options']],
                correct_option_id=question['correct_option_id'],
                explanation=question.get('explanation')
            )
            for question in data.get('quiz', [])
        ]
    )


class LearningCatalog:
    """Read-only catalog of learning modules loaded from packaged JSON."""

    def __init__(self, data_path: Path = None):
        self.data_path = Path(data_path or config.paths.learning_data_path)
        self.logger = get_logger().app_logger
        self._modules: Dict[str, LearningModule] = {}
        self._load()

    def _load(self):
        with open(self.data_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        for item in data.get('modules', []):
            module = _parse_module(item)
            self._modules[module.id] = module
        self.logger.info(f"Loaded {len(self._modules)} learning modules from {self.data_path.name}")

    def list_modules(self) -> List[LearningModule]:
        return list(self._modules.values())

    def get_module(self, module_id: str) -> Optional[LearningModule]:
        return self._modules.get(module_id)

    def grade_quiz(self, module_id: str, answers: Dict[str, str]) -> QuizResult:
        """
        Grade a quiz attempt.

        Args:
            module_id: Module whose quiz was taken
            answers: {question_id: selected_option_id}; unanswered questions
                count as wrong

        Raises:
            KeyError: unknown module
        """
        module = self._modules.get(module_id)
        if module is None:
            raise KeyError(module_id)

        results = []
        for question in module.quiz:
            selected = answers.get(question.id)
            results.append(QuizQuestionResult(
                question_id=question.id,
                selected_option_id=selected,
                correct_option_id=question.correct_option_id,
                is_correct=selected == question.correct_option_id,
                explanation=question.explanation
            ))

        score = sum(1 for result in results if result.is_correct)
        return QuizResult(module_id=module_id, score=score, total=len(module.quiz), questions=results)

    def localize_module(self, module: LearningModule, dispatcher) -> LearningModule:
        """Return a copy of module with its text translated through dispatcher."""
        texts: List[str] = [module.title, module.description, module.long_description or ""]
        for lesson in module.lessons:
            texts.append(lesson.title)
            for item in lesson.content:
                if item.type == ContentType.LIST:
                    texts.extend(item.items)
                else:
                    texts.append(item.content)
        for question in module.quiz:
            texts.append(question.question_text)
            texts.extend(option.text for option in question.options)
            texts.append(question.explanation or "")

        translated = iter(dispatcher.translate_many(texts))

        title = next(translated)
        description = next(translated)
        long_description = next(translated) or None

        lessons = []
        for lesson in module.lessons:
            lesson_title = next(translated)
            content = []
            for item in lesson.content:
                if item.type == ContentType.LIST:
                    content.append(ContentItem(
                        type=item.type,
                        ordered=item.ordered,
                        items=[next(translated) for _ in item.items]
                    ))
                else:
                    content.append(ContentItem(type=item.type, content=next(translated), level=item.level))
            lessons.append(Lesson(id=lesson.id, title=lesson_title, content=content))

        quiz = []
        for question in module.quiz:
            question_text = next(translated)
            options = [QuizOption(id=option.id, text=next(translated)) for option in question.options]
            explanation = next(translated) or None
            quiz.append(QuizQuestion(
                id=question.id,
                question_text=question_text,
                options=options,
                correct_option_id=question.correct_option_id,
                explanation=explanation
            ))

        return LearningModule(
            id=module.id,
            title=title,
            description=description,
            long_description=long_description,
            lessons=lessons,
            quiz=quiz
        )


# Global catalog instance
_catalog_instance: Optional[LearningCatalog] = None


def get_learning_catalog() -> LearningCatalog:
    """Get or create the global learning catalog."""
    global _catalog_instance
    if _catalog_instance is None:
        _catalog_instance = LearningCatalog()
    return _catalog_instance
