"""
Progress Tracking Service
=========================
Lesson reads and quiz scores per user, kept in client storage.
"""
import time
from typing import Dict, Optional, Sequence

from nyay_sahayak.config.constants import PROGRESS_STORAGE_KEY
from nyay_sahayak.models.learning import LearningModule
from nyay_sahayak.models.progress import QuizScoreData, UserProgress, quiz_percentage
from nyay_sahayak.storage.client_storage import ClientStorage
from nyay_sahayak.utils.logging import get_logger


def lesson_key(module_id: str, lesson_id: str) -> str:
    return f"{module_id}_{lesson_id}"


class ProgressService:
    """
    Reads and writes the progress of every user of one client.

    All users share a single JSON document under the progress storage key,
    mapping user id to {readLessons, quizScores}. Unreadable documents are
    treated as empty.
    """

    def __init__(self, storage: ClientStorage):
        self.storage = storage
        self.logger = get_logger().storage_logger

    def _load_all(self) -> Dict[str, dict]:
        data = self.storage.get_json(PROGRESS_STORAGE_KEY, {})
        if not isinstance(data, dict):
            self.logger.warning("Stored progress is not an object, ignoring it")
            return {}
        return data

    def get_progress(self, user_id: str) -> UserProgress:
        user_data = self._load_all().get(user_id)
        if not isinstance(user_data, dict):
            return UserProgress()
        try:
            return UserProgress.from_dict(user_data)
        except (TypeError, ValueError, AttributeError) as e:
            self.logger.error(f"Error reading progress for user {user_id}: {e}")
            return UserProgress()

    def save_progress(self, user_id: str, progress: UserProgress) -> None:
        all_progress = self._load_all()
        all_progress[user_id] = progress.to_dict()
        self.storage.set_json(PROGRESS_STORAGE_KEY, all_progress)

    def mark_lesson_read(self, user_id: str, module_id: str, lesson_id: str) -> UserProgress:
        progress = self.get_progress(user_id)
        key = lesson_key(module_id, lesson_id)
        if key not in progress.read_lessons:
            progress.read_lessons.append(key)
            self.save_progress(user_id, progress)
        return progress

    def mark_lesson_unread(self, user_id: str, module_id: str, lesson_id: str) -> UserProgress:
        progress = self.get_progress(user_id)
        key = lesson_key(module_id, lesson_id)
        progress.read_lessons = [read for read in progress.read_lessons if read != key]
        self.save_progress(user_id, progress)
        return progress

    def is_lesson_read(self, user_id: str, module_id: str, lesson_id: str) -> bool:
        return lesson_key(module_id, lesson_id) in self.get_progress(user_id).read_lessons

    def save_quiz_result(
        self,
        user_id: str,
        module_id: str,
        score: int,
        total_questions: int
    ) -> UserProgress:
        """Record the latest quiz attempt for a module, replacing any earlier one."""
        progress = self.get_progress(user_id)
        progress.quiz_scores[module_id] = QuizScoreData(
            score=score,
            total=total_questions,
            percentage=quiz_percentage(score, total_questions),
            last_attempt=int(time.time() * 1000)
        )
        self.save_progress(user_id, progress)
        return progress

    def get_quiz_result(self, user_id: str, module_id: str) -> Optional[QuizScoreData]:
        return self.get_progress(user_id).quiz_scores.get(module_id)

    def summarize(self, user_id: str, modules: Sequence[LearningModule]) -> dict:
        """
        Progress overview across the catalog.

        Returns:
            Dict with overall lesson counts and percentage, plus one entry
            per module with its read lessons and latest quiz score
        """
        progress = self.get_progress(user_id)
        read = set(progress.read_lessons)

        module_summaries = []
        total_lessons = 0
        total_read = 0
        for module in modules:
            lesson_ids = module.lesson_ids()
            module_read = [lid for lid in lesson_ids if lesson_key(module.id, lid) in read]
            total_lessons += len(lesson_ids)
            total_read += len(module_read)

            quiz = progress.quiz_scores.get(module.id)
            module_summaries.append({
                'module_id': module.id,
                'title': module.title,
                'lessons_total': len(lesson_ids),
                'lessons_read': len(module_read),
                'read_lesson_ids': module_read,
                'percentage': quiz_percentage(len(module_read), len(lesson_ids)),
                'quiz': quiz.to_dict() if quiz else None,
            })

        return {
            'user_id': user_id,
            'lessons_total': total_lessons,
            'lessons_read': total_read,
            'percentage': quiz_percentage(total_read, total_lessons),
            'modules': module_summaries,
        }
