"""
Practice-stage quiz scoring.

Answers are matched to questions by position. A missing answer counts as
wrong, extra answers are ignored, and every question's correct index and
explanation are revealed in the result.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from app.core.config import QUIZ_PASSING_SCORE
from app.core.errors import ValidationError
from app.progress.types import QuestionResult, QuizResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuizQuestion:
    question_id: str
    correct_answer: int
    explanation: str = ""
    difficulty: str = "Easy"
    xp_reward: int = 0


def percentage(correct: int, total: int) -> int:
    """round(100 * correct / total), halves rounded up, in integer arithmetic."""
    return (200 * correct + total) // (2 * total)


def _validate_answers(answers) -> list[Optional[int]]:
    if not isinstance(answers, (list, tuple)):
        raise ValidationError("answers must be a list of option indexes")
    for i, answer in enumerate(answers):
        if answer is None:
            continue
        if isinstance(answer, bool) or not isinstance(answer, int):
            raise ValidationError(f"answers[{i}] must be an integer option index")
    return list(answers)


def score_quiz(questions: Sequence[QuizQuestion], answers) -> QuizResult:
    answers = _validate_answers(answers)
    if not questions:
        raise ValidationError("Lesson has no practice questions")

    results = []
    correct_count = 0
    for i, question in enumerate(questions):
        submitted = answers[i] if i < len(answers) else None
        is_correct = submitted is not None and submitted == question.correct_answer
        if is_correct:
            correct_count += 1
        results.append(QuestionResult(
            question_id=question.question_id,
            is_correct=is_correct,
            correct_answer=question.correct_answer,
            explanation=question.explanation,
        ))

    score = percentage(correct_count, len(questions))
    passed = score >= QUIZ_PASSING_SCORE
    logger.info(f"[QUIZ] {correct_count}/{len(questions)} correct score={score} passed={passed}")

    return QuizResult(
        score=score,
        passed=passed,
        correct_count=correct_count,
        total_questions=len(questions),
        results=results,
    )
