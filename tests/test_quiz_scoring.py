import pytest

from app.core.errors import ValidationError
from app.progress.quiz import QuizQuestion, percentage, score_quiz


def _questions(correct):
    return [
        QuizQuestion(question_id=f"q{i}", correct_answer=c, explanation=f"because {c}")
        for i, c in enumerate(correct, start=1)
    ]


def test_all_correct():
    result = score_quiz(_questions([0, 1, 2, 3]), [0, 1, 2, 3])
    assert result.score == 100
    assert result.passed
    assert result.correct_count == 4
    assert result.total_questions == 4


def test_one_of_four_correct():
    result = score_quiz(_questions([0, 1, 2, 3]), [1, 1, 1, 1])
    assert result.score == 25
    assert not result.passed
    assert result.correct_count == 1


def test_feedback_revealed_for_every_question():
    result = score_quiz(_questions([0, 1, 2, 3]), [1, 1, 1, 1])
    assert [r.question_id for r in result.results] == ["q1", "q2", "q3", "q4"]
    assert [r.is_correct for r in result.results] == [False, True, False, False]
    assert [r.correct_answer for r in result.results] == [0, 1, 2, 3]
    assert result.results[0].explanation == "because 0"
    assert result.as_dict()["results"][0] == {
        "questionId": "q1",
        "isCorrect": False,
        "correctAnswer": 0,
        "explanation": "because 0",
    }


def test_missing_answers_count_as_wrong():
    result = score_quiz(_questions([0, 1, 2]), [0])
    assert result.correct_count == 1
    assert result.score == 33
    assert len(result.results) == 3
    assert not result.results[2].is_correct


def test_extra_answers_are_ignored():
    result = score_quiz(_questions([2]), [2, 0, 0])
    assert result.score == 100
    assert len(result.results) == 1


def test_passing_threshold_is_seventy():
    assert score_quiz(_questions([0] * 10), [0] * 7 + [1] * 3).passed
    assert not score_quiz(_questions([0] * 10), [0] * 6 + [1] * 4).passed


def test_percentage_rounds_halves_up():
    assert percentage(1, 8) == 13  # 12.5
    assert percentage(2, 3) == 67
    assert percentage(1, 3) == 33


@pytest.mark.parametrize("answers", ["0,1", [0, "1"], [0, 1.5], [True]])
def test_malformed_answers_rejected(answers):
    with pytest.raises(ValidationError):
        score_quiz(_questions([0, 1]), answers)


def test_empty_question_bank_rejected():
    with pytest.raises(ValidationError):
        score_quiz([], [])
