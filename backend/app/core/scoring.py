"""
Grading and score calculation.

Only objective question types are graded automatically. Every other type is
stored as submitted and never counts towards the score.

Scoring
=======
- score = correct / total auto-graded questions, as a percentage rounded
  half-up to an integer (2 of 3 correct -> 67)
- A test with no auto-graded questions scores 0
- Remarks come from fixed thresholds, checked from the top down
"""

from dataclasses import dataclass
from typing import Any, List, Tuple

AUTO_GRADED_TYPES = frozenset({"multiple_choice", "true_false"})

# (minimum score, remark), highest threshold first
SCORE_REMARKS: List[Tuple[int, str]] = [
    (90, "Excellent"),
    (75, "Very Good"),
    (60, "Good"),
    (50, "Fair"),
    (0, "Needs Improvement"),
]


@dataclass
class GradeSummary:
    """Outcome of grading one submission."""

    score: int
    total_questions: int
    correct_answers: int
    remarks: str


def is_auto_graded(question_type: str) -> bool:
    return question_type in AUTO_GRADED_TYPES


def is_answer_correct(submitted: Any, correct_answer: Any) -> bool:
    """
    Strict comparison for auto-graded answers.

    Only a string identical to the stored key counts; no trimming, case
    folding or type coercion is applied.
    """
    return (
        isinstance(submitted, str)
        and correct_answer is not None
        and submitted == correct_answer
    )


def calculate_score(correct_answers: int, total_questions: int) -> int:
    """
    Percentage of correct answers, rounded half-up.

    Integer arithmetic avoids float and banker's rounding surprises
    (``round(62.5)`` is 62 in Python; this returns 63).

    Raises:
        ValueError: If counts are negative or correct exceeds total
    """
    if correct_answers < 0 or total_questions < 0:
        raise ValueError("answer counts cannot be negative")
    if correct_answers > total_questions:
        raise ValueError("correct_answers cannot exceed total_questions")
    if total_questions == 0:
        return 0
    return (correct_answers * 200 + total_questions) // (2 * total_questions)


def calculate_remarks(score: int) -> str:
    """Map a score to its qualitative remark."""
    for threshold, remark in SCORE_REMARKS:
        if score >= threshold:
            return remark
    return SCORE_REMARKS[-1][1]


def summarize(correct_answers: int, total_questions: int) -> GradeSummary:
    score = calculate_score(correct_answers, total_questions)
    return GradeSummary(
        score=score,
        total_questions=total_questions,
        correct_answers=correct_answers,
        remarks=calculate_remarks(score),
    )
