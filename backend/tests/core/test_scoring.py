"""
Tests for grading and score calculation.
"""
import pytest

from app.core.scoring import (
    calculate_remarks,
    calculate_score,
    is_answer_correct,
    is_auto_graded,
    summarize,
)


class TestCalculateScore:
    """Tests for calculate_score()."""

    def test_all_correct(self):
        assert calculate_score(4, 4) == 100

    def test_none_correct(self):
        assert calculate_score(0, 4) == 0

    def test_two_of_three_rounds_up(self):
        """66.67 rounds to 67."""
        assert calculate_score(2, 3) == 67

    def test_one_of_three_rounds_down(self):
        """33.33 rounds to 33."""
        assert calculate_score(1, 3) == 33

    def test_exact_half_rounds_up(self):
        """62.5 rounds half-up to 63, unlike Python's round()."""
        assert calculate_score(5, 8) == 63

    def test_one_of_two_is_fifty(self):
        assert calculate_score(1, 2) == 50

    def test_zero_total_scores_zero(self):
        assert calculate_score(0, 0) == 0

    def test_correct_exceeding_total_raises(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            calculate_score(3, 2)

    def test_negative_counts_raise(self):
        with pytest.raises(ValueError, match="negative"):
            calculate_score(-1, 2)

    def test_score_always_within_bounds(self):
        for total in range(1, 25):
            for correct in range(total + 1):
                assert 0 <= calculate_score(correct, total) <= 100


class TestCalculateRemarks:
    """Tests for remark thresholds."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, "Excellent"),
            (90, "Excellent"),
            (89, "Very Good"),
            (75, "Very Good"),
            (74, "Good"),
            (60, "Good"),
            (59, "Fair"),
            (50, "Fair"),
            (49, "Needs Improvement"),
            (0, "Needs Improvement"),
        ],
    )
    def test_threshold_boundaries(self, score, expected):
        assert calculate_remarks(score) == expected


class TestAnswerMatching:
    """Tests for auto-graded answer comparison."""

    def test_exact_match_is_correct(self):
        assert is_answer_correct("A", "A") is True

    def test_case_differs_is_wrong(self):
        assert is_answer_correct("a", "A") is False

    def test_whitespace_is_not_trimmed(self):
        assert is_answer_correct(" A", "A") is False

    def test_non_string_submission_is_wrong(self):
        assert is_answer_correct(1, "1") is False
        assert is_answer_correct(True, "True") is False

    def test_missing_key_is_never_correct(self):
        assert is_answer_correct("A", None) is False

    def test_auto_graded_types(self):
        assert is_auto_graded("multiple_choice")
        assert is_auto_graded("true_false")
        assert not is_auto_graded("free_text")
        assert not is_auto_graded("essay")


class TestSummarize:
    def test_summary_fields(self):
        summary = summarize(1, 2)

        assert summary.score == 50
        assert summary.total_questions == 2
        assert summary.correct_answers == 1
        assert summary.remarks == "Fair"

    def test_empty_test_needs_improvement(self):
        summary = summarize(0, 0)

        assert summary.score == 0
        assert summary.remarks == "Needs Improvement"
