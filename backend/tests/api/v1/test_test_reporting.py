"""
Tests for result listings and answer review.
"""
import pytest

from app.models import UserRole

from tests.conftest import create_user


@pytest.fixture
def submitted_test(client, candidate_headers, two_question_test):
    """two_question_test after the candidate answered one of two correctly."""
    first, second = two_question_test.questions
    response = client.post(
        f"/api/tests/{two_question_test.id}/submit",
        json={"answers": {str(first.id): "A", str(second.id): "C"}},
        headers=candidate_headers,
    )
    assert response.status_code == 201
    return two_question_test


class TestTestResults:
    """Tests for GET /api/tests/{test_id}/results."""

    def test_owner_sees_results(
        self, client, employer_headers, candidate_user, submitted_test
    ):
        response = client.get(
            f"/api/tests/{submitted_test.id}/results", headers=employer_headers
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert len(results) == 1
        assert results[0]["candidate_id"] == candidate_user.id
        assert results[0]["candidate_name"] == "Cara Candidate"
        assert results[0]["candidate_email"] == "candidate@example.com"
        assert results[0]["score"] == 50
        assert results[0]["remarks"] == "Fair"

    def test_newest_first(
        self,
        client,
        employer_headers,
        make_headers,
        submitted_test,
        db_session,
    ):
        second_candidate = create_user(
            db_session,
            "Second Candidate",
            "second@example.com",
            UserRole.CANDIDATE,
            submitted_test.department,
        )
        client.post(
            f"/api/tests/{submitted_test.id}/submit",
            json={"answers": {}},
            headers=make_headers(second_candidate),
        )

        results = client.get(
            f"/api/tests/{submitted_test.id}/results", headers=employer_headers
        ).json()["results"]

        assert [r["candidate_email"] for r in results] == [
            "second@example.com",
            "candidate@example.com",
        ]

    def test_admin_sees_results(self, client, admin_headers, submitted_test):
        response = client.get(
            f"/api/tests/{submitted_test.id}/results", headers=admin_headers
        )

        assert response.status_code == 200

    def test_candidate_forbidden(self, client, candidate_headers, submitted_test):
        response = client.get(
            f"/api/tests/{submitted_test.id}/results", headers=candidate_headers
        )

        assert response.status_code == 403

    def test_no_results(self, client, employer_headers, two_question_test):
        response = client.get(
            f"/api/tests/{two_question_test.id}/results", headers=employer_headers
        )

        assert response.json()["results"] == []

    def test_unknown_test(self, client, employer_headers):
        response = client.get("/api/tests/999/results", headers=employer_headers)

        assert response.status_code == 404


class TestAnswerReview:
    """Tests for the review endpoints."""

    def test_candidate_reviews_own_answers(
        self, client, candidate_headers, submitted_test
    ):
        response = client.get(
            f"/api/tests/{submitted_test.id}/review", headers=candidate_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["test"]["title"] == "Python Basics"
        assert data["result"]["score"] == 50

        first, second = data["questions"]
        assert first["user_answer"] == "A"
        assert first["is_correct"] is True
        assert first["correct_answer"] == "A"
        assert first["explanation"] == "def defines a function."
        assert first["options"] == ["A", "B", "C", "D"]
        assert second["user_answer"] == "C"
        assert second["is_correct"] is False
        assert second["correct_answer"] == "B"

    def test_owner_reviews_candidate(
        self, client, employer_headers, candidate_user, submitted_test
    ):
        response = client.get(
            f"/api/tests/{submitted_test.id}/review/{candidate_user.id}",
            headers=employer_headers,
        )

        assert response.status_code == 200
        assert response.json()["result"]["candidate_name"] == "Cara Candidate"

    def test_admin_reviews_candidate(
        self, client, admin_headers, candidate_user, submitted_test
    ):
        response = client.get(
            f"/api/tests/{submitted_test.id}/review/{candidate_user.id}",
            headers=admin_headers,
        )

        assert response.status_code == 200

    def test_other_candidate_forbidden(
        self, client, make_headers, outsider_candidate, candidate_user, submitted_test
    ):
        response = client.get(
            f"/api/tests/{submitted_test.id}/review/{candidate_user.id}",
            headers=make_headers(outsider_candidate),
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to review these answers"

    def test_other_employer_forbidden(
        self, client, make_headers, other_employer, candidate_user, submitted_test
    ):
        response = client.get(
            f"/api/tests/{submitted_test.id}/review/{candidate_user.id}",
            headers=make_headers(other_employer),
        )

        assert response.status_code == 403

    def test_not_submitted(self, client, candidate_headers, two_question_test):
        response = client.get(
            f"/api/tests/{two_question_test.id}/review", headers=candidate_headers
        )

        assert response.status_code == 404
        assert response.json()["message"] == "No results found for this test"

    def test_skipped_question_has_no_answer(
        self, client, candidate_headers, two_question_test
    ):
        first, _ = two_question_test.questions
        client.post(
            f"/api/tests/{two_question_test.id}/submit",
            json={"answers": {str(first.id): "A"}},
            headers=candidate_headers,
        )

        questions = client.get(
            f"/api/tests/{two_question_test.id}/review", headers=candidate_headers
        ).json()["questions"]

        assert questions[1]["user_answer"] is None
        assert questions[1]["is_correct"] is False
