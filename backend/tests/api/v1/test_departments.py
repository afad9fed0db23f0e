"""
Tests for department endpoints.
"""
from app.models import Department, User
from app.models import Test as TestRow


class TestListDepartments:
    def test_list_ordered_by_name_with_counts(
        self,
        client,
        candidate_headers,
        marketing,
        engineering,
        two_question_test,
    ):
        response = client.get("/api/departments", headers=candidate_headers)

        assert response.status_code == 200
        departments = response.json()["departments"]
        assert [d["department_name"] for d in departments] == [
            "Engineering",
            "Marketing",
        ]
        # employer_user and candidate_user belong to Engineering
        assert departments[0]["user_count"] == 2
        assert departments[0]["test_count"] == 1
        assert departments[1]["user_count"] == 0
        assert departments[1]["test_count"] == 0

    def test_requires_authentication(self, client):
        response = client.get("/api/departments")

        assert response.status_code in (401, 403)

    def test_get_department(self, client, admin_headers, engineering):
        response = client.get(
            f"/api/departments/{engineering.id}", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["department"]["description"] == "Builders"

    def test_get_unknown_department(self, client, admin_headers):
        response = client.get("/api/departments/999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Department not found"}


class TestCreateDepartment:
    """Tests for POST /api/departments."""

    def test_admin_creates_department(self, client, admin_headers, db_session):
        response = client.post(
            "/api/departments",
            json={"department_name": "  Finance ", "description": "Money"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Department created successfully"
        assert data["department"]["department_name"] == "Finance"
        assert data["department"]["is_active"] is True
        assert db_session.query(Department).count() == 1

    def test_name_required(self, client, admin_headers):
        for body in ({}, {"department_name": ""}, {"department_name": "   "}):
            response = client.post("/api/departments", json=body, headers=admin_headers)

            assert response.status_code == 400
            assert response.json()["message"] == "Department name is required"

    def test_duplicate_name_rejected(self, client, admin_headers, engineering):
        response = client.post(
            "/api/departments",
            json={"department_name": "Engineering"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "A department with this name already exists"

    def test_non_admin_forbidden(self, client, employer_headers, db_session):
        response = client.post(
            "/api/departments",
            json={"department_name": "Finance"},
            headers=employer_headers,
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"
        assert db_session.query(Department).filter(
            Department.department_name == "Finance"
        ).count() == 0


class TestUpdateDepartment:
    """Tests for PUT /api/departments/{id}."""

    def test_update(self, client, admin_headers, engineering, db_session):
        response = client.put(
            f"/api/departments/{engineering.id}",
            json={
                "department_name": "Platform Engineering",
                "description": "Infra",
                "is_active": False,
            },
            headers=admin_headers,
        )

        assert response.status_code == 200
        department = response.json()["department"]
        assert department["department_name"] == "Platform Engineering"
        assert department["description"] == "Infra"
        assert department["is_active"] is False

    def test_keeping_own_name_allowed(self, client, admin_headers, engineering):
        response = client.put(
            f"/api/departments/{engineering.id}",
            json={"department_name": "Engineering", "description": "Still builders"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["department"]["is_active"] is True

    def test_rename_to_existing_name_rejected(
        self, client, admin_headers, engineering, marketing
    ):
        response = client.put(
            f"/api/departments/{marketing.id}",
            json={"department_name": "Engineering"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_unknown_department(self, client, admin_headers):
        response = client.put(
            "/api/departments/999",
            json={"department_name": "Nope"},
            headers=admin_headers,
        )

        assert response.status_code == 404


class TestDeleteDepartment:
    """Tests for DELETE /api/departments/{id}."""

    def test_delete_unassigns_users_and_tests(
        self,
        client,
        admin_headers,
        engineering,
        candidate_user,
        two_question_test,
        db_session,
    ):
        department_id = engineering.id
        user_id = candidate_user.id
        test_id = two_question_test.id

        response = client.delete(
            f"/api/departments/{department_id}", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": (
                "Department deleted successfully. "
                "Users and tests have been unassigned."
            ),
        }
        db_session.expire_all()
        assert db_session.get(Department, department_id) is None
        assert db_session.get(User, user_id).department_id is None
        assert db_session.get(TestRow, test_id).department_id is None

    def test_question_bank_protected(self, client, admin_headers, db_session):
        bank = Department(department_name="question bank")
        db_session.add(bank)
        db_session.commit()

        response = client.delete(f"/api/departments/{bank.id}", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete the Question Bank department"
        db_session.expire_all()
        assert db_session.get(Department, bank.id) is not None

    def test_non_admin_forbidden(self, client, employer_headers, engineering):
        response = client.delete(
            f"/api/departments/{engineering.id}", headers=employer_headers
        )

        assert response.status_code == 403

    def test_unknown_department(self, client, admin_headers):
        response = client.delete("/api/departments/999", headers=admin_headers)

        assert response.status_code == 404
