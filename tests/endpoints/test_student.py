from fastapi.testclient import TestClient

from app.core.constants import RoleEnum
from tests.helpers.asserts import api_call, assert_error

STUDENT_PAYLOAD = {
    "full_name": "Linus Student",
    "email": "linus@example.com",
    "password": "secret123",
    "registration_number": "CS-042",
    "department": "Computer Science",
    "semester": "5",
}


class TestStudentEndpoints:
    def test_conductor_onboards_student(self, client: TestClient, user_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        headers = login(conductor.email)

        response = client.post("/students/", headers=headers, json=STUDENT_PAYLOAD)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["role"] == "student"
        assert data["examiner_id"] == conductor.id

        response = api_call(client, "GET", "/students/", headers=headers)
        assert [s["id"] for s in response.json()["data"]] == [data["id"]]

    def test_duplicate_registration_number(self, client: TestClient, user_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        headers = login(conductor.email)
        api_call(client, "POST", "/students/", headers=headers, json=STUDENT_PAYLOAD)
        response = client.post("/students/", headers=headers,
                               json={**STUDENT_PAYLOAD, "email": "other@example.com"})
        assert_error(response, 409, "CONFLICT")

    def test_conductor_cannot_manage_foreign_student(self, client: TestClient, user_factory, login):
        owner = user_factory(role=RoleEnum.CONDUCTOR)
        other = user_factory(role=RoleEnum.CONDUCTOR)
        student = user_factory(role=RoleEnum.STUDENT, examiner_id=owner.id)

        response = client.put(f"/students/{student.id}", headers=login(other.email), json={"semester": "6"})
        assert_error(response, 403, "FORBIDDEN")

    def test_update_requires_a_field(self, client: TestClient, user_factory, login):
        admin = user_factory(role=RoleEnum.ADMIN)
        student = user_factory(role=RoleEnum.STUDENT)
        response = client.put(f"/students/{student.id}", headers=login(admin.email), json={})
        assert_error(response, 422, "VALIDATION_ERROR")

    def test_deactivate_blocks_login(self, client: TestClient, user_factory, login):
        admin = user_factory(role=RoleEnum.ADMIN)
        student = user_factory(role=RoleEnum.STUDENT)
        headers = login(admin.email)

        response = api_call(client, "POST", f"/students/{student.id}/deactivate", headers=headers)
        assert response.json()["data"]["is_active"] is False
        response = client.post("/auth/login", json={"email": student.email, "password": "testpass123"})
        assert response.status_code == 401

        response = api_call(client, "POST", f"/students/{student.id}/activate", headers=headers)
        assert response.json()["data"]["is_active"] is True

    def test_delete_student(self, client: TestClient, user_factory, login):
        admin = user_factory(role=RoleEnum.ADMIN)
        student = user_factory(role=RoleEnum.STUDENT)
        headers = login(admin.email)

        api_call(client, "DELETE", f"/students/{student.id}", headers=headers)
        assert_error(client.get(f"/students/{student.id}", headers=headers), 404, "NOT_FOUND")

    def test_student_cannot_list_students(self, client: TestClient, token_for_role):
        headers = {"Authorization": f"Bearer {token_for_role('student')}"}
        assert_error(client.get("/students/", headers=headers), 403, "FORBIDDEN")
