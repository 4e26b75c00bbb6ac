from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.constants import ExamStatusEnum, RoleEnum
from app.models.exam import Exam
from app.utils.time import utcnow
from tests.helpers.asserts import api_call, assert_error

EXAM_PAYLOAD = {
    "title": "Operating Systems Final",
    "description": "Processes, memory, file systems",
    "duration_minutes": 90,
    "total_marks": 20,
    "per_question_marks": 2,
    "negative_marking": 0.5,
    "total_questions": 10,
    "passing_marks": 8,
}


class TestExamEndpoints:
    def test_create_exam(self, client: TestClient, user_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        student = user_factory(role=RoleEnum.STUDENT)
        headers = login(conductor.email)

        response = client.post("/exams/", headers=headers, json={**EXAM_PAYLOAD, "assigned_to": [student.id]})

        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["created_by"] == conductor.id
        assert data["exam_status"] == "created"
        assert data["assigned_to"] == [student.id]
        assert data["can_students_join"] is False
        assert data["exam_code"] is None

    def test_create_exam_unknown_student(self, client: TestClient, user_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        response = client.post("/exams/", headers=login(conductor.email),
                               json={**EXAM_PAYLOAD, "assigned_to": [9999]})
        body = assert_error(response, 404, "NOT_FOUND")
        assert body["error"]["details"] == {"student_ids": [9999]}

    def test_student_cannot_create_exam(self, client: TestClient, token_for_role):
        headers = {"Authorization": f"Bearer {token_for_role('student')}"}
        response = client.post("/exams/", headers=headers, json=EXAM_PAYLOAD)
        assert_error(response, 403, "FORBIDDEN")

    def test_invalid_payload(self, client: TestClient, token_for_role):
        headers = {"Authorization": f"Bearer {token_for_role('conductor')}"}
        response = client.post("/exams/", headers=headers, json={**EXAM_PAYLOAD, "duration_minutes": 0})
        assert_error(response, 422, "VALIDATION_ERROR")

    def test_list_exams_scoped_to_owner(self, client: TestClient, user_factory, exam_factory, login):
        mine = user_factory(role=RoleEnum.CONDUCTOR)
        theirs = user_factory(role=RoleEnum.CONDUCTOR)
        admin = user_factory(role=RoleEnum.ADMIN)
        own_exam = exam_factory(mine)
        exam_factory(theirs)

        response = api_call(client, "GET", "/exams/", headers=login(mine.email))
        assert [e["id"] for e in response.json()["data"]] == [own_exam.id]

        response = api_call(client, "GET", "/exams/", headers=login(admin.email))
        assert len(response.json()["data"]) == 2

    def test_assigned_exams_for_student(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        student = user_factory(role=RoleEnum.STUDENT)
        assigned = exam_factory(conductor, students=[student])
        exam_factory(conductor)
        exam_factory(conductor, students=[student], is_active=False)

        response = api_call(client, "GET", "/exams/assigned", headers=login(student.email))
        assert [e["id"] for e in response.json()["data"]] == [assigned.id]

    def test_student_cannot_see_unassigned_exam(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        student = user_factory(role=RoleEnum.STUDENT)
        exam = exam_factory(conductor)
        response = client.get(f"/exams/{exam.id}", headers=login(student.email))
        assert_error(response, 404, "NOT_FOUND")

    def test_update_exam(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        exam = exam_factory(conductor)
        response = api_call(client, "PUT", f"/exams/{exam.id}", headers=login(conductor.email),
                            json={"title": "Renamed Exam", "passing_marks": 5})
        data = response.json()["data"]
        assert data["title"] == "Renamed Exam"
        assert data["passing_marks"] == 5

    def test_update_by_other_conductor_forbidden(self, client: TestClient, user_factory, exam_factory, login):
        owner = user_factory(role=RoleEnum.CONDUCTOR)
        other = user_factory(role=RoleEnum.CONDUCTOR)
        exam = exam_factory(owner)
        response = client.put(f"/exams/{exam.id}", headers=login(other.email), json={"title": "Hijacked"})
        assert_error(response, 403, "FORBIDDEN")

    def test_delete_exam_cascades(self, client: TestClient, db_session: Session, user_factory,
                                  exam_factory, question_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        exam = exam_factory(conductor)
        question_factory(exam)
        exam_id = exam.id

        response = api_call(client, "DELETE", f"/exams/{exam_id}", headers=login(conductor.email))
        assert response.json()["data"]["id"] == exam_id

        db_session.expire_all()
        assert db_session.get(Exam, exam_id) is None
        assert_error(client.get(f"/questions/exam/{exam_id}", headers=login(conductor.email)), 404, "NOT_FOUND")

    def test_assign_and_unassign(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        first = user_factory(role=RoleEnum.STUDENT)
        second = user_factory(role=RoleEnum.STUDENT)
        exam = exam_factory(conductor, students=[first])
        headers = login(conductor.email)

        response = api_call(client, "POST", f"/exams/{exam.id}/assign", headers=headers,
                            json={"student_ids": [first.id, second.id]})
        assert sorted(response.json()["data"]["assigned_to"]) == sorted([first.id, second.id])

        response = api_call(client, "POST", f"/exams/{exam.id}/unassign", headers=headers,
                            json={"student_ids": [first.id]})
        assert response.json()["data"]["assigned_to"] == [second.id]


class TestExamLifecycleEndpoints:
    def test_schedule_generate_start_end(self, client: TestClient, db_session: Session,
                                         user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        exam = exam_factory(conductor)
        headers = login(conductor.email)
        start = utcnow() + timedelta(hours=2)

        response = api_call(client, "POST", f"/exams/{exam.id}/schedule", headers=headers,
                            json={"scheduled_start_time": start.isoformat()})
        assert response.json()["data"]["exam_status"] == "scheduled"

        response = api_call(client, "POST", f"/exams/{exam.id}/generate-code", headers=headers)
        code_info = response.json()["data"]
        assert code_info["exam_id"] == exam.id
        assert code_info["minutes_until_start"] >= 119

        response = client.post(f"/exams/{exam.id}/start", headers=headers)
        assert_error(response, 400, "PRECONDITION_FAILED")

        # Move the clock forward by pulling the schedule into the past
        db_session.expire_all()
        stored = db_session.get(Exam, exam.id)
        stored.scheduled_start_time = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = api_call(client, "POST", f"/exams/{exam.id}/start", headers=headers)
        data = response.json()["data"]
        assert data["exam_status"] == "active"
        assert data["can_students_join"] is True

        assert_error(client.post(f"/exams/{exam.id}/start", headers=headers), 400, "INVALID_STATE")

        response = api_call(client, "POST", f"/exams/{exam.id}/end", headers=headers)
        assert response.json()["data"]["exam_status"] == "completed"

    def test_generate_code_too_late(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        exam = exam_factory(conductor, exam_status=ExamStatusEnum.SCHEDULED,
                            scheduled_start_time=utcnow() + timedelta(minutes=10))
        response = client.post(f"/exams/{exam.id}/generate-code", headers=login(conductor.email))
        body = assert_error(response, 400, "PRECONDITION_FAILED")
        assert body["error"]["details"]["required_lead_minutes"] == 30

    def test_schedule_in_past(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        exam = exam_factory(conductor)
        response = client.post(f"/exams/{exam.id}/schedule", headers=login(conductor.email),
                               json={"scheduled_start_time": (utcnow() - timedelta(hours=1)).isoformat()})
        assert_error(response, 400, "PRECONDITION_FAILED")

    def test_validate_access(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        student = user_factory(role=RoleEnum.STUDENT, examiner_id=conductor.id)
        exam = exam_factory(conductor, students=[student], exam_status=ExamStatusEnum.ACTIVE,
                            can_students_join=True, exam_code="OPEN1234")

        response = api_call(client, "POST", "/exams/validate-access", headers=login(student.email),
                            json={"exam_code": "OPEN1234"})
        data = response.json()["data"]
        assert data["id"] == exam.id
        assert "exam_code" not in data

    def test_validate_access_inactive_exam(self, client: TestClient, user_factory, exam_factory, login):
        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        student = user_factory(role=RoleEnum.STUDENT, examiner_id=conductor.id)
        exam_factory(conductor, students=[student], exam_status=ExamStatusEnum.SCHEDULED,
                     exam_code="WAIT1234")
        response = client.post("/exams/validate-access", headers=login(student.email),
                               json={"exam_code": "WAIT1234"})
        assert_error(response, 400, "INVALID_STATE")

    def test_statistics(self, client: TestClient, db_session: Session, user_factory, exam_factory, login):
        from app.core.constants import ExamAttemptStatusEnum
        from app.models.exam_attempt import ExamAttempt

        conductor = user_factory(role=RoleEnum.CONDUCTOR)
        students = [user_factory(role=RoleEnum.STUDENT) for _ in range(3)]
        exam = exam_factory(conductor, students=students, total_marks=10, passing_marks=5)
        db_session.add_all([
            ExamAttempt(exam_id=exam.id, student_id=students[0].id, status=ExamAttemptStatusEnum.SUBMITTED,
                        total_obtained_marks=8, is_passed=True),
            ExamAttempt(exam_id=exam.id, student_id=students[1].id, status=ExamAttemptStatusEnum.SUBMITTED,
                        total_obtained_marks=3, is_passed=False),
            ExamAttempt(exam_id=exam.id, student_id=students[2].id, status=ExamAttemptStatusEnum.IN_PROGRESS),
        ])
        db_session.commit()

        response = api_call(client, "GET", f"/exams/{exam.id}/statistics", headers=login(conductor.email))
        stats = response.json()["data"]
        assert stats["total_assigned"] == 3
        assert stats["total_attempted"] == 2
        assert stats["total_passed"] == 1
        assert stats["pass_percentage"] == 50.0
        assert stats["average_score"] == 5.5
        assert stats["highest_score"] == 8
