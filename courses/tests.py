import json
from datetime import timedelta
from io import StringIO
from unittest import mock

import requests
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from courses import events, services
from courses.client import CoursesServiceClient
from courses.models import Course, CourseMate, Group
from courses.rendering import render_description
from gateway.tests import factories
from solutions.models import Solution


class CourseWorkflowTests(TestCase):
    def setUp(self):
        self.lecturer = factories.create_lecturer()
        self.student = factories.create_student()
        self.course = factories.create_course(mentor=self.lecturer)

    def test_add_student_creates_pending_mate_and_notifies(self):
        with mock.patch("courses.notifications.send_course_event") as send:
            self.assertTrue(services.add_student(self.course.pk, self.student.pk))

        mate = CourseMate.objects.get(course=self.course, student=self.student)
        self.assertFalse(mate.is_accepted)
        send.assert_called_once()
        event_name, payload = send.call_args.args
        self.assertEqual(event_name, "NewCourseMateEvent")
        self.assertEqual(payload["student_id"], self.student.pk)
        self.assertEqual(payload["mentor_ids"], [self.lecturer.pk])

    def test_add_student_twice_is_refused(self):
        services.add_student(self.course.pk, self.student.pk)

        self.assertFalse(services.add_student(self.course.pk, self.student.pk))
        self.assertEqual(CourseMate.objects.count(), 1)

    def test_accept_and_reject(self):
        other = factories.create_student()
        services.add_student(self.course.pk, self.student.pk)
        services.add_student(self.course.pk, other.pk)

        self.assertTrue(services.accept_course_mate(self.course.pk, self.student.pk))
        self.assertTrue(services.reject_course_mate(self.course.pk, other.pk))

        self.assertTrue(CourseMate.objects.get(student=self.student).is_accepted)
        self.assertFalse(CourseMate.objects.filter(student=other).exists())

    def test_workflows_on_unknown_course_return_false(self):
        self.assertFalse(services.add_student(999999, self.student.pk))
        self.assertFalse(services.accept_course_mate(999999, self.student.pk))
        self.assertFalse(services.reject_course_mate(self.course.pk, self.student.pk))

    def test_accept_lecturer_removes_student_membership(self):
        colleague = factories.create_lecturer()
        factories.enroll(self.course, colleague)
        received = []

        def receiver(sender, **kwargs):
            received.append(kwargs)

        events.lecturer_invited_to_course.connect(receiver)
        self.addCleanup(events.lecturer_invited_to_course.disconnect, receiver)

        self.assertTrue(services.accept_lecturer(self.course.pk, colleague))

        self.assertTrue(self.course.mentors.filter(pk=colleague.pk).exists())
        self.assertFalse(CourseMate.objects.filter(student=colleague).exists())
        self.assertEqual(received[0]["mentor_id"], colleague.pk)

    def test_lecturers_available_for_course(self):
        colleague = factories.create_lecturer(last_name="Борисов")

        available = services.get_lecturers_available_for_course(self.course.pk)

        self.assertEqual([account.user_id for account in available], [colleague.pk])

    def test_course_lecturers_of_unknown_course(self):
        with self.assertRaises(Course.DoesNotExist):
            services.get_course_lecturers(999999)

    def test_user_courses_by_role(self):
        factories.enroll(self.course, self.student)
        pending_course = factories.create_course(mentor=self.lecturer)
        factories.enroll(pending_course, self.student, accepted=False)
        client = CoursesServiceClient()

        self.assertEqual(
            [course.id for course in client.get_all_user_courses(self.student)],
            [self.course.pk],
        )
        self.assertEqual(
            {course.id for course in client.get_all_user_courses(self.lecturer)},
            {self.course.pk, pending_course.pk},
        )

    def test_create_course_group_deduplicates_members(self):
        group_id = CoursesServiceClient().create_course_group(
            [self.student.pk, self.student.pk], self.course.pk
        )

        group = Group.objects.get(pk=group_id)
        self.assertEqual(list(group.group_mates.values_list("student_id", flat=True)), [self.student.pk])


class CourseDataTests(TestCase):
    def test_course_data_from_task(self):
        lecturer = factories.create_lecturer()
        student = factories.create_student()
        course = factories.create_course(mentor=lecturer, students=[student])
        homework = factories.create_homework(course)
        task = factories.create_task(homework, deadline_date=timezone.now())
        factories.create_group(course, [student])

        data = CoursesServiceClient().get_course_by_task(task.pk)

        self.assertEqual(data.id, course.pk)
        self.assertEqual(data.mentor_ids, (lecturer.pk,))
        self.assertEqual(data.accepted_student_ids, [student.pk])
        self.assertEqual([t.id for t in data.tasks], [task.pk])
        self.assertTrue(data.tasks[0].has_deadline)
        self.assertEqual(data.groups[0].student_ids, (student.pk,))
        self.assertTrue(data.is_mentor(lecturer.pk))
        self.assertFalse(data.is_mentor(student.pk))

    def test_unknown_task(self):
        self.assertIsNone(CoursesServiceClient().get_course_by_task(999999))


class CourseApiTests(TestCase):
    def setUp(self):
        self.lecturer = factories.create_lecturer(email="lecturer@example.com")
        self.student = factories.create_student()
        self.course = factories.create_course(mentor=self.lecturer)

    def post_json(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type="application/json")

    def test_lecturer_creates_course(self):
        self.client.force_login(self.lecturer)

        response = self.post_json("/api/courses/create", {"name": "Матан", "group_name": "Б01"})

        self.assertEqual(response.status_code, 200)
        course = Course.objects.get(pk=response.json())
        self.assertTrue(course.mentors.filter(pk=self.lecturer.pk).exists())

    def test_student_cannot_create_course(self):
        self.client.force_login(self.student)

        response = self.post_json("/api/courses/create", {"name": "Матан"})

        self.assertEqual(response.status_code, 403)

    def test_sign_in_and_accept(self):
        self.client.force_login(self.student)
        self.assertEqual(
            self.post_json(f"/api/courses/signInCourse/{self.course.pk}").status_code, 200
        )

        self.client.force_login(self.lecturer)
        response = self.post_json(
            f"/api/courses/acceptStudent/{self.course.pk}/{self.student.pk}"
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(CourseMate.objects.get(student=self.student).is_accepted)

    def test_only_mentor_accepts_students(self):
        factories.enroll(self.course, self.student, accepted=False)
        self.client.force_login(factories.create_lecturer())

        response = self.post_json(
            f"/api/courses/acceptStudent/{self.course.pk}/{self.student.pk}"
        )

        self.assertEqual(response.status_code, 403)

    def test_invite_code_visible_to_mentors_only(self):
        self.client.force_login(self.lecturer)
        self.assertEqual(
            self.client.get(f"/api/courses/{self.course.pk}").json()["invite_code"],
            self.course.invite_code,
        )

        self.client.force_login(self.student)
        self.assertIsNone(self.client.get(f"/api/courses/{self.course.pk}").json()["invite_code"])

    def test_unknown_course_is_not_found(self):
        self.client.force_login(self.student)

        self.assertEqual(self.client.get("/api/courses/999999").status_code, 404)

    def test_accept_lecturer_by_email(self):
        colleague = factories.create_lecturer(email="colleague@example.com")
        self.client.force_login(self.lecturer)

        response = self.post_json(
            f"/api/courses/acceptLecturer/{self.course.pk}/colleague@example.com"
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(self.course.mentors.filter(pk=colleague.pk).exists())

    def test_accept_lecturer_rejects_students(self):
        factories.create_student(email="student@example.com")
        self.client.force_login(self.lecturer)

        response = self.post_json(
            f"/api/courses/acceptLecturer/{self.course.pk}/student@example.com"
        )

        self.assertEqual(response.status_code, 400)

    def test_accept_unknown_lecturer(self):
        self.client.force_login(self.lecturer)

        response = self.post_json(
            f"/api/courses/acceptLecturer/{self.course.pk}/nobody@example.com"
        )

        self.assertEqual(response.status_code, 404)

    def test_all_data_hides_unpublished_tasks_from_students(self):
        factories.enroll(self.course, self.student)
        homework = factories.create_homework(self.course, description="**Важно**")
        published = factories.create_task(homework, description="Сделайте *это*")
        factories.create_task(homework, publication_date=timezone.now() + timedelta(days=1))

        self.client.force_login(self.student)
        payload = self.client.get(f"/api/courses/getAllData/{self.course.pk}").json()

        tasks = payload["homeworks"][0]["tasks"]
        self.assertEqual([task["id"] for task in tasks], [published.pk])
        self.assertIn("<em>это</em>", tasks[0]["description_html"])
        self.assertIn("<strong>Важно</strong>", payload["homeworks"][0]["description_html"])

        self.client.force_login(self.lecturer)
        payload = self.client.get(f"/api/courses/getAllData/{self.course.pk}").json()
        self.assertEqual(len(payload["homeworks"][0]["tasks"]), 2)


class NotificationTests(TestCase):
    @override_settings(COURSE_EVENTS_WEBHOOK_URL="http://hooks.local/course-events")
    def test_events_are_posted_to_webhook(self):
        course = factories.create_course(mentor=factories.create_lecturer())
        student = factories.create_student()

        with mock.patch("courses.notifications.requests.post") as post:
            post.return_value.status_code = 200
            services.add_student(course.pk, student.pk)

        post.assert_called_once()
        self.assertEqual(post.call_args.args[0], "http://hooks.local/course-events")
        self.assertEqual(post.call_args.kwargs["json"]["type"], "NewCourseMateEvent")
        self.assertEqual(post.call_args.kwargs["json"]["course_id"], course.pk)

    @override_settings(COURSE_EVENTS_WEBHOOK_URL="http://hooks.local/course-events")
    def test_webhook_failure_does_not_break_enrollment(self):
        course = factories.create_course()
        student = factories.create_student()

        with mock.patch(
            "courses.notifications.requests.post",
            side_effect=requests.ConnectionError("refused"),
        ):
            self.assertTrue(services.add_student(course.pk, student.pk))

        self.assertTrue(CourseMate.objects.filter(student=student).exists())

    @override_settings(COURSE_EVENTS_WEBHOOK_URL="")
    def test_webhook_skipped_without_url(self):
        with mock.patch("courses.notifications.requests.post") as post:
            services.add_student(factories.create_course().pk, factories.create_student().pk)

        post.assert_not_called()


class RenderDescriptionTests(TestCase):
    def test_markdown_is_rendered(self):
        self.assertEqual(render_description("**жирный**"), "<p><strong>жирный</strong></p>")

    def test_scripts_are_stripped(self):
        html = render_description("<script>alert(1)</script>Текст")

        self.assertNotIn("<script>", html)
        self.assertIn("Текст", html)

    def test_empty(self):
        self.assertEqual(render_description(None), "")


class SeedDemoCourseCommandTests(TestCase):
    def test_command_is_idempotent(self):
        call_command("seed_demo_course", stdout=StringIO())
        call_command("seed_demo_course", stdout=StringIO())

        course = Course.objects.get(name="Алгоритмы и структуры данных")
        self.assertEqual(course.mentors.count(), 1)
        self.assertEqual(course.course_mates.filter(is_accepted=True).count(), 3)
        self.assertEqual(Solution.objects.filter(task__homework__course=course).count(), 3)
