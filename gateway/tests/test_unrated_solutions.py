from datetime import timedelta

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from gateway.tests import factories
from gateway.views import is_sent_after_deadline
from solutions.models import Solution


class SentAfterDeadlineTests(SimpleTestCase):
    def setUp(self):
        self.deadline = timezone.now()

    def test_first_try_after_deadline(self):
        self.assertTrue(
            is_sent_after_deadline(True, self.deadline + timedelta(seconds=1), self.deadline)
        )

    def test_exactly_on_deadline_is_in_time(self):
        self.assertFalse(is_sent_after_deadline(True, self.deadline, self.deadline))

    def test_retry_is_never_late(self):
        self.assertFalse(
            is_sent_after_deadline(False, self.deadline + timedelta(days=1), self.deadline)
        )

    def test_task_without_deadline(self):
        self.assertFalse(is_sent_after_deadline(True, self.deadline, None))


class UnratedSolutionsTests(TestCase):
    def setUp(self):
        now = timezone.now()
        self.lecturer = factories.create_lecturer()
        self.alice = factories.create_student(first_name="Алиса", last_name="Иванова")
        self.bob = factories.create_student(first_name="Борис", last_name="Андреев")
        self.carol = factories.create_student(first_name="Вера", last_name="Сидорова")
        self.course = factories.create_course(
            mentor=self.lecturer,
            name="Алгоритмы",
            group_name="Б05-123",
            students=[self.alice, self.bob, self.carol],
        )
        self.homework = factories.create_homework(self.course, title="ДЗ 1")
        self.task = factories.create_task(
            self.homework,
            title="Сортировки",
            publication_date=now - timedelta(days=5),
            deadline_date=now - timedelta(days=1),
        )
        self.other_task = factories.create_task(
            self.homework, title="Кучи", publication_date=now - timedelta(days=5)
        )

        self.late = factories.create_solution(
            self.task, self.alice, publication_date=now - timedelta(hours=1)
        )
        factories.create_solution(
            self.task,
            self.bob,
            state=Solution.State.RATED,
            rating=5,
            publication_date=now - timedelta(days=2),
        )
        self.retry = factories.create_solution(
            self.task, self.bob, publication_date=now - timedelta(hours=2)
        )
        factories.create_solution(
            self.task,
            self.carol,
            state=Solution.State.RATED,
            rating=10,
            publication_date=now - timedelta(days=3),
        )
        self.other = factories.create_solution(self.other_task, self.carol)

        foreign_course = factories.create_course(
            mentor=factories.create_lecturer(), students=[self.alice]
        )
        foreign_task = factories.create_task(factories.create_homework(foreign_course))
        factories.create_solution(foreign_task, self.alice)

        self.client.force_login(self.lecturer)

    def previews(self, **params):
        response = self.client.get("/api/solutions/unratedSolutions", params)
        self.assertEqual(response.status_code, 200)
        return {item["solution_id"]: item for item in response.json()["unrated_solutions"]}

    def test_lists_latest_unrated_solutions_of_mentored_courses(self):
        previews = self.previews()

        self.assertEqual(set(previews), {self.late.pk, self.retry.pk, self.other.pk})

    def test_preview_fields(self):
        preview = self.previews()[self.late.pk]

        self.assertEqual(preview["student"]["user_id"], self.alice.pk)
        self.assertEqual(preview["course_title"], "Алгоритмы / Б05-123")
        self.assertEqual(preview["course_id"], self.course.pk)
        self.assertEqual(preview["homework_title"], "ДЗ 1")
        self.assertEqual(preview["task_title"], "Сортировки")
        self.assertEqual(preview["task_id"], self.task.pk)
        self.assertTrue(preview["is_first_try"])
        self.assertIsNone(preview["group_id"])
        self.assertFalse(preview["is_course_completed"])

    def test_sent_after_deadline_only_for_late_first_try(self):
        previews = self.previews()

        self.assertTrue(previews[self.late.pk]["sent_after_deadline"])
        self.assertFalse(previews[self.retry.pk]["is_first_try"])
        self.assertFalse(previews[self.retry.pk]["sent_after_deadline"])
        self.assertFalse(previews[self.other.pk]["sent_after_deadline"])

    def test_task_filter(self):
        previews = self.previews(taskId=self.other_task.pk)

        self.assertEqual(set(previews), {self.other.pk})

    def test_task_filter_outside_mentored_courses_is_empty(self):
        self.assertEqual(self.previews(taskId=999999), {})

    def test_invalid_task_filter(self):
        response = self.client.get("/api/solutions/unratedSolutions", {"taskId": "abc"})

        self.assertEqual(response.status_code, 400)

    def test_students_are_forbidden(self):
        self.client.force_login(self.alice)

        response = self.client.get("/api/solutions/unratedSolutions")

        self.assertEqual(response.status_code, 403)
