from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from gateway.tests import factories
from solutions.models import Solution


class CoursePageFixtureMixin:
    def setUp(self):
        self.lecturer = factories.create_lecturer(first_name="Пётр", last_name="Лекторов")
        self.alice = factories.create_student(first_name="Алиса", last_name="Иванова")
        self.bob = factories.create_student(first_name="Борис", last_name="Андреев")
        self.carol = factories.create_student(first_name="Вера", last_name="Сидорова")
        self.course = factories.create_course(
            mentor=self.lecturer, students=[self.alice, self.bob, self.carol]
        )
        self.homework = factories.create_homework(self.course, title="ДЗ 1")
        self.task = factories.create_task(self.homework, title="Сортировки", max_rating=10)
        self.other_task = factories.create_task(self.homework, title="Кучи", max_rating=5)
        self.group = factories.create_group(self.course, [self.alice, self.bob])

        self.group_solution = factories.create_solution(
            self.task,
            self.alice,
            group=self.group,
            state=Solution.State.RATED,
            rating=7,
            lecturer=self.lecturer,
        )
        self.other_task_solution = factories.create_solution(
            self.other_task, self.alice, group=self.group
        )


class StudentSolutionsPageTests(CoursePageFixtureMixin, TestCase):
    def url(self, task_id, student_id):
        return f"/api/solutions/taskSolution/{task_id}/{student_id}"

    def test_student_sees_own_solutions_with_group_and_lecturer(self):
        self.client.force_login(self.alice)

        response = self.client.get(self.url(self.task.pk, self.alice.pk))

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["course_id"], self.course.pk)
        self.assertEqual(payload["task"]["id"], self.task.pk)
        self.assertEqual(
            [entry["task_id"] for entry in payload["task_solutions"]],
            [self.task.pk, self.other_task.pk],
        )

        task_entry = payload["task_solutions"][0]
        self.assertEqual(task_entry["max_rating"], 10)
        self.assertEqual(task_entry["title"], "Сортировки")
        solution = task_entry["solutions"][0]
        self.assertEqual(solution["id"], self.group_solution.pk)
        self.assertEqual(
            {mate["user_id"] for mate in solution["group_mates"]},
            {self.alice.pk, self.bob.pk},
        )
        self.assertEqual(solution["lecturer"]["user_id"], self.lecturer.pk)

    def test_group_mates_only_resolved_for_requested_task(self):
        self.client.force_login(self.alice)

        payload = self.client.get(self.url(self.task.pk, self.alice.pk)).json()

        other_entry = payload["task_solutions"][1]
        self.assertEqual(other_entry["solutions"][0]["id"], self.other_task_solution.pk)
        self.assertIsNone(other_entry["solutions"][0]["group_mates"])
        self.assertIsNone(other_entry["solutions"][0]["lecturer"])

    def test_group_solution_is_listed_for_every_member(self):
        self.client.force_login(self.bob)

        payload = self.client.get(self.url(self.task.pk, self.bob.pk)).json()

        self.assertEqual(
            [solution["id"] for solution in payload["task_solutions"][0]["solutions"]],
            [self.group_solution.pk],
        )

    def test_course_mates_include_students_and_mentors(self):
        self.client.force_login(self.alice)

        payload = self.client.get(self.url(self.task.pk, self.alice.pk)).json()

        self.assertEqual(
            {mate["user_id"] for mate in payload["course_mates"]},
            {self.alice.pk, self.bob.pk, self.carol.pk, self.lecturer.pk},
        )

    def test_mentor_can_open_any_student_page(self):
        self.client.force_login(self.lecturer)

        response = self.client.get(self.url(self.task.pk, self.carol.pk))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["task_solutions"][0]["solutions"], [])

    def test_student_cannot_open_another_student_page(self):
        self.client.force_login(self.alice)

        response = self.client.get(self.url(self.task.pk, self.carol.pk))

        self.assertEqual(response.status_code, 404)

    def test_not_accepted_student_is_not_found(self):
        pending = factories.create_student()
        factories.enroll(self.course, pending, accepted=False)
        self.client.force_login(self.lecturer)

        response = self.client.get(self.url(self.task.pk, pending.pk))

        self.assertEqual(response.status_code, 404)

    def test_unknown_task_is_not_found(self):
        self.client.force_login(self.alice)

        response = self.client.get(self.url(self.task.pk + 1000, self.alice.pk))

        self.assertEqual(response.status_code, 404)


class TaskSolutionsPageTests(CoursePageFixtureMixin, TestCase):
    def url(self, task_id):
        return f"/api/solutions/tasks/{task_id}"

    def test_rows_are_ordered_by_surname_then_name(self):
        self.client.force_login(self.lecturer)

        response = self.client.get(self.url(self.task.pk))

        self.assertEqual(response.status_code, 200)
        surnames = [row["user"]["surname"] for row in response.json()["students_solutions"]]
        self.assertEqual(surnames, ["Андреев", "Иванова", "Сидорова"])

    def test_student_without_solutions_gets_empty_list(self):
        self.client.force_login(self.lecturer)

        rows = self.client.get(self.url(self.task.pk)).json()["students_solutions"]

        by_user = {row["user"]["user_id"]: row["solutions"] for row in rows}
        self.assertEqual(by_user[self.carol.pk], [])
        self.assertEqual([s["id"] for s in by_user[self.alice.pk]], [self.group_solution.pk])
        self.assertEqual([s["id"] for s in by_user[self.bob.pk]], [self.group_solution.pk])

    def test_solutions_carry_group_mates_and_lecturer(self):
        self.client.force_login(self.lecturer)

        rows = self.client.get(self.url(self.task.pk)).json()["students_solutions"]

        solution = next(row for row in rows if row["user"]["user_id"] == self.alice.pk)[
            "solutions"
        ][0]
        self.assertEqual(
            {mate["user_id"] for mate in solution["group_mates"]},
            {self.alice.pk, self.bob.pk},
        )
        self.assertEqual(solution["lecturer"]["surname"], "Лекторов")

    def test_stats_cover_published_tasks_with_titles(self):
        factories.create_task(
            self.homework,
            title="Черновик",
            publication_date=timezone.now() + timedelta(days=3),
        )
        self.client.force_login(self.lecturer)

        stats = self.client.get(self.url(self.task.pk)).json()["stats_for_tasks"]

        self.assertEqual([item["title"] for item in stats], ["Сортировки", "Кучи"])
        self.assertEqual(stats[0]["average_rating"], 7.0)
        self.assertEqual(stats[0]["count_unrated_solutions"], 0)
        self.assertIsNone(stats[1]["average_rating"])
        self.assertEqual(stats[1]["count_unrated_solutions"], 1)

    def test_not_a_mentor_is_forbidden(self):
        stranger = factories.create_lecturer()
        self.client.force_login(stranger)

        response = self.client.get(self.url(self.task.pk))

        self.assertEqual(response.status_code, 403)

    def test_student_is_forbidden(self):
        self.client.force_login(self.alice)

        response = self.client.get(self.url(self.task.pk))

        self.assertEqual(response.status_code, 403)

    def test_anonymous_is_rejected(self):
        response = self.client.get(self.url(self.task.pk))

        self.assertIn(response.status_code, (401, 403))
