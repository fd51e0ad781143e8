from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import exceptions

from gateway.tests import factories
from solutions import services
from solutions.models import Solution


class PostSolutionTests(TestCase):
    def setUp(self):
        self.student = factories.create_student()
        self.course = factories.create_course(students=[self.student])
        self.homework = factories.create_homework(self.course)

    def test_unpublished_task_rejects_solution(self):
        task = factories.create_task(
            self.homework, publication_date=timezone.now() + timedelta(days=1)
        )

        with self.assertRaises(exceptions.ValidationError):
            services.post_solution(task.pk, self.student.pk)

    def test_strict_deadline_rejects_late_solution(self):
        task = factories.create_task(
            self.homework,
            deadline_date=timezone.now() - timedelta(hours=1),
            is_deadline_strict=True,
        )

        with self.assertRaises(exceptions.ValidationError):
            services.post_solution(task.pk, self.student.pk)

    def test_soft_deadline_accepts_late_solution(self):
        task = factories.create_task(
            self.homework, deadline_date=timezone.now() - timedelta(hours=1)
        )

        solution = services.post_solution(task.pk, self.student.pk, comment="поздно")

        self.assertEqual(solution.state, Solution.State.POSTED)
        self.assertGreater(solution.publication_date, task.deadline_date)

    def test_unknown_task(self):
        with self.assertRaises(exceptions.NotFound):
            services.post_solution(999999, self.student.pk)

    def test_final_group_solution_blocks_every_member(self):
        mate = factories.create_student()
        factories.enroll(self.course, mate)
        group = factories.create_group(self.course, [self.student, mate])
        task = factories.create_task(self.homework)
        factories.create_solution(task, mate, group=group, state=Solution.State.FINAL)

        with self.assertRaises(exceptions.ValidationError):
            services.post_solution(task.pk, self.student.pk, group_id=group.pk)


class RateSolutionTests(TestCase):
    def setUp(self):
        self.lecturer = factories.create_lecturer()
        self.student = factories.create_student()
        course = factories.create_course(mentor=self.lecturer, students=[self.student])
        self.task = factories.create_task(factories.create_homework(course))

    def test_rating_moves_posted_to_rated(self):
        solution = factories.create_solution(self.task, self.student)

        services.rate_solution(solution.pk, rating=6, lecturer_id=self.lecturer.pk)

        solution.refresh_from_db()
        self.assertEqual(solution.state, Solution.State.RATED)
        self.assertEqual(solution.rating, 6)

    def test_rating_keeps_final_state(self):
        solution = factories.create_solution(
            self.task, self.student, state=Solution.State.FINAL, rating=3
        )

        services.rate_solution(solution.pk, rating=8)

        solution.refresh_from_db()
        self.assertEqual(solution.state, Solution.State.FINAL)
        self.assertEqual(solution.rating, 8)

    def test_unknown_solution(self):
        with self.assertRaises(exceptions.NotFound):
            services.rate_solution(999999, rating=1)

    def test_delete_unknown_solution(self):
        self.assertFalse(services.delete_solution(999999))


class CourseStatisticsTests(TestCase):
    def setUp(self):
        self.lecturer = factories.create_lecturer()
        self.alice = factories.create_student(first_name="Алиса", last_name="Иванова")
        self.bob = factories.create_student(first_name="Борис", last_name="Андреев")
        self.carol = factories.create_student(first_name="Вера", last_name="Сидорова")
        self.course = factories.create_course(
            mentor=self.lecturer, students=[self.alice, self.bob, self.carol]
        )
        homework = factories.create_homework(self.course)
        self.task = factories.create_task(homework)
        self.second_task = factories.create_task(homework)
        self.group = factories.create_group(self.course, [self.alice, self.bob])
        self.group_solution = factories.create_solution(self.task, self.alice, group=self.group)

    def test_mentor_gets_every_accepted_student(self):
        statistics = services.get_course_statistics(self.course.pk, self.lecturer.pk)

        self.assertEqual(
            [row.id for row in statistics], [self.alice.pk, self.bob.pk, self.carol.pk]
        )
        self.assertEqual(statistics[0].surname, "Иванова")

    def test_student_gets_only_own_row(self):
        statistics = services.get_course_statistics(self.course.pk, self.bob.pk)

        self.assertEqual([row.id for row in statistics], [self.bob.pk])
        tasks = statistics[0].homeworks[0].tasks
        self.assertEqual([task.id for task in tasks], [self.task.pk, self.second_task.pk])
        self.assertEqual([s.id for s in tasks[0].solution], [self.group_solution.pk])
        self.assertEqual(tasks[1].solution, [])

    def test_unknown_course(self):
        self.assertEqual(services.get_course_statistics(999999, self.lecturer.pk), [])

    def test_task_statistics_skip_students_without_solutions(self):
        statistics = services.get_task_solution_statistics(self.course.pk, self.task.pk)

        self.assertEqual([row.student_id for row in statistics], [self.alice.pk, self.bob.pk])


class TaskSolutionsStatsTests(TestCase):
    def setUp(self):
        now = timezone.now()
        self.alice = factories.create_student()
        self.bob = factories.create_student()
        course = factories.create_course(students=[self.alice, self.bob])
        homework = factories.create_homework(course)
        self.task = factories.create_task(homework)
        self.empty_task = factories.create_task(homework)

        factories.create_solution(
            self.task,
            self.alice,
            state=Solution.State.RATED,
            rating=2,
            publication_date=now - timedelta(days=2),
        )
        factories.create_solution(
            self.task,
            self.alice,
            state=Solution.State.RATED,
            rating=8,
            publication_date=now - timedelta(days=1),
        )
        factories.create_solution(
            self.task, self.bob, state=Solution.State.RATED, rating=6, publication_date=now
        )
        factories.create_solution(self.task, self.bob, publication_date=now)

    def test_average_of_latest_ratings_in_input_order(self):
        stats = services.get_task_solutions_stats([self.empty_task.pk, self.task.pk])

        self.assertEqual([item.task_id for item in stats], [self.empty_task.pk, self.task.pk])
        self.assertIsNone(stats[0].average_rating)
        self.assertEqual(stats[0].count_unrated_solutions, 0)
        self.assertEqual(stats[1].average_rating, 7.0)
        self.assertEqual(stats[1].count_unrated_solutions, 1)
