from datetime import timedelta
from unittest import mock

from django.core.cache import cache
from django.test import SimpleTestCase
from django.utils import timezone

from accounts.client import AccountData
from courses.client import TaskData
from solutions.client import SolutionData
from solutions.models import Solution
from solutions.rating import (
    DraftKey,
    RatingDraft,
    RatingStorage,
    RatingWidget,
    SolutionsApi,
    WidgetState,
)

NOW = timezone.now()


def make_task(*, max_rating=10, deadline_date=None) -> TaskData:
    return TaskData(
        id=11,
        homework_id=3,
        title="Сортировки",
        description="",
        max_rating=max_rating,
        publication_date=NOW - timedelta(days=7),
        deadline_date=deadline_date,
        is_deadline_strict=False,
    )


def make_account(user_id, name, surname) -> AccountData:
    return AccountData(
        user_id=user_id,
        name=name,
        surname=surname,
        email=f"{user_id}@example.com",
        role="Student",
        is_external_auth=False,
    )


def make_solution(*, state=Solution.State.POSTED, rating=0, lecturer_comment="", publication_date=NOW):
    return SolutionData(
        id=21,
        task_id=11,
        student_id=5,
        group_id=None,
        lecturer_id=None,
        github_url="https://github.com/example/repo",
        comment="",
        lecturer_comment=lecturer_comment,
        rating=rating,
        state=state,
        publication_date=publication_date,
        rating_date=None,
    )


class RatingWidgetTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.storage = RatingStorage(backend=cache, timeout=60)
        self.api = mock.Mock()
        self.student = make_account(5, "Алиса", "Иванова")
        self.lecturer = make_account(1, "Пётр", "Лекторов")

    def build(self, **kwargs):
        kwargs.setdefault("task", make_task())
        kwargs.setdefault("student", self.student)
        kwargs.setdefault("for_mentor", True)
        return RatingWidget(api=self.api, storage=self.storage, **kwargs)

    def test_seeds_from_rated_solution(self):
        widget = self.build(
            solution=make_solution(state=Solution.State.RATED, rating=7, lecturer_comment="ок"),
            lecturer=self.lecturer,
        )

        self.assertEqual(widget.state, WidgetState.RATED_IDLE)
        self.assertEqual(widget.points, 7)
        self.assertEqual(widget.lecturer_comment, "ок")
        self.assertEqual(widget.button_label, "Изменить оценку")
        self.assertEqual(widget.lecturer_name, "Лекторов Пётр")

    def test_without_solution_is_unrated(self):
        widget = self.build()

        self.assertEqual(widget.state, WidgetState.UNRATED_IDLE)
        self.assertEqual(widget.points, 0)
        self.assertEqual(widget.button_label, "Оценить решение")
        self.assertEqual(widget.authors, [self.student])

    def test_draft_takes_precedence_over_server_values(self):
        solution = make_solution(state=Solution.State.RATED, rating=7)
        self.storage.set(DraftKey(11, 5, 21), RatingDraft(points=0, comment="черновик"))

        widget = self.build(solution=solution, lecturer=self.lecturer)

        self.assertEqual(widget.state, WidgetState.RATED_EDITING)
        self.assertEqual(widget.points, 0)
        self.assertEqual(widget.lecturer_comment, "черновик")
        self.assertEqual(widget.lecturer_name, "...")

    def test_editing_writes_draft(self):
        widget = self.build(solution=make_solution())

        widget.set_star_rating(4)
        widget.set_comment("почти")

        self.assertEqual(widget.state, WidgetState.UNRATED_EDITING)
        self.assertEqual(
            self.storage.try_get(widget.draft_key), RatingDraft(points=4, comment="почти")
        )

    def test_cancel_restores_server_values_and_clears_draft(self):
        widget = self.build(solution=make_solution(state=Solution.State.RATED, rating=7))
        widget.set_points(3)

        widget.cancel()

        self.assertEqual(widget.state, WidgetState.RATED_IDLE)
        self.assertEqual(widget.points, 7)
        self.assertIsNone(self.storage.try_get(widget.draft_key))

    def test_non_mentor_cannot_edit(self):
        widget = self.build(solution=make_solution(), for_mentor=False)

        with self.assertRaises(PermissionError):
            widget.set_star_rating(5)
        with self.assertRaises(PermissionError):
            widget.submit()
        self.assertEqual(widget.state, WidgetState.UNRATED_IDLE)
        self.assertIsNone(self.storage.try_get(widget.draft_key))

    def test_submit_rates_existing_solution(self):
        callback = mock.Mock()
        widget = self.build(solution=make_solution(), on_rate_solution=callback)
        widget.set_points(9)
        widget.set_comment("хорошо")

        widget.submit()

        self.api.rate_solution.assert_called_once_with(21, 9, "хорошо")
        callback.assert_called_once_with()
        self.assertFalse(widget.is_editing)
        self.assertIsNone(self.storage.try_get(widget.draft_key))

    def test_submit_without_solution_posts_empty_solution(self):
        widget = self.build()
        widget.set_star_rating(8)

        widget.submit()

        self.api.rate_empty_solution.assert_called_once_with(
            11,
            {
                "comment": "",
                "github_url": "",
                "lecturer_comment": "",
                "publication_date": None,
                "rating": 8,
                "student_id": 5,
            },
        )
        self.api.rate_solution.assert_not_called()

    def test_failed_submit_keeps_draft(self):
        self.api.rate_solution.side_effect = RuntimeError("gateway is down")
        widget = self.build(solution=make_solution())
        widget.set_points(6)

        with self.assertRaises(RuntimeError):
            widget.submit()

        self.assertTrue(widget.is_editing)
        self.assertEqual(self.storage.try_get(widget.draft_key).points, 6)

    def test_star_input_and_special_grading(self):
        widget = self.build(solution=make_solution())
        widget.set_points(5)
        self.assertTrue(widget.uses_star_input)

        widget.request_special_grading()
        widget.set_points(12)

        self.assertFalse(widget.uses_star_input)
        self.assertTrue(widget.rated_above_max)

    def test_large_max_rating_uses_numeric_input(self):
        widget = self.build(task=make_task(max_rating=100), solution=make_solution())

        self.assertFalse(widget.uses_star_input)

    def test_sent_after_deadline(self):
        task = make_task(deadline_date=NOW - timedelta(hours=2))
        widget = self.build(task=task, solution=make_solution(publication_date=NOW))

        self.assertEqual(widget.sent_after_deadline, timedelta(hours=2))

    def test_sent_in_time(self):
        task = make_task(deadline_date=NOW + timedelta(hours=2))
        widget = self.build(task=task, solution=make_solution(publication_date=NOW))

        self.assertIsNone(widget.sent_after_deadline)

    def test_previous_rating_caption(self):
        widget = self.build(last_rating=6)

        self.assertEqual(widget.previous_rating_caption, "Оценка за предыдущее решение: 6 ⭐")

    def test_group_mates_are_authors(self):
        mate = make_account(6, "Борис", "Андреев")
        widget = self.build(solution=make_solution(), group_mates=[self.student, mate])

        self.assertEqual(widget.authors, [self.student, mate])


class SolutionsApiTests(SimpleTestCase):
    def test_rate_solution_posts_to_gateway(self):
        session = mock.Mock()
        api = SolutionsApi(base_url="http://gateway.local/", session=session)

        api.rate_solution(21, 9, "хорошо")

        session.post.assert_called_once_with(
            "http://gateway.local/api/solutions/rateSolution/21",
            json={"rating": 9, "lecturer_comment": "хорошо"},
            timeout=10,
        )
        session.post.return_value.raise_for_status.assert_called_once_with()

    def test_rate_empty_solution_posts_payload(self):
        session = mock.Mock()
        api = SolutionsApi(base_url="http://gateway.local", session=session)

        api.rate_empty_solution(11, {"rating": 8, "student_id": 5})

        session.post.assert_called_once_with(
            "http://gateway.local/api/solutions/rateEmptySolution/11",
            json={"rating": 8, "student_id": 5},
            timeout=10,
        )
