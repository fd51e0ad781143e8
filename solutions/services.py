"""Posting, rating and reporting on solutions.

Write operations raise DRF exceptions when the request cannot be honoured
(unknown task or solution, task not open for submissions, a solution already
marked final).  Reporting functions work on course data fetched through
:class:`courses.client.CoursesServiceClient` and return dataclasses that the
gateway stitches into page models.

A student's solutions for a task are the ones they posted themselves plus
every solution posted on behalf of a group they belong to.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from django.db.models import Q
from django.utils import timezone
from rest_framework import exceptions

from accounts.client import AuthServiceClient
from courses.client import CourseData, CoursesServiceClient
from courses.models import HomeworkTask

from .models import Solution

logger = logging.getLogger(__name__)

OUTSIDE_SERVICE_COMMENT = "[Решение было сдано вне сервиса]"
GIVE_UP_COMMENT = "[Студент отказался от выполнения задачи]"


@dataclass(frozen=True)
class SolutionData:
    id: int
    task_id: int
    student_id: int
    group_id: Optional[int]
    lecturer_id: Optional[int]
    github_url: str
    comment: str
    lecturer_comment: str
    rating: int
    state: int
    publication_date: datetime
    rating_date: Optional[datetime]

    @property
    def is_rated(self) -> bool:
        return self.state != Solution.State.POSTED


@dataclass(frozen=True)
class StatisticsTask:
    id: int
    solution: List[SolutionData]


@dataclass(frozen=True)
class StatisticsHomework:
    id: int
    tasks: List[StatisticsTask]


@dataclass(frozen=True)
class StudentCourseStatistics:
    id: int
    name: str
    surname: str
    homeworks: List[StatisticsHomework]


@dataclass(frozen=True)
class StudentTaskSolutions:
    student_id: int
    solutions: List[SolutionData]


@dataclass
class TaskSolutionsStats:
    task_id: int
    count_unrated_solutions: int
    average_rating: Optional[float]
    title: str = ""


@dataclass(frozen=True)
class SolutionPreview:
    solution_id: int
    student_id: int
    task_id: int
    group_id: Optional[int]
    publication_date: datetime
    is_first_try: bool


def to_solution_data(solution: Solution) -> SolutionData:
    return SolutionData(
        id=solution.pk,
        task_id=solution.task_id,
        student_id=solution.student_id,
        group_id=solution.group_id,
        lecturer_id=solution.lecturer_id,
        github_url=solution.github_url,
        comment=solution.comment,
        lecturer_comment=solution.lecturer_comment,
        rating=solution.rating,
        state=solution.state,
        publication_date=solution.publication_date,
        rating_date=solution.rating_date,
    )


def _student_group_ids(course: CourseData, student_id: int) -> Set[int]:
    return {group.id for group in course.groups if student_id in group.student_ids}


def _belongs_to(solution: Solution, student_id: int, group_ids: Set[int]) -> bool:
    if solution.student_id == student_id:
        return True
    return solution.group_id is not None and solution.group_id in group_ids


def _get_task_or_404(task_id: int) -> HomeworkTask:
    task = HomeworkTask.objects.filter(pk=task_id).first()
    if task is None:
        raise exceptions.NotFound("Задача не найдена")
    return task


def _get_solution_or_404(solution_id: int) -> Solution:
    solution = Solution.objects.filter(pk=solution_id).first()
    if solution is None:
        raise exceptions.NotFound("Решение не найдено")
    return solution


def _ensure_not_final(task_id: int, student_id: int, group_id: Optional[int] = None) -> None:
    owner = Q(student_id=student_id)
    if group_id is not None:
        owner |= Q(group_id=group_id)
    if Solution.objects.filter(owner, task_id=task_id, state=Solution.State.FINAL).exists():
        raise exceptions.ValidationError("Решение задачи уже принято как финальное")


def get_solution_by_id(solution_id: int) -> Optional[Solution]:
    return Solution.objects.filter(pk=solution_id).first()


def post_solution(
    task_id: int,
    student_id: int,
    *,
    github_url: str = "",
    comment: str = "",
    group_id: Optional[int] = None,
) -> Solution:
    task = _get_task_or_404(task_id)
    now = timezone.now()
    if not task.is_published(now):
        raise exceptions.ValidationError("Задача ещё не опубликована")
    if task.is_deadline_strict and task.deadline_date and now > task.deadline_date:
        raise exceptions.ValidationError("Срок сдачи задачи истёк")
    _ensure_not_final(task_id, student_id, group_id)

    solution = Solution.objects.create(
        task=task,
        student_id=student_id,
        group_id=group_id,
        github_url=github_url or "",
        comment=comment or "",
        publication_date=now,
    )
    logger.info(
        "Solution %s posted for task %s by %s (group %s)",
        solution.pk,
        task_id,
        student_id,
        group_id,
    )
    return solution


def post_empty_solution_with_rate(
    task_id: int,
    student_id: int,
    *,
    rating: int,
    comment: str = "",
    lecturer_comment: str = "",
    lecturer_id: Optional[int] = None,
) -> Solution:
    """Record a grade for a task that was handed in without a submission."""

    task = _get_task_or_404(task_id)
    _ensure_not_final(task_id, student_id)

    now = timezone.now()
    solution = Solution.objects.create(
        task=task,
        student_id=student_id,
        lecturer_id=lecturer_id,
        comment=comment or "",
        lecturer_comment=lecturer_comment or "",
        rating=rating,
        state=Solution.State.RATED,
        publication_date=now,
        rating_date=now,
    )
    logger.info("Empty solution %s rated %s for task %s", solution.pk, rating, task_id)
    return solution


def rate_solution(
    solution_id: int,
    *,
    rating: int,
    lecturer_comment: str = "",
    lecturer_id: Optional[int] = None,
) -> Solution:
    solution = _get_solution_or_404(solution_id)
    if rating < 0:
        raise exceptions.ValidationError("Оценка не может быть отрицательной")

    solution.rating = rating
    solution.lecturer_comment = lecturer_comment or ""
    solution.lecturer_id = lecturer_id
    solution.rating_date = timezone.now()
    if solution.state == Solution.State.POSTED:
        solution.state = Solution.State.RATED
    solution.save(
        update_fields=["rating", "lecturer_comment", "lecturer", "rating_date", "state"]
    )
    return solution


def mark_solution_final(solution_id: int) -> Solution:
    solution = _get_solution_or_404(solution_id)
    solution.state = Solution.State.FINAL
    solution.save(update_fields=["state"])
    return solution


def delete_solution(solution_id: int) -> bool:
    deleted, _ = Solution.objects.filter(pk=solution_id).delete()
    return bool(deleted)


def get_course_statistics(course_id: int, user_id: int) -> List[StudentCourseStatistics]:
    """Per-student solutions for every task of the course.

    Mentors get a row for every accepted student; anybody else only gets
    their own row (or nothing, if they are not an accepted student).
    """

    course = CoursesServiceClient().get_course_by_id(course_id)
    if course is None:
        return []

    student_ids = course.accepted_student_ids
    if not course.is_mentor(user_id):
        student_ids = [student_id for student_id in student_ids if student_id == user_id]

    task_ids = [task.id for task in course.tasks]
    solutions = list(
        Solution.objects.filter(task_id__in=task_ids).order_by("publication_date", "id")
    )
    accounts = {
        account.user_id: account
        for account in AuthServiceClient().get_accounts_data(student_ids)
    }

    result = []
    for student_id in student_ids:
        group_ids = _student_group_ids(course, student_id)
        by_task: Dict[int, List[SolutionData]] = defaultdict(list)
        for solution in solutions:
            if _belongs_to(solution, student_id, group_ids):
                by_task[solution.task_id].append(to_solution_data(solution))

        account = accounts.get(student_id)
        result.append(
            StudentCourseStatistics(
                id=student_id,
                name=account.name if account else "",
                surname=account.surname if account else "",
                homeworks=[
                    StatisticsHomework(
                        id=homework.id,
                        tasks=[
                            StatisticsTask(id=task.id, solution=by_task.get(task.id, []))
                            for task in homework.tasks
                        ],
                    )
                    for homework in course.homeworks
                ],
            )
        )
    return result


def get_task_solution_statistics(course_id: int, task_id: int) -> List[StudentTaskSolutions]:
    course = CoursesServiceClient().get_course_by_id(course_id)
    if course is None:
        return []

    solutions = list(
        Solution.objects.filter(task_id=task_id).order_by("publication_date", "id")
    )
    result = []
    for student_id in course.accepted_student_ids:
        group_ids = _student_group_ids(course, student_id)
        student_solutions = [
            to_solution_data(solution)
            for solution in solutions
            if _belongs_to(solution, student_id, group_ids)
        ]
        if student_solutions:
            result.append(StudentTaskSolutions(student_id=student_id, solutions=student_solutions))
    return result


def get_task_solutions_stats(task_ids: Iterable[int]) -> List[TaskSolutionsStats]:
    """Unrated count and average of the latest grades for each task, in input order."""

    task_ids = list(task_ids)
    unrated: Dict[int, int] = defaultdict(int)
    latest_ratings: Dict[int, Dict[int, int]] = defaultdict(dict)

    solutions = Solution.objects.filter(task_id__in=task_ids).order_by("publication_date", "id")
    for solution in solutions:
        if solution.state == Solution.State.POSTED:
            unrated[solution.task_id] += 1
        else:
            latest_ratings[solution.task_id][solution.student_id] = solution.rating

    stats = []
    for task_id in task_ids:
        ratings = list(latest_ratings[task_id].values())
        stats.append(
            TaskSolutionsStats(
                task_id=task_id,
                count_unrated_solutions=unrated[task_id],
                average_rating=sum(ratings) / len(ratings) if ratings else None,
            )
        )
    return stats


def get_all_unrated_solutions_for_tasks(task_ids: Iterable[int]) -> List[SolutionPreview]:
    """Latest ungraded solution of every student for each of the tasks."""

    first_ids: Dict[tuple, int] = {}
    latest: Dict[tuple, Solution] = {}
    solutions = Solution.objects.filter(task_id__in=list(task_ids)).order_by(
        "publication_date", "id"
    )
    for solution in solutions:
        key = (solution.task_id, solution.student_id)
        first_ids.setdefault(key, solution.pk)
        latest[key] = solution

    return [
        SolutionPreview(
            solution_id=solution.pk,
            student_id=solution.student_id,
            task_id=solution.task_id,
            group_id=solution.group_id,
            publication_date=solution.publication_date,
            is_first_try=first_ids[key] == solution.pk,
        )
        for key, solution in latest.items()
        if solution.state == Solution.State.POSTED
    ]
