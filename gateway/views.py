"""Page-level endpoints composed from the accounts, courses and solutions clients.

Views only talk to the service clients held as class attributes, so every
endpoint can be exercised against replacement clients in tests.
"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from asgiref.sync import async_to_sync, sync_to_async
from django.utils import timezone
from rest_framework import exceptions, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.client import AccountData, AuthServiceClient
from accounts.permissions import IsLecturer, IsStudent
from courses.client import CourseData, CoursesServiceClient, HomeworkData, TaskData
from solutions.client import SolutionData, SolutionsServiceClient
from solutions.services import GIVE_UP_COMMENT, OUTSIDE_SERVICE_COMMENT

from .serializers import (
    RateSolutionSerializer,
    SolutionDataSerializer,
    SolutionViewModelSerializer,
    TaskSolutionStatisticsPageDataSerializer,
    UnratedSolutionPreviewsSerializer,
    UserTaskSolutionsPageDataSerializer,
)
from .view_models import (
    SolutionPreviewView,
    SolutionView,
    StudentSolutionsRow,
    TaskSolutionStatisticsPageData,
    UnratedSolutionPreviews,
    UserTaskSolutions,
    UserTaskSolutionsPageData,
)

logger = logging.getLogger(__name__)


def is_sent_after_deadline(
    is_first_try: bool, publication_date: datetime, deadline_date: Optional[datetime]
) -> bool:
    return is_first_try and deadline_date is not None and publication_date > deadline_date


def filter_tasks(
    courses: List[CourseData], task_id: Optional[int] = None
) -> Iterator[Tuple[int, Tuple[CourseData, HomeworkData, TaskData]]]:
    """Yield ``(task id, (course, homework, task))`` for the courses' tasks.

    With ``task_id`` only that task is yielded, and the scan stops there.
    """

    for course in courses:
        for homework in course.homeworks:
            for task in homework.tasks:
                if task_id is None:
                    yield task.id, (course, homework, task)
                elif task.id == task_id:
                    yield task.id, (course, homework, task)
                    return


class GatewayView(APIView):
    auth_client = AuthServiceClient()
    courses_client = CoursesServiceClient()
    solutions_client = SolutionsServiceClient()

    def get_mentored_course_by_task(self, request, task_id: int) -> CourseData:
        course = self.courses_client.get_course_by_task(task_id)
        if course is None or not course.is_mentor(request.user.pk):
            raise exceptions.PermissionDenied("Действие доступно только преподавателям курса")
        return course

    def get_mentored_solution(self, request, solution_id: int) -> SolutionData:
        solution = self.solutions_client.get_solution_by_id(solution_id)
        if solution is None:
            raise exceptions.NotFound("Решение не найдено")
        self.get_mentored_course_by_task(request, solution.task_id)
        return solution

    @staticmethod
    def annotate(
        solution: SolutionData,
        accounts: Dict[int, AccountData],
        group_mate_ids=None,
    ) -> SolutionView:
        group_mates = None
        if group_mate_ids is not None:
            group_mates = [accounts[pk] for pk in group_mate_ids if pk in accounts]
        lecturer = accounts.get(solution.lecturer_id) if solution.lecturer_id else None
        return SolutionView(solution=solution, group_mates=group_mates, lecturer=lecturer)


class SolutionDetailView(GatewayView):
    """`GET` reads a solution by id, `POST` hands in a solution for a task id.

    A student may post alone or together with group mates; a group with the
    same members is reused, otherwise a new one is created for the task.
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsStudent()]
        return [permissions.IsAuthenticated()]

    def get(self, request, pk: int, *args, **kwargs):
        solution = self.solutions_client.get_solution_by_id(pk)
        if solution is None:
            raise exceptions.NotFound("Решение не найдено")
        return Response(SolutionDataSerializer(solution).data)

    def post(self, request, pk: int, *args, **kwargs):
        task_id = pk
        serializer = SolutionViewModelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        course = self.courses_client.get_course_by_task(task_id)
        if course is None:
            raise exceptions.ValidationError("Курс задачи не найден")

        student_id = request.user.pk
        accepted = set(course.accepted_student_ids)
        if student_id not in accepted:
            raise exceptions.ValidationError(f"Студента с id {student_id} нет на курсе")

        if not data["group_mate_ids"]:
            solution_id = self.solutions_client.post_solution(
                task_id,
                student_id,
                github_url=data["github_url"],
                comment=data["comment"],
            )
            return Response(solution_id, status=status.HTTP_200_OK)

        member_ids = list(dict.fromkeys([student_id, *data["group_mate_ids"]]))
        strangers = [member_id for member_id in member_ids if member_id not in accepted]
        if strangers:
            raise exceptions.ValidationError(
                f"Студенты {', '.join(map(str, strangers))} не записаны на курс"
            )

        members = set(member_ids)
        group = next((g for g in course.groups if set(g.student_ids) == members), None)
        if group is not None:
            group_id = group.id
        else:
            group_id = self.courses_client.create_course_group(member_ids, course.id, task_id)

        solution_id = self.solutions_client.post_solution(
            task_id,
            student_id,
            github_url=data["github_url"],
            comment=data["comment"],
            group_id=group_id,
        )
        return Response(
            {
                "id": solution_id,
                "task_id": task_id,
                "student_id": student_id,
                "group_id": group_id,
                "group_mate_ids": member_ids,
                "github_url": data["github_url"],
                "comment": data["comment"],
            },
            status=status.HTTP_200_OK,
        )


class StudentSolutionsPageView(GatewayView):
    """Everything a student handed in for the course of a task."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, task_id: int, student_id: int, *args, **kwargs):
        course = self.courses_client.get_course_by_task(task_id)
        if course is None or student_id not in course.accepted_student_ids:
            raise exceptions.NotFound("Студент не найден на курсе")

        statistics = self.solutions_client.get_course_statistics(course.id, request.user.pk)
        student_statistics = next((row for row in statistics if row.id == student_id), None)
        if student_statistics is None:
            raise exceptions.NotFound("Статистика студента не найдена")

        course_mates = self.auth_client.get_accounts_data(
            [*course.accepted_student_ids, *course.mentor_ids]
        )
        accounts = {account.user_id: account for account in course_mates}
        tasks = {task.id: task for task in course.tasks}
        groups = {group.id: group.student_ids for group in course.groups}

        task_solutions = []
        for homework in student_statistics.homeworks:
            for statistics_task in homework.tasks:
                task = tasks[statistics_task.id]
                solutions = []
                for solution in statistics_task.solution:
                    mate_ids = None
                    if solution.task_id == task_id and solution.group_id is not None:
                        mate_ids = groups.get(solution.group_id, ())
                    solutions.append(self.annotate(solution, accounts, mate_ids))
                task_solutions.append(
                    UserTaskSolutions(
                        max_rating=task.max_rating,
                        title=task.title,
                        task_id=task.id,
                        solutions=solutions,
                    )
                )

        page = UserTaskSolutionsPageData(
            course_id=course.id,
            course_mates=course_mates,
            task_solutions=task_solutions,
            task=tasks[task_id],
        )
        return Response(UserTaskSolutionsPageDataSerializer(page).data)


class TaskSolutionsPageView(GatewayView):
    """Solutions of every student of the course for one task, for its mentors."""

    permission_classes = [permissions.IsAuthenticated]

    async def fetch(self, course: CourseData, task_id: int, task_ids: List[int]):
        return await asyncio.gather(
            sync_to_async(self.auth_client.get_accounts_data)(
                [*course.accepted_student_ids, *course.mentor_ids]
            ),
            sync_to_async(self.solutions_client.get_task_solution_statistics)(course.id, task_id),
            sync_to_async(self.solutions_client.get_task_solutions_stats)(task_ids),
        )

    def get(self, request, task_id: int, *args, **kwargs):
        course = self.get_mentored_course_by_task(request, task_id)

        now = timezone.now()
        tasks = [task for task in course.tasks if task.publication_date <= now]
        accounts_data, statistics, stats_for_tasks = async_to_sync(self.fetch)(
            course, task_id, [task.id for task in tasks]
        )

        accounts = {account.user_id: account for account in accounts_data}
        solutions_by_student = {row.student_id: row.solutions for row in statistics}
        groups = {group.id: group.student_ids for group in course.groups}
        for stats, task in zip(stats_for_tasks, tasks):
            stats.title = task.title

        rows = [
            StudentSolutionsRow(
                user=accounts[student_id],
                solutions=[
                    self.annotate(
                        solution,
                        accounts,
                        groups.get(solution.group_id) if solution.group_id is not None else None,
                    )
                    for solution in solutions_by_student.get(student_id, [])
                ],
            )
            for student_id in course.accepted_student_ids
            if student_id in accounts
        ]
        rows.sort(key=lambda row: (row.user.surname, row.user.name))

        page = TaskSolutionStatisticsPageData(
            course_id=course.id,
            students_solutions=rows,
            stats_for_tasks=stats_for_tasks,
        )
        return Response(TaskSolutionStatisticsPageDataSerializer(page).data)


class RateEmptySolutionView(GatewayView):
    """A mentor grades a task handed in outside of the service."""

    permission_classes = [IsLecturer]

    def post(self, request, task_id: int, *args, **kwargs):
        course = self.get_mentored_course_by_task(request, task_id)
        serializer = SolutionViewModelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        student_id = data.get("student_id")
        if student_id not in course.accepted_student_ids:
            raise exceptions.ValidationError(f"Студент с id {student_id} не записан на курс")

        solution_id = self.solutions_client.post_empty_solution_with_rate(
            task_id,
            student_id,
            rating=data["rating"],
            comment=OUTSIDE_SERVICE_COMMENT,
            lecturer_comment=data["lecturer_comment"],
            lecturer_id=request.user.pk,
        )
        return Response(solution_id, status=status.HTTP_200_OK)


class GiveUpView(GatewayView):
    permission_classes = [IsStudent]

    def post(self, request, task_id: int, *args, **kwargs):
        course = self.courses_client.get_course_by_task(task_id)
        if course is None:
            raise exceptions.NotFound("Курс задачи не найден")

        student_id = request.user.pk
        if student_id not in course.accepted_student_ids:
            raise exceptions.ValidationError(f"Студент с id {student_id} не записан на курс")

        self.solutions_client.post_empty_solution_with_rate(
            task_id, student_id, rating=0, comment=GIVE_UP_COMMENT
        )
        return Response(status=status.HTTP_200_OK)


class RateSolutionView(GatewayView):
    permission_classes = [IsLecturer]

    def post(self, request, solution_id: int, *args, **kwargs):
        self.get_mentored_solution(request, solution_id)
        serializer = RateSolutionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.solutions_client.rate_solution(
            solution_id, lecturer_id=request.user.pk, **serializer.validated_data
        )
        return Response(status=status.HTTP_200_OK)


class MarkSolutionFinalView(GatewayView):
    permission_classes = [IsLecturer]

    def post(self, request, solution_id: int, *args, **kwargs):
        self.get_mentored_solution(request, solution_id)
        self.solutions_client.mark_solution(solution_id)
        return Response(status=status.HTTP_200_OK)


class DeleteSolutionView(GatewayView):
    permission_classes = [IsLecturer]

    def delete(self, request, solution_id: int, *args, **kwargs):
        self.get_mentored_solution(request, solution_id)
        self.solutions_client.delete_solution(solution_id)
        logger.info("Solution %s deleted by %s", solution_id, request.user.pk)
        return Response(status=status.HTTP_200_OK)


class UnratedSolutionsView(GatewayView):
    """Latest ungraded solutions across the courses the lecturer mentors."""

    permission_classes = [IsLecturer]

    def get(self, request, *args, **kwargs):
        task_id = request.query_params.get("taskId")
        if task_id is not None:
            try:
                task_id = int(task_id)
            except ValueError:
                raise exceptions.ValidationError("taskId должен быть числом")

        courses = self.courses_client.get_all_user_courses(request.user)
        tasks = dict(filter_tasks(courses, task_id))
        solutions = self.solutions_client.get_all_unrated_solutions_for_tasks(list(tasks))
        students = {
            account.user_id: account
            for account in self.auth_client.get_accounts_data(
                [solution.student_id for solution in solutions]
            )
        }

        previews = []
        for solution in solutions:
            student = students.get(solution.student_id)
            if student is None:
                continue
            course, homework, task = tasks[solution.task_id]
            previews.append(
                SolutionPreviewView(
                    student=student,
                    course_title=f"{course.name} / {course.group_name}",
                    course_id=course.id,
                    homework_title=homework.title,
                    task_title=task.title,
                    task_id=task.id,
                    solution_id=solution.solution_id,
                    publication_date=solution.publication_date,
                    is_first_try=solution.is_first_try,
                    group_id=solution.group_id,
                    sent_after_deadline=is_sent_after_deadline(
                        solution.is_first_try, solution.publication_date, task.deadline_date
                    ),
                    is_course_completed=course.is_completed,
                )
            )

        page = UnratedSolutionPreviews(unrated_solutions=previews)
        return Response(UnratedSolutionPreviewsSerializer(page).data)
