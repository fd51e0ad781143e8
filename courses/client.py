"""Course lookups as plain data for other apps and the gateway."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from accounts.client import AccountData, AuthServiceClient

from . import services
from .models import Course


@dataclass(frozen=True)
class TaskData:
    id: int
    homework_id: int
    title: str
    description: str
    max_rating: int
    publication_date: datetime
    deadline_date: Optional[datetime]
    is_deadline_strict: bool

    @property
    def has_deadline(self) -> bool:
        return self.deadline_date is not None


@dataclass(frozen=True)
class HomeworkData:
    id: int
    course_id: int
    title: str
    description: str
    publication_date: datetime
    tasks: Tuple[TaskData, ...]


@dataclass(frozen=True)
class CourseMateData:
    student_id: int
    is_accepted: bool


@dataclass(frozen=True)
class GroupData:
    id: int
    course_id: int
    name: str
    student_ids: Tuple[int, ...]


@dataclass(frozen=True)
class CourseData:
    id: int
    name: str
    group_name: str
    invite_code: str
    is_completed: bool
    is_open: bool
    mentor_ids: Tuple[int, ...]
    course_mates: Tuple[CourseMateData, ...]
    homeworks: Tuple[HomeworkData, ...]
    groups: Tuple[GroupData, ...]

    @property
    def accepted_students(self) -> Tuple[CourseMateData, ...]:
        return tuple(mate for mate in self.course_mates if mate.is_accepted)

    @property
    def accepted_student_ids(self) -> List[int]:
        return [mate.student_id for mate in self.accepted_students]

    @property
    def tasks(self) -> List[TaskData]:
        return [task for homework in self.homeworks for task in homework.tasks]

    def is_mentor(self, user_id) -> bool:
        return user_id in self.mentor_ids


def _task_data(task) -> TaskData:
    return TaskData(
        id=task.pk,
        homework_id=task.homework_id,
        title=task.title,
        description=task.description,
        max_rating=task.max_rating,
        publication_date=task.publication_date,
        deadline_date=task.deadline_date,
        is_deadline_strict=task.is_deadline_strict,
    )


def to_course_data(course: Course) -> CourseData:
    return CourseData(
        id=course.pk,
        name=course.name,
        group_name=course.group_name,
        invite_code=course.invite_code,
        is_completed=course.is_completed,
        is_open=course.is_open,
        mentor_ids=tuple(sorted(mentor.pk for mentor in course.mentors.all())),
        course_mates=tuple(
            CourseMateData(student_id=mate.student_id, is_accepted=mate.is_accepted)
            for mate in course.course_mates.all()
        ),
        homeworks=tuple(
            HomeworkData(
                id=homework.pk,
                course_id=homework.course_id,
                title=homework.title,
                description=homework.description,
                publication_date=homework.publication_date,
                tasks=tuple(_task_data(task) for task in homework.tasks.all()),
            )
            for homework in course.homeworks.all()
        ),
        groups=tuple(
            GroupData(
                id=group.pk,
                course_id=group.course_id,
                name=group.name,
                student_ids=tuple(mate.student_id for mate in group.group_mates.all()),
            )
            for group in course.groups.all()
        ),
    )


class CoursesServiceClient:
    def get_course_by_id(self, course_id: int) -> Optional[CourseData]:
        course = services.get(course_id)
        return to_course_data(course) if course else None

    def get_course_by_task(self, task_id: int) -> Optional[CourseData]:
        course = services.get_by_task(task_id)
        return to_course_data(course) if course else None

    def get_all_user_courses(self, user) -> List[CourseData]:
        role = AuthServiceClient().get_role(user)
        return [to_course_data(course) for course in services.get_user_courses(user, role)]

    def create_course_group(
        self, student_ids: Iterable[int], course_id: int, task_id: Optional[int] = None
    ) -> int:
        return services.create_group(course_id, student_ids, task_id)

    def get_course_lecturers(self, course_id: int) -> List[int]:
        return services.get_course_lecturers(course_id)

    def get_lecturers_available_for_course(self, course_id: int) -> List[AccountData]:
        return services.get_lecturers_available_for_course(course_id)
