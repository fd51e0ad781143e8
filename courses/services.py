"""Course, enrollment and staffing operations.

Lookups return ``None`` and workflows return ``False`` when the course, task
or course mate involved does not exist, so that the HTTP layer decides which
status to answer with.  Successful state changes publish the signals from
:mod:`courses.events`.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from django.db import transaction
from django.db.models import Prefetch

from accounts.client import AccountData, AuthServiceClient
from accounts.models import Account

from . import events
from .models import Course, CourseMate, Group, GroupMate, Homework, HomeworkTask

logger = logging.getLogger(__name__)


def _course_queryset():
    return Course.objects.prefetch_related(
        "mentors",
        Prefetch("course_mates", queryset=CourseMate.objects.order_by("id")),
        "homeworks__tasks",
        Prefetch(
            "groups",
            queryset=Group.objects.prefetch_related("group_mates").order_by("id"),
        ),
    )


def _mentor_ids(course: Course) -> List[int]:
    return sorted(mentor.pk for mentor in course.mentors.all())


def get_all() -> List[Course]:
    return list(_course_queryset())


def get(course_id: int) -> Optional[Course]:
    return _course_queryset().filter(pk=course_id).first()


def get_by_task(task_id: int) -> Optional[Course]:
    task = HomeworkTask.objects.select_related("homework").filter(pk=task_id).first()
    if task is None:
        return None
    return get(task.homework.course_id)


def add(*, mentor, name: str, group_name: str = "", is_open: bool = True) -> Course:
    course = Course.objects.create(name=name, group_name=group_name, is_open=is_open)
    course.mentors.add(mentor)
    logger.info("Course %s created by %s", course.pk, mentor.pk)
    return course


def delete(course_id: int) -> None:
    Course.objects.filter(pk=course_id).delete()


def update(
    course_id: int,
    *,
    name: str,
    group_name: str,
    is_completed: bool,
    is_open: bool,
) -> bool:
    updated = Course.objects.filter(pk=course_id).update(
        name=name,
        group_name=group_name,
        is_completed=is_completed,
        is_open=is_open,
    )
    return bool(updated)


def _find_course_and_mate(course_id: int, student_id: int):
    course = Course.objects.prefetch_related("mentors").filter(pk=course_id).first()
    course_mate = CourseMate.objects.filter(course_id=course_id, student_id=student_id).first()
    return course, course_mate


def add_student(course_id: int, student_id: int) -> bool:
    course, course_mate = _find_course_and_mate(course_id, student_id)
    if course is None or course_mate is not None:
        return False

    CourseMate.objects.create(course=course, student_id=student_id, is_accepted=False)
    events.new_course_mate.send(
        sender=Course,
        course_id=course.pk,
        course_name=course.name,
        mentor_ids=_mentor_ids(course),
        student_id=student_id,
        is_accepted=False,
    )
    return True


def accept_course_mate(course_id: int, student_id: int) -> bool:
    course, course_mate = _find_course_and_mate(course_id, student_id)
    if course is None or course_mate is None:
        return False

    course_mate.is_accepted = True
    course_mate.save(update_fields=["is_accepted"])
    events.lecturer_accepted_to_course.send(
        sender=Course,
        course_id=course.pk,
        course_name=course.name,
        mentor_ids=_mentor_ids(course),
        student_id=student_id,
    )
    return True


def reject_course_mate(course_id: int, student_id: int) -> bool:
    course, course_mate = _find_course_and_mate(course_id, student_id)
    if course is None or course_mate is None:
        return False

    course_mate.delete()
    events.lecturer_rejected_to_course.send(
        sender=Course,
        course_id=course.pk,
        course_name=course.name,
        mentor_ids=_mentor_ids(course),
        student_id=student_id,
    )
    return True


def get_user_courses(user, role: str) -> List[Course]:
    if role == Account.Role.STUDENT:
        queryset = _course_queryset().filter(
            course_mates__student=user, course_mates__is_accepted=True
        )
    else:
        queryset = _course_queryset().filter(mentors=user)
    return list(queryset.distinct())


def accept_lecturer(course_id: int, lecturer) -> bool:
    course = Course.objects.filter(pk=course_id).first()
    if course is None:
        return False

    if not course.mentors.filter(pk=lecturer.pk).exists():
        course.mentors.add(lecturer)
        events.lecturer_invited_to_course.send(
            sender=Course,
            course_id=course.pk,
            course_name=course.name,
            mentor_id=lecturer.pk,
            mentor_email=lecturer.email,
        )
        # a lecturer cannot stay enrolled as a student of a course they mentor
        CourseMate.objects.filter(course=course, student=lecturer).delete()
    return True


def get_course_lecturers(course_id: int) -> List[int]:
    course = Course.objects.get(pk=course_id)
    return list(course.mentors.order_by("pk").values_list("pk", flat=True))


def get_lecturers_available_for_course(course_id: int) -> List[AccountData]:
    mentor_ids = set(get_course_lecturers(course_id))
    lecturers = AuthServiceClient().get_all_lecturers()
    return [lecturer for lecturer in lecturers if lecturer.user_id not in mentor_ids]


@transaction.atomic
def create_group(
    course_id: int, student_ids: Iterable[int], task_id: Optional[int] = None, name: str = ""
) -> int:
    group = Group.objects.create(course_id=course_id, name=name)
    GroupMate.objects.bulk_create(
        [GroupMate(group=group, student_id=student_id) for student_id in dict.fromkeys(student_ids)]
    )
    logger.info("Group %s created in course %s for task %s", group.pk, course_id, task_id)
    return group.pk


def add_homework(
    course_id: int,
    *,
    title: str,
    description: str = "",
    publication_date: Optional[datetime] = None,
) -> Homework:
    fields = {"course_id": course_id, "title": title, "description": description}
    if publication_date is not None:
        fields["publication_date"] = publication_date
    return Homework.objects.create(**fields)


def add_task(
    homework_id: int,
    *,
    title: str,
    max_rating: int = 10,
    description: str = "",
    publication_date: Optional[datetime] = None,
    deadline_date: Optional[datetime] = None,
    is_deadline_strict: bool = False,
) -> HomeworkTask:
    fields = {
        "homework_id": homework_id,
        "title": title,
        "max_rating": max_rating,
        "description": description,
        "deadline_date": deadline_date,
        "is_deadline_strict": is_deadline_strict,
    }
    if publication_date is not None:
        fields["publication_date"] = publication_date
    return HomeworkTask.objects.create(**fields)
