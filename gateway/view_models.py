"""Page-level shapes the gateway answers with."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from accounts.client import AccountData
from courses.client import TaskData
from solutions.client import SolutionData, TaskSolutionsStats


@dataclass(frozen=True)
class SolutionView:
    """A solution with the people behind it resolved to account data."""

    solution: SolutionData
    group_mates: Optional[List[AccountData]]
    lecturer: Optional[AccountData]


@dataclass(frozen=True)
class UserTaskSolutions:
    max_rating: int
    title: str
    task_id: int
    solutions: List[SolutionView]


@dataclass(frozen=True)
class UserTaskSolutionsPageData:
    course_id: int
    course_mates: List[AccountData]
    task_solutions: List[UserTaskSolutions]
    task: TaskData


@dataclass(frozen=True)
class StudentSolutionsRow:
    user: AccountData
    solutions: List[SolutionView]


@dataclass(frozen=True)
class TaskSolutionStatisticsPageData:
    course_id: int
    students_solutions: List[StudentSolutionsRow]
    stats_for_tasks: List[TaskSolutionsStats]


@dataclass(frozen=True)
class SolutionPreviewView:
    student: AccountData
    course_title: str
    course_id: int
    homework_title: str
    task_title: str
    task_id: int
    solution_id: int
    publication_date: datetime
    is_first_try: bool
    group_id: Optional[int]
    sent_after_deadline: bool
    is_course_completed: bool


@dataclass(frozen=True)
class UnratedSolutionPreviews:
    unrated_solutions: List[SolutionPreviewView]
