"""Solution operations as plain data for the gateway."""
from __future__ import annotations

from typing import Iterable, List, Optional

from . import services
from .services import (
    SolutionData,
    SolutionPreview,
    StudentCourseStatistics,
    StudentTaskSolutions,
    TaskSolutionsStats,
    to_solution_data,
)

__all__ = [
    "SolutionData",
    "SolutionPreview",
    "SolutionsServiceClient",
    "StudentCourseStatistics",
    "StudentTaskSolutions",
    "TaskSolutionsStats",
]


class SolutionsServiceClient:
    def get_solution_by_id(self, solution_id: int) -> Optional[SolutionData]:
        solution = services.get_solution_by_id(solution_id)
        return to_solution_data(solution) if solution else None

    def get_course_statistics(self, course_id: int, user_id: int) -> List[StudentCourseStatistics]:
        return services.get_course_statistics(course_id, user_id)

    def get_task_solution_statistics(self, course_id: int, task_id: int) -> List[StudentTaskSolutions]:
        return services.get_task_solution_statistics(course_id, task_id)

    def get_task_solutions_stats(self, task_ids: Iterable[int]) -> List[TaskSolutionsStats]:
        return services.get_task_solutions_stats(task_ids)

    def get_all_unrated_solutions_for_tasks(self, task_ids: Iterable[int]) -> List[SolutionPreview]:
        return services.get_all_unrated_solutions_for_tasks(task_ids)

    def post_solution(
        self,
        task_id: int,
        student_id: int,
        *,
        github_url: str = "",
        comment: str = "",
        group_id: Optional[int] = None,
    ) -> int:
        solution = services.post_solution(
            task_id,
            student_id,
            github_url=github_url,
            comment=comment,
            group_id=group_id,
        )
        return solution.pk

    def post_empty_solution_with_rate(
        self,
        task_id: int,
        student_id: int,
        *,
        rating: int,
        comment: str = "",
        lecturer_comment: str = "",
        lecturer_id: Optional[int] = None,
    ) -> int:
        solution = services.post_empty_solution_with_rate(
            task_id,
            student_id,
            rating=rating,
            comment=comment,
            lecturer_comment=lecturer_comment,
            lecturer_id=lecturer_id,
        )
        return solution.pk

    def rate_solution(
        self,
        solution_id: int,
        *,
        rating: int,
        lecturer_comment: str = "",
        lecturer_id: Optional[int] = None,
    ) -> None:
        services.rate_solution(
            solution_id,
            rating=rating,
            lecturer_comment=lecturer_comment,
            lecturer_id=lecturer_id,
        )

    def mark_solution(self, solution_id: int) -> None:
        services.mark_solution_final(solution_id)

    def delete_solution(self, solution_id: int) -> bool:
        return services.delete_solution(solution_id)
