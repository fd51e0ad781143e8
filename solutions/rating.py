"""State of the lecturer's rating form for a single solution.

The form for one (task, student, solution) cell is either idle or being
edited, on top of a solution that is either rated or not.  While the lecturer
edits, the unsaved points and comment are kept as a draft in Django's cache so
that leaving the page does not lose them; the draft goes away as soon as the
edit is cancelled or submitted.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional, Sequence

import requests
from django.conf import settings
from django.core.cache import cache

from .models import Solution

logger = logging.getLogger(__name__)

STAR_INPUT_MAX_RATING = 10


@dataclass(frozen=True)
class DraftKey:
    task_id: int
    student_id: int
    solution_id: Optional[int] = None

    @property
    def cache_key(self) -> str:
        solution = self.solution_id if self.solution_id is not None else "none"
        return f"rating-draft:{self.task_id}:{self.student_id}:{solution}"


@dataclass(frozen=True)
class RatingDraft:
    points: int
    comment: str


class RatingStorage:
    """Unsaved ratings, one per :class:`DraftKey`."""

    def __init__(self, backend=None, timeout: Optional[int] = None):
        self._cache = backend or cache
        self._timeout = timeout if timeout is not None else settings.RATING_DRAFT_TTL

    def try_get(self, key: DraftKey) -> Optional[RatingDraft]:
        value = self._cache.get(key.cache_key)
        if value is None:
            return None
        return RatingDraft(points=value["points"], comment=value["comment"])

    def set(self, key: DraftKey, draft: RatingDraft) -> None:
        self._cache.set(
            key.cache_key,
            {"points": draft.points, "comment": draft.comment},
            self._timeout,
        )

    def clean(self, key: DraftKey) -> None:
        self._cache.delete(key.cache_key)


class SolutionsApi:
    """HTTP access to the gateway's rating endpoints."""

    def __init__(self, base_url: Optional[str] = None, session=None, timeout: int = 10):
        self.base_url = (base_url or settings.GATEWAY_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post(self, path: str, payload: dict) -> requests.Response:
        response = self.session.post(
            f"{self.base_url}/api/solutions/{path}", json=payload, timeout=self.timeout
        )
        response.raise_for_status()
        return response

    def rate_solution(self, solution_id: int, rating: int, lecturer_comment: str) -> None:
        self._post(
            f"rateSolution/{solution_id}",
            {"rating": rating, "lecturer_comment": lecturer_comment},
        )

    def rate_empty_solution(self, task_id: int, payload: dict) -> None:
        self._post(f"rateEmptySolution/{task_id}", payload)


class WidgetState(enum.Enum):
    UNRATED_IDLE = "unrated/no-clicked"
    UNRATED_EDITING = "unrated/editing"
    RATED_IDLE = "rated/no-clicked"
    RATED_EDITING = "rated/editing"


class RatingWidget:
    """Rating form for one student's solution of one task.

    ``task`` needs ``id``, ``max_rating``, ``has_deadline`` and
    ``deadline_date``; ``solution`` (absent when nothing was handed in) needs
    ``id``, ``rating``, ``lecturer_comment``, ``state`` and
    ``publication_date``.  ``api`` is anything with ``rate_solution`` and
    ``rate_empty_solution``, by default :class:`SolutionsApi`.
    """

    def __init__(
        self,
        *,
        task,
        student,
        solution=None,
        for_mentor: bool = False,
        lecturer=None,
        group_mates: Sequence = (),
        last_rating: Optional[int] = None,
        api=None,
        storage: Optional[RatingStorage] = None,
        on_rate_solution: Optional[Callable[[], None]] = None,
    ):
        self.task = task
        self.student = student
        self.for_mentor = for_mentor
        self.last_rating = last_rating
        self.api = api or SolutionsApi()
        self.storage = storage or RatingStorage()
        self.on_rate_solution = on_rate_solution
        self.load(solution, lecturer=lecturer, group_mates=group_mates)

    def load(self, solution, *, lecturer=None, group_mates: Sequence = ()) -> None:
        """Show ``solution`` as last confirmed by the server, restoring any draft."""

        self.solution = solution
        self.lecturer = lecturer
        self.group_mates = list(group_mates)
        self.add_bonus_points = False

        draft = self.storage.try_get(self.draft_key)
        if draft is not None:
            self.points = draft.points
            self.lecturer_comment = draft.comment
            self.is_editing = True
        else:
            self.points, self.lecturer_comment = self._server_values()
            self.is_editing = False

    @property
    def draft_key(self) -> DraftKey:
        return DraftKey(
            task_id=self.task.id,
            student_id=self.student.user_id,
            solution_id=self.solution.id if self.solution is not None else None,
        )

    @property
    def max_rating(self) -> int:
        return self.task.max_rating

    @property
    def is_rated(self) -> bool:
        return self.solution is not None and self.solution.state != Solution.State.POSTED

    @property
    def state(self) -> WidgetState:
        if self.is_rated:
            return WidgetState.RATED_EDITING if self.is_editing else WidgetState.RATED_IDLE
        return WidgetState.UNRATED_EDITING if self.is_editing else WidgetState.UNRATED_IDLE

    @property
    def uses_star_input(self) -> bool:
        return (
            self.max_rating <= STAR_INPUT_MAX_RATING
            and self.points <= self.max_rating
            and not self.add_bonus_points
        )

    @property
    def rated_above_max(self) -> bool:
        return self.points > self.max_rating

    @property
    def button_label(self) -> str:
        return "Изменить оценку" if self.is_rated else "Оценить решение"

    @property
    def lecturer_name(self) -> Optional[str]:
        if self.lecturer is None or not self.is_rated:
            return None
        if self.is_editing:
            return "..."
        return f"{self.lecturer.surname} {self.lecturer.name}"

    @property
    def authors(self) -> list:
        return self.group_mates or [self.student]

    @property
    def previous_rating_caption(self) -> Optional[str]:
        if self.last_rating is None:
            return None
        return f"Оценка за предыдущее решение: {self.last_rating} ⭐"

    @property
    def sent_after_deadline(self) -> Optional[timedelta]:
        if self.solution is None or not self.task.has_deadline:
            return None
        late_by = self.solution.publication_date - self.task.deadline_date
        return late_by if late_by > timedelta(0) else None

    def _server_values(self):
        if self.solution is None:
            return 0, ""
        return self.solution.rating or 0, self.solution.lecturer_comment or ""

    def _ensure_mentor(self) -> None:
        if not self.for_mentor:
            raise PermissionError("Оценивать решения могут только преподаватели курса")

    def _persist(self) -> None:
        if self.is_editing:
            self.storage.set(
                self.draft_key,
                RatingDraft(points=self.points, comment=self.lecturer_comment),
            )

    def _stop_editing(self) -> None:
        self.is_editing = False
        self.storage.clean(self.draft_key)

    def begin_edit(self) -> None:
        self._ensure_mentor()
        if self.is_editing:
            return
        draft = self.storage.try_get(self.draft_key)
        if draft is not None:
            self.points, self.lecturer_comment = draft.points, draft.comment
        else:
            self.points, self.lecturer_comment = self._server_values()
        self.is_editing = True
        self._persist()

    def set_star_rating(self, value: Optional[int]) -> None:
        self.begin_edit()
        self.points = value or 0
        self.add_bonus_points = False
        self._persist()

    def set_points(self, value) -> None:
        self.begin_edit()
        self.points = int(value)
        self._persist()

    def set_comment(self, text: str) -> None:
        self.begin_edit()
        self.lecturer_comment = text
        self._persist()

    def request_special_grading(self) -> None:
        """Switch to free-form points, allowing a grade above the maximum."""
        self._ensure_mentor()
        self.add_bonus_points = True

    def cancel(self) -> None:
        self.points, self.lecturer_comment = self._server_values()
        self._stop_editing()

    def submit(self) -> None:
        self._ensure_mentor()
        if self.solution is not None:
            self.api.rate_solution(self.solution.id, self.points, self.lecturer_comment)
        else:
            self.api.rate_empty_solution(
                self.task.id,
                {
                    "comment": "",
                    "github_url": "",
                    "lecturer_comment": self.lecturer_comment,
                    "publication_date": None,
                    "rating": self.points,
                    "student_id": self.student.user_id,
                },
            )
        logger.debug("Rating %s submitted for %s", self.points, self.draft_key)
        self._stop_editing()
        if self.on_rate_solution is not None:
            self.on_rate_solution()
