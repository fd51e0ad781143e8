from django.conf import settings
from django.db import models
from django.utils import timezone


class Solution(models.Model):
    """A student's (or a group's) answer to a homework task."""

    class State(models.IntegerChoices):
        POSTED = 0, "Posted"
        RATED = 1, "Rated"
        FINAL = 2, "Final"

    task = models.ForeignKey(
        "courses.HomeworkTask",
        on_delete=models.CASCADE,
        related_name="solutions",
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="solutions",
    )
    group = models.ForeignKey(
        "courses.Group",
        on_delete=models.SET_NULL,
        related_name="solutions",
        null=True,
        blank=True,
    )
    lecturer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="rated_solutions",
        null=True,
        blank=True,
    )
    github_url = models.URLField(max_length=500, blank=True)
    comment = models.TextField(blank=True)
    lecturer_comment = models.TextField(blank=True)
    rating = models.IntegerField(default=0)
    state = models.PositiveSmallIntegerField(choices=State.choices, default=State.POSTED)
    publication_date = models.DateTimeField(default=timezone.now)
    rating_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("publication_date", "id")
        indexes = [
            models.Index(fields=["task", "student"], name="solutions_task_student_idx"),
            models.Index(fields=["task", "state"], name="solutions_task_state_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.student} → {self.task} ({self.get_state_display()})"

    @property
    def is_rated(self) -> bool:
        return self.state != self.State.POSTED
