import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


def generate_invite_code() -> str:
    return str(uuid.uuid4())


class Course(models.Model):
    name = models.CharField(max_length=255)
    group_name = models.CharField(max_length=255, blank=True)
    invite_code = models.CharField(
        max_length=36, unique=True, default=generate_invite_code
    )
    is_completed = models.BooleanField(default=False)
    is_open = models.BooleanField(default=True)
    mentors = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="mentored_courses",
        blank=True,
    )

    class Meta:
        ordering = ("name", "id")

    def __str__(self) -> str:
        return f"{self.name} / {self.group_name}" if self.group_name else self.name


class Homework(models.Model):
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="homeworks",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    publication_date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ("course", "publication_date", "id")

    def __str__(self) -> str:
        return self.title


class HomeworkTask(models.Model):
    homework = models.ForeignKey(
        Homework,
        on_delete=models.CASCADE,
        related_name="tasks",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    max_rating = models.PositiveIntegerField(
        default=10, validators=[MinValueValidator(1)]
    )
    publication_date = models.DateTimeField(default=timezone.now)
    deadline_date = models.DateTimeField(null=True, blank=True)
    is_deadline_strict = models.BooleanField(default=False)

    class Meta:
        ordering = ("homework", "publication_date", "id")

    def __str__(self) -> str:
        return self.title

    @property
    def has_deadline(self) -> bool:
        return self.deadline_date is not None

    def is_published(self, now=None) -> bool:
        return self.publication_date <= (now or timezone.now())


class CourseMate(models.Model):
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="course_mates",
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_memberships",
    )
    is_accepted = models.BooleanField(default=False)

    class Meta:
        unique_together = ("course", "student")

    def __str__(self) -> str:
        state = "accepted" if self.is_accepted else "pending"
        return f"{self.student} → {self.course} ({state})"


class Group(models.Model):
    """Students who hand in one shared solution."""

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="groups",
    )
    name = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name or f"Group #{self.pk}"


class GroupMate(models.Model):
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name="group_mates",
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="group_memberships",
    )

    class Meta:
        unique_together = ("group", "student")

    def __str__(self) -> str:
        return f"{self.student} in {self.group}"
