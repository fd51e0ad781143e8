from django.conf import settings
from django.db import models


class Account(models.Model):
    """Profile data the rest of the platform reads about a user."""

    class Role(models.TextChoices):
        STUDENT = "Student", "Student"
        LECTURER = "Lecturer", "Lecturer"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="account",
    )
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)
    middle_name = models.CharField(max_length=150, blank=True)
    is_external_auth = models.BooleanField(default=False)

    class Meta:
        indexes = [models.Index(fields=["role"], name="accounts_account_role_idx")]

    def __str__(self):
        return f"{self.user.username} ({self.role})"

    @property
    def is_lecturer(self) -> bool:
        return self.role == self.Role.LECTURER

    @property
    def is_student(self) -> bool:
        return self.role == self.Role.STUDENT
