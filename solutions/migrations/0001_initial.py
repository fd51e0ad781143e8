from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("courses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Solution",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("github_url", models.URLField(blank=True, max_length=500)),
                ("comment", models.TextField(blank=True)),
                ("lecturer_comment", models.TextField(blank=True)),
                ("rating", models.IntegerField(default=0)),
                (
                    "state",
                    models.PositiveSmallIntegerField(
                        choices=[(0, "Posted"), (1, "Rated"), (2, "Final")],
                        default=0,
                    ),
                ),
                (
                    "publication_date",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("rating_date", models.DateTimeField(blank=True, null=True)),
                (
                    "group",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="solutions",
                        to="courses.group",
                    ),
                ),
                (
                    "lecturer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="rated_solutions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="solutions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "task",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="solutions",
                        to="courses.homeworktask",
                    ),
                ),
            ],
            options={
                "ordering": ("publication_date", "id"),
                "indexes": [
                    models.Index(
                        fields=["task", "student"], name="solutions_task_student_idx"
                    ),
                    models.Index(
                        fields=["task", "state"], name="solutions_task_state_idx"
                    ),
                ],
            },
        ),
    ]
