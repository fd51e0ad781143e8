from __future__ import annotations

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import Account
from courses.models import Course, CourseMate, Homework, HomeworkTask
from solutions.models import Solution


class Command(BaseCommand):
    help = "Создает демонстрационный курс с домашними заданиями и решениями"

    def add_arguments(self, parser):
        parser.add_argument(
            "--lecturer",
            default="lecturer",
            help="Имя пользователя преподавателя (будет создан при отсутствии)",
        )
        parser.add_argument(
            "--password",
            default="testpass123",
            help="Пароль для создаваемых пользователей",
        )
        parser.add_argument(
            "--name",
            default="Алгоритмы и структуры данных",
            help="Название курса",
        )

    def get_user(self, username, password, role, first_name, last_name):
        User = get_user_model()
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                "email": f"{username}@example.com",
                "first_name": first_name,
                "last_name": last_name,
                "is_active": True,
            },
        )
        if created:
            user.set_password(password)
            user.save(update_fields=["password"])
        Account.objects.update_or_create(user=user, defaults={"role": role})
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        password: str = options["password"]
        now = timezone.now()

        lecturer = self.get_user(
            options["lecturer"], password, Account.Role.LECTURER, "Пётр", "Лекторов"
        )
        students = [
            self.get_user(username, password, Account.Role.STUDENT, first_name, last_name)
            for username, first_name, last_name in [
                ("alice", "Алиса", "Иванова"),
                ("boris", "Борис", "Андреев"),
                ("vera", "Вера", "Сидорова"),
            ]
        ]

        course, _ = Course.objects.update_or_create(
            name=options["name"],
            defaults={"group_name": "Б05-123", "is_open": True, "is_completed": False},
        )
        course.mentors.add(lecturer)

        # Пересоздаем содержимое курса, чтобы команда была идемпотентной
        Homework.objects.filter(course=course).delete()
        course.groups.all().delete()

        for student in students:
            CourseMate.objects.update_or_create(
                course=course, student=student, defaults={"is_accepted": True}
            )

        homework = Homework.objects.create(
            course=course,
            title="Сортировки",
            description="Реализуйте алгоритмы из списка и **замерьте** время работы.",
            publication_date=now - timedelta(days=14),
        )
        tasks = [
            HomeworkTask.objects.create(
                homework=homework,
                title="Сортировка слиянием",
                description="Без использования встроенной сортировки.",
                max_rating=10,
                publication_date=now - timedelta(days=14),
                deadline_date=now - timedelta(days=7),
            ),
            HomeworkTask.objects.create(
                homework=homework,
                title="Быстрая сортировка",
                max_rating=10,
                publication_date=now - timedelta(days=14),
                deadline_date=now + timedelta(days=7),
                is_deadline_strict=True,
            ),
            HomeworkTask.objects.create(
                homework=homework,
                title="Курсовой проект",
                max_rating=100,
                publication_date=now - timedelta(days=14),
            ),
        ]

        alice, boris, vera = students
        Solution.objects.create(
            task=tasks[0],
            student=alice,
            github_url="https://github.com/alice/merge-sort",
            state=Solution.State.RATED,
            rating=9,
            lecturer=lecturer,
            lecturer_comment="Хорошо",
            publication_date=now - timedelta(days=8),
            rating_date=now - timedelta(days=6),
        )
        Solution.objects.create(
            task=tasks[0],
            student=boris,
            github_url="https://github.com/boris/merge-sort",
            publication_date=now - timedelta(days=5),
        )
        Solution.objects.create(
            task=tasks[1],
            student=vera,
            github_url="https://github.com/vera/quick-sort",
            publication_date=now - timedelta(days=1),
        )

        self.stdout.write(self.style.SUCCESS("Демонстрационный курс успешно подготовлен."))
        self.stdout.write(
            f"Курс: {course} (id {course.pk}) | Задач: {len(tasks)} | "
            f"Решений: {Solution.objects.filter(task__homework__course=course).count()}"
        )
        self.stdout.write(
            f"Преподаватель: {lecturer.username} | Студенты: "
            + ", ".join(student.username for student in students)
        )
