from django.apps import AppConfig


class CoursesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "courses"

    def ready(self) -> None:  # pragma: no cover - side effects only
        from . import notifications  # noqa: F401
