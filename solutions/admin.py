from django.contrib import admin

from .models import Solution


@admin.register(Solution)
class SolutionAdmin(admin.ModelAdmin):
    list_display = (
        "task",
        "student",
        "group",
        "state",
        "rating",
        "lecturer",
        "publication_date",
    )
    list_filter = ("state", "task__homework__course")
    search_fields = ("student__username", "student__last_name", "task__title")
    readonly_fields = ("publication_date", "rating_date")
