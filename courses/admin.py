from django.contrib import admin

from .models import (
    Course,
    CourseMate,
    Group,
    GroupMate,
    Homework,
    HomeworkTask,
)


class HomeworkInline(admin.TabularInline):
    model = Homework
    extra = 0
    fields = ("title", "publication_date")


class CourseMateInline(admin.TabularInline):
    model = CourseMate
    extra = 0
    fields = ("student", "is_accepted")


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("name", "group_name", "is_open", "is_completed")
    list_filter = ("is_open", "is_completed")
    search_fields = ("name", "group_name")
    filter_horizontal = ("mentors",)
    readonly_fields = ("invite_code",)
    inlines = [HomeworkInline, CourseMateInline]


class HomeworkTaskInline(admin.TabularInline):
    model = HomeworkTask
    extra = 0
    fields = (
        "title",
        "max_rating",
        "publication_date",
        "deadline_date",
        "is_deadline_strict",
    )


@admin.register(Homework)
class HomeworkAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "publication_date")
    list_filter = ("course",)
    search_fields = ("title", "course__name")
    inlines = [HomeworkTaskInline]


@admin.register(HomeworkTask)
class HomeworkTaskAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "homework",
        "max_rating",
        "publication_date",
        "deadline_date",
    )
    list_filter = ("homework__course", "is_deadline_strict")
    search_fields = ("title", "homework__title")


@admin.register(CourseMate)
class CourseMateAdmin(admin.ModelAdmin):
    list_display = ("student", "course", "is_accepted")
    list_filter = ("is_accepted", "course")
    search_fields = ("student__username", "course__name")


class GroupMateInline(admin.TabularInline):
    model = GroupMate
    extra = 0


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ("__str__", "course", "created_at")
    list_filter = ("course",)
    inlines = [GroupMateInline]
