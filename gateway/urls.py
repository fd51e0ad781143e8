from django.urls import path

from . import views

app_name = "gateway"

urlpatterns = [
    path("<int:pk>", views.SolutionDetailView.as_view(), name="solution"),
    path(
        "taskSolution/<int:task_id>/<int:student_id>",
        views.StudentSolutionsPageView.as_view(),
        name="student-solutions",
    ),
    path("tasks/<int:task_id>", views.TaskSolutionsPageView.as_view(), name="task-solutions"),
    path(
        "rateEmptySolution/<int:task_id>",
        views.RateEmptySolutionView.as_view(),
        name="rate-empty-solution",
    ),
    path("giveUp/<int:task_id>", views.GiveUpView.as_view(), name="give-up"),
    path(
        "rateSolution/<int:solution_id>",
        views.RateSolutionView.as_view(),
        name="rate-solution",
    ),
    path(
        "markSolutionFinal/<int:solution_id>",
        views.MarkSolutionFinalView.as_view(),
        name="mark-solution-final",
    ),
    path("delete/<int:solution_id>", views.DeleteSolutionView.as_view(), name="delete-solution"),
    path("unratedSolutions", views.UnratedSolutionsView.as_view(), name="unrated-solutions"),
]
