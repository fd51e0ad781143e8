from django.urls import path

from . import views

app_name = "courses"

urlpatterns = [
    path("", views.CourseListView.as_view(), name="course-list"),
    path("<int:course_id>", views.CourseDetailView.as_view(), name="course-detail"),
    path("create", views.CourseCreateView.as_view(), name="course-create"),
    path("update/<int:course_id>", views.CourseUpdateView.as_view(), name="course-update"),
    path("signInCourse/<int:course_id>", views.SignInCourseView.as_view(), name="sign-in-course"),
    path(
        "acceptStudent/<int:course_id>/<int:student_id>",
        views.AcceptStudentView.as_view(),
        name="accept-student",
    ),
    path(
        "rejectStudent/<int:course_id>/<int:student_id>",
        views.RejectStudentView.as_view(),
        name="reject-student",
    ),
    path("userCourses", views.UserCoursesView.as_view(), name="user-courses"),
    path(
        "acceptLecturer/<int:course_id>/<str:lecturer_email>",
        views.AcceptLecturerView.as_view(),
        name="accept-lecturer",
    ),
    path(
        "getLecturersAvailableForCourse/<int:course_id>",
        views.LecturersAvailableView.as_view(),
        name="lecturers-available",
    ),
    path("getAllData/<int:course_id>", views.CourseAllDataView.as_view(), name="course-all-data"),
]
