from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import exceptions, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.client import AuthServiceClient
from accounts.models import Account
from accounts.permissions import IsLecturer, IsStudent
from accounts.serializers import AccountDataSerializer

from . import services
from .client import CourseData, CoursesServiceClient, to_course_data
from .serializers import (
    CourseCreateSerializer,
    CourseDataSerializer,
    CourseSummarySerializer,
    CourseUpdateSerializer,
    RenderedHomeworkDataSerializer,
)


def get_course_or_404(course_id: int) -> CourseData:
    course = CoursesServiceClient().get_course_by_id(course_id)
    if course is None:
        raise exceptions.NotFound("Курс не найден")
    return course


def get_mentored_course(course_id: int, user) -> CourseData:
    course = get_course_or_404(course_id)
    if not course.is_mentor(user.pk):
        raise exceptions.PermissionDenied("Действие доступно только преподавателям курса")
    return course


class CourseListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        courses = [to_course_data(course) for course in services.get_all()]
        return Response(CourseSummarySerializer(courses, many=True).data)


class CourseDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        serializer = CourseDataSerializer(course, context={"user": request.user})
        return Response(serializer.data)

    def delete(self, request, course_id: int, *args, **kwargs):
        get_mentored_course(course_id, request.user)
        services.delete(course_id)
        return Response(status=status.HTTP_200_OK)


class CourseCreateView(APIView):
    permission_classes = [IsLecturer]

    def post(self, request, *args, **kwargs):
        serializer = CourseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = services.add(mentor=request.user, **serializer.validated_data)
        return Response(course.pk, status=status.HTTP_200_OK)


class CourseUpdateView(APIView):
    permission_classes = [IsLecturer]

    def post(self, request, course_id: int, *args, **kwargs):
        get_mentored_course(course_id, request.user)
        serializer = CourseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.update(course_id, **serializer.validated_data)
        return Response(status=status.HTTP_200_OK)


class SignInCourseView(APIView):
    """A student asks to join a course; a mentor has to accept them."""

    permission_classes = [IsStudent]

    def post(self, request, course_id: int, *args, **kwargs):
        if not services.add_student(course_id, request.user.pk):
            raise exceptions.NotFound("Курс не найден или заявка уже подана")
        return Response(status=status.HTTP_200_OK)


class AcceptStudentView(APIView):
    permission_classes = [IsLecturer]

    def post(self, request, course_id: int, student_id: int, *args, **kwargs):
        get_mentored_course(course_id, request.user)
        if not services.accept_course_mate(course_id, student_id):
            raise exceptions.NotFound("Заявка студента не найдена")
        return Response(status=status.HTTP_200_OK)


class RejectStudentView(APIView):
    permission_classes = [IsLecturer]

    def post(self, request, course_id: int, student_id: int, *args, **kwargs):
        get_mentored_course(course_id, request.user)
        if not services.reject_course_mate(course_id, student_id):
            raise exceptions.NotFound("Заявка студента не найдена")
        return Response(status=status.HTTP_200_OK)


class UserCoursesView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        courses = CoursesServiceClient().get_all_user_courses(request.user)
        return Response(CourseSummarySerializer(courses, many=True).data)


class AcceptLecturerView(APIView):
    permission_classes = [IsLecturer]

    def post(self, request, course_id: int, lecturer_email: str, *args, **kwargs):
        get_mentored_course(course_id, request.user)
        lecturer = AuthServiceClient().get_account_by_email(lecturer_email)
        if lecturer is None:
            raise exceptions.NotFound("Пользователь с такой почтой не найден")
        if lecturer.role != Account.Role.LECTURER:
            raise exceptions.ValidationError("Пользователь не является преподавателем")

        lecturer_user = get_user_model().objects.get(pk=lecturer.user_id)
        services.accept_lecturer(course_id, lecturer_user)
        return Response(status=status.HTTP_200_OK)


class LecturersAvailableView(APIView):
    permission_classes = [IsLecturer]

    def get(self, request, course_id: int, *args, **kwargs):
        get_mentored_course(course_id, request.user)
        lecturers = CoursesServiceClient().get_lecturers_available_for_course(course_id)
        return Response(AccountDataSerializer(lecturers, many=True).data)


class CourseAllDataView(APIView):
    """Course with homeworks and rendered task descriptions.

    Students and other non-mentors only see tasks that are already published.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, course_id: int, *args, **kwargs):
        course = get_course_or_404(course_id)
        now = timezone.now()
        visible_task_ids = None
        if not course.is_mentor(request.user.pk):
            visible_task_ids = {
                task.id for task in course.tasks if task.publication_date <= now
            }

        homeworks = RenderedHomeworkDataSerializer(
            course.homeworks,
            many=True,
            context={"visible_task_ids": visible_task_ids},
        ).data
        data = CourseSummarySerializer(course).data
        data["homeworks"] = homeworks
        return Response(data)
