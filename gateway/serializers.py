from rest_framework import serializers

from accounts.serializers import AccountDataSerializer
from courses.serializers import TaskDataSerializer


class SolutionDataSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    task_id = serializers.IntegerField(read_only=True)
    student_id = serializers.IntegerField(read_only=True)
    group_id = serializers.IntegerField(read_only=True, allow_null=True)
    lecturer_id = serializers.IntegerField(read_only=True, allow_null=True)
    github_url = serializers.CharField(read_only=True)
    comment = serializers.CharField(read_only=True)
    lecturer_comment = serializers.CharField(read_only=True)
    rating = serializers.IntegerField(read_only=True)
    state = serializers.IntegerField(read_only=True)
    publication_date = serializers.DateTimeField(read_only=True)
    rating_date = serializers.DateTimeField(read_only=True, allow_null=True)


class SolutionViewSerializer(serializers.Serializer):
    """Flattens :class:`gateway.view_models.SolutionView`."""

    id = serializers.IntegerField(source="solution.id", read_only=True)
    task_id = serializers.IntegerField(source="solution.task_id", read_only=True)
    student_id = serializers.IntegerField(source="solution.student_id", read_only=True)
    group_id = serializers.IntegerField(source="solution.group_id", read_only=True)
    github_url = serializers.CharField(source="solution.github_url", read_only=True)
    comment = serializers.CharField(source="solution.comment", read_only=True)
    lecturer_comment = serializers.CharField(source="solution.lecturer_comment", read_only=True)
    rating = serializers.IntegerField(source="solution.rating", read_only=True)
    state = serializers.IntegerField(source="solution.state", read_only=True)
    publication_date = serializers.DateTimeField(source="solution.publication_date", read_only=True)
    rating_date = serializers.DateTimeField(source="solution.rating_date", read_only=True)
    group_mates = AccountDataSerializer(many=True, read_only=True, allow_null=True)
    lecturer = AccountDataSerializer(read_only=True, allow_null=True)


class UserTaskSolutionsSerializer(serializers.Serializer):
    max_rating = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)
    task_id = serializers.IntegerField(read_only=True)
    solutions = SolutionViewSerializer(many=True, read_only=True)


class UserTaskSolutionsPageDataSerializer(serializers.Serializer):
    course_id = serializers.IntegerField(read_only=True)
    course_mates = AccountDataSerializer(many=True, read_only=True)
    task_solutions = UserTaskSolutionsSerializer(many=True, read_only=True)
    task = TaskDataSerializer(read_only=True)


class StudentSolutionsRowSerializer(serializers.Serializer):
    user = AccountDataSerializer(read_only=True)
    solutions = SolutionViewSerializer(many=True, read_only=True)


class TaskSolutionsStatsSerializer(serializers.Serializer):
    task_id = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)
    count_unrated_solutions = serializers.IntegerField(read_only=True)
    average_rating = serializers.FloatField(read_only=True, allow_null=True)


class TaskSolutionStatisticsPageDataSerializer(serializers.Serializer):
    course_id = serializers.IntegerField(read_only=True)
    students_solutions = StudentSolutionsRowSerializer(many=True, read_only=True)
    stats_for_tasks = TaskSolutionsStatsSerializer(many=True, read_only=True)


class SolutionPreviewSerializer(serializers.Serializer):
    student = AccountDataSerializer(read_only=True)
    course_title = serializers.CharField(read_only=True)
    course_id = serializers.IntegerField(read_only=True)
    homework_title = serializers.CharField(read_only=True)
    task_title = serializers.CharField(read_only=True)
    task_id = serializers.IntegerField(read_only=True)
    solution_id = serializers.IntegerField(read_only=True)
    publication_date = serializers.DateTimeField(read_only=True)
    is_first_try = serializers.BooleanField(read_only=True)
    group_id = serializers.IntegerField(read_only=True, allow_null=True)
    sent_after_deadline = serializers.BooleanField(read_only=True)
    is_course_completed = serializers.BooleanField(read_only=True)


class UnratedSolutionPreviewsSerializer(serializers.Serializer):
    unrated_solutions = SolutionPreviewSerializer(many=True, read_only=True)


class SolutionViewModelSerializer(serializers.Serializer):
    """Incoming solution, posted by a student or graded by a lecturer."""

    github_url = serializers.CharField(max_length=512, allow_blank=True, default="")
    comment = serializers.CharField(allow_blank=True, default="")
    student_id = serializers.IntegerField(required=False)
    group_mate_ids = serializers.ListField(
        child=serializers.IntegerField(), required=False, default=list
    )
    publication_date = serializers.DateTimeField(required=False, allow_null=True)
    lecturer_comment = serializers.CharField(allow_blank=True, default="")
    rating = serializers.IntegerField(min_value=0, default=0)


class RateSolutionSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=0)
    lecturer_comment = serializers.CharField(allow_blank=True, default="")
