from rest_framework import serializers

from .rendering import render_description


class TaskDataSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    homework_id = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    max_rating = serializers.IntegerField(read_only=True)
    publication_date = serializers.DateTimeField(read_only=True)
    deadline_date = serializers.DateTimeField(read_only=True, allow_null=True)
    has_deadline = serializers.BooleanField(read_only=True)
    is_deadline_strict = serializers.BooleanField(read_only=True)


class RenderedTaskDataSerializer(TaskDataSerializer):
    description_html = serializers.SerializerMethodField()

    def get_description_html(self, obj) -> str:
        return render_description(obj.description)


class HomeworkDataSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    course_id = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    publication_date = serializers.DateTimeField(read_only=True)
    tasks = TaskDataSerializer(many=True, read_only=True)


class RenderedHomeworkDataSerializer(HomeworkDataSerializer):
    description_html = serializers.SerializerMethodField()
    tasks = serializers.SerializerMethodField()

    def get_description_html(self, obj) -> str:
        return render_description(obj.description)

    def get_tasks(self, obj):
        visible = self.context.get("visible_task_ids")
        tasks = [task for task in obj.tasks if visible is None or task.id in visible]
        return RenderedTaskDataSerializer(tasks, many=True).data


class CourseMateDataSerializer(serializers.Serializer):
    student_id = serializers.IntegerField(read_only=True)
    is_accepted = serializers.BooleanField(read_only=True)


class GroupDataSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    student_ids = serializers.ListField(child=serializers.IntegerField(), read_only=True)


class CourseSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    group_name = serializers.CharField(read_only=True)
    is_completed = serializers.BooleanField(read_only=True)
    is_open = serializers.BooleanField(read_only=True)
    mentor_ids = serializers.ListField(child=serializers.IntegerField(), read_only=True)


class CourseDataSerializer(CourseSummarySerializer):
    course_mates = CourseMateDataSerializer(many=True, read_only=True)
    homeworks = HomeworkDataSerializer(many=True, read_only=True)
    groups = GroupDataSerializer(many=True, read_only=True)
    invite_code = serializers.SerializerMethodField()

    def get_invite_code(self, obj):
        user = self.context.get("user")
        if user is not None and obj.is_mentor(user.pk):
            return obj.invite_code
        return None


class CourseCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    group_name = serializers.CharField(max_length=255, allow_blank=True, default="")
    is_open = serializers.BooleanField(default=True)


class CourseUpdateSerializer(CourseCreateSerializer):
    is_completed = serializers.BooleanField(default=False)
