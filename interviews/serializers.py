from rest_framework import serializers

from .models import Interview, InterviewFeedback, InterviewReschedule, OFFLINE_FIELDS, ONLINE_FIELDS

TIME_FORMATS = ['%H:%M', 'iso-8601']


class InterviewFeedbackSerializer(serializers.ModelSerializer):
    strengths = serializers.ListField(child=serializers.CharField(), required=False)
    improvements = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = InterviewFeedback
        fields = ['rating', 'strengths', 'improvements', 'recommendation', 'comments',
                  'submitted_by', 'submitted_at']
        read_only_fields = ['submitted_by', 'submitted_at']


class InterviewRescheduleSerializer(serializers.ModelSerializer):
    class Meta:
        model = InterviewReschedule
        fields = ['previous_date', 'previous_time', 'reason', 'rescheduled_by', 'rescheduled_at']
        read_only_fields = fields


class InterviewSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    details = serializers.SerializerMethodField()
    feedback = serializers.SerializerMethodField()
    reschedule_history = InterviewRescheduleSerializer(many=True, read_only=True)

    class Meta:
        model = Interview
        fields = ['id', 'application', 'type', 'type_display', 'status', 'status_display',
                  'scheduled_date', 'scheduled_time', 'duration', 'timezone', 'is_online',
                  'details', 'interviewers', 'instructions', 'internal_notes',
                  'reschedule_history', 'feedback', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_details(self, obj):
        return obj.details.as_payload()

    def get_feedback(self, obj):
        feedback = InterviewFeedback.objects.filter(interview=obj).first()
        return InterviewFeedbackSerializer(feedback).data if feedback else None


class ScheduleInterviewSerializer(serializers.Serializer):
    """Validate dữ liệu lên lịch phỏng vấn"""
    type = serializers.ChoiceField(choices=Interview.INTERVIEW_TYPES)
    scheduled_date = serializers.DateField()
    scheduled_time = serializers.TimeField(input_formats=TIME_FORMATS)
    is_online = serializers.BooleanField()
    duration = serializers.IntegerField(required=False, min_value=1, default=60)
    timezone = serializers.CharField(required=False, max_length=64, default='Asia/Dhaka')

    meeting_link = serializers.URLField(required=False, allow_blank=True)
    meeting_platform = serializers.ChoiceField(choices=Interview.MEETING_PLATFORMS, required=False, allow_blank=True)
    meeting_id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    meeting_password = serializers.CharField(required=False, allow_blank=True, max_length=100)

    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    room_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    contact_person = serializers.CharField(required=False, allow_blank=True, max_length=255)
    contact_phone = serializers.CharField(required=False, allow_blank=True, max_length=30)

    interviewers = serializers.ListField(required=False, default=list)
    instructions = serializers.CharField(required=False, allow_blank=True, default='')
    internal_notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        attrs['scheduled_time'] = attrs['scheduled_time'].strftime('%H:%M')
        # chỉ giữ các trường phù hợp với hình thức phỏng vấn
        dropped = OFFLINE_FIELDS if attrs['is_online'] else ONLINE_FIELDS
        for name in dropped:
            attrs.pop(name, None)
        return attrs


class RescheduleInterviewSerializer(serializers.Serializer):
    new_date = serializers.DateField()
    new_time = serializers.TimeField(input_formats=TIME_FORMATS)
    reason = serializers.CharField(allow_blank=False, trim_whitespace=True)

    def validate(self, attrs):
        attrs['new_time'] = attrs['new_time'].strftime('%H:%M')
        return attrs


class CancelInterviewSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
