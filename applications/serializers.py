from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from enterprises.serializers import PostSummarySerializer
from interviews.serializers import InterviewSerializer
from .models import APPLICATION_STATUS, Application, Evaluation, OfferDetails, StatusHistory


class StatusHistorySerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = StatusHistory
        fields = ['id', 'status', 'status_display', 'changed_at', 'changed_by', 'notes',
                  'notification_sent', 'notification_error']
        read_only_fields = fields

    def get_changed_by(self, obj):
        if obj.changed_by is None:
            return None
        return {'id': obj.changed_by_id, 'name': obj.changed_by.get_full_name()}


class EvaluationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Evaluation
        fields = ['id', 'technical_skills', 'communication', 'experience', 'cultural_fit',
                  'overall_score', 'recommendation', 'comments', 'evaluated_by', 'evaluated_at']
        read_only_fields = ['id', 'evaluated_by', 'evaluated_at']


class OfferDetailsSerializer(serializers.ModelSerializer):
    class Meta:
        model = OfferDetails
        fields = ['salary', 'currency', 'joining_date', 'offer_letter_url', 'offer_sent_at',
                  'offer_expires_at', 'response_received_at', 'negotiation_notes']

    def validate(self, attrs):
        sent_at = attrs.get('offer_sent_at')
        expires_at = attrs.get('offer_expires_at')
        if sent_at and expires_at and expires_at < sent_at:
            raise serializers.ValidationError({'offer_expires_at': 'Offer expiry must be after the sent date'})
        return attrs


class ApplySerializer(serializers.Serializer):
    post_id = serializers.IntegerField()
    cover_letter = serializers.CharField(required=False, allow_blank=True, default='')
    source = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)
    referral_code = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=APPLICATION_STATUS)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    send_notification = serializers.BooleanField(required=False, default=True)


class ApplicationListSerializer(serializers.ModelSerializer):
    post = PostSummarySerializer(read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Application
        fields = ['id', 'post', 'status', 'status_display', 'applied_at', 'last_activity_at']
        read_only_fields = fields


class ApplicationDetailSerializer(serializers.ModelSerializer):
    post = PostSummarySerializer(read_only=True)
    user = UserSummarySerializer(read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)
    interviews = InterviewSerializer(many=True, read_only=True)
    current_interview = InterviewSerializer(read_only=True)
    evaluations = EvaluationSerializer(many=True, read_only=True)
    offer_details = serializers.SerializerMethodField()
    average_score = serializers.FloatField(read_only=True)
    days_since_application = serializers.IntegerField(read_only=True)

    class Meta:
        model = Application
        fields = ['id', 'post', 'user', 'status', 'status_display', 'cover_letter', 'source',
                  'referral_code', 'resume_version', 'applied_at', 'last_activity_at',
                  'current_interview', 'interviews', 'status_history', 'evaluations',
                  'offer_details', 'average_score', 'days_since_application', 'internal_notes']
        read_only_fields = fields

    def get_offer_details(self, obj):
        offer = OfferDetails.objects.filter(application=obj).first()
        return OfferDetailsSerializer(offer).data if offer else None

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # ghi chú nội bộ và đánh giá chỉ dành cho nhà tuyển dụng
        if not self.context.get('is_recruiter', False):
            data.pop('internal_notes', None)
            data.pop('evaluations', None)
            data.pop('average_score', None)
            for interview in data.get('interviews') or []:
                interview.pop('internal_notes', None)
            if data.get('current_interview'):
                data['current_interview'].pop('internal_notes', None)
        return data
