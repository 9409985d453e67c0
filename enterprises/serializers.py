from rest_framework import serializers
from .models import PostEntity, JobAlertCriteria


class PostSummarySerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source='enterprise.company_name', read_only=True)
    category = serializers.CharField(source='field.name', read_only=True, default=None)

    class Meta:
        model = PostEntity
        fields = ['id', 'title', 'company_name', 'category', 'city', 'type_working', 'salary_range', 'deadline']
        read_only_fields = fields


class JobAlertCriteriaSerializer(serializers.ModelSerializer):
    categories = serializers.ListField(child=serializers.CharField(), required=False)
    locations = serializers.ListField(child=serializers.CharField(), required=False)
    job_types = serializers.ListField(child=serializers.CharField(), required=False)
    keywords = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = JobAlertCriteria
        fields = ['enabled', 'categories', 'locations', 'job_types', 'keywords', 'min_salary']
