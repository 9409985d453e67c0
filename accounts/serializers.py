from rest_framework import serializers
from .models import UserAccount


class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = UserAccount
        fields = ('id', 'username', 'name', 'email', 'phone_number')
        read_only_fields = fields
