from rest_framework import serializers

from hospitals.serializers import BloodRequestSerializer
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    # Originating request, when there is one
    data = BloodRequestSerializer(source='blood_request', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'kind', 'title', 'message', 'data', 'is_read', 'created_at']
        read_only_fields = fields
