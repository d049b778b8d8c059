# hospitals/serializers.py
from django.utils import timezone
from rest_framework import serializers

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES
from .models import BloodRequest


class BloodRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = BloodRequest
        fields = [
            'id',
            'hospital',
            'hospital_name',
            'location',
            'blood_type',
            'units_needed',
            'urgency',
            'patient_condition',
            'contact_person',
            'contact_phone',
            'additional_notes',
            'expiry_date',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BloodRequestCreateSerializer(serializers.Serializer):
    """
    Input for a new blood request. Hospital name and location are not
    accepted here; they are copied from the requesting hospital's profile.
    """
    blood_type = serializers.ChoiceField(choices=BLOOD_TYPE_CHOICES)
    units_needed = serializers.IntegerField(min_value=1)
    urgency = serializers.ChoiceField(choices=BloodRequest.URGENCY_CHOICES)
    patient_condition = serializers.CharField(required=False, allow_blank=True, default='')
    contact_person = serializers.CharField(max_length=200)
    contact_phone = serializers.CharField(max_length=20)
    additional_notes = serializers.CharField(required=False, allow_blank=True, default='')
    expiry_date = serializers.DateTimeField()

    def to_internal_value(self, data):
        # Urgency arrives in any case from some clients ("CRITICAL")
        if hasattr(data, 'get') and isinstance(data.get('urgency'), str):
            data = data.copy()
            data['urgency'] = data['urgency'].strip().lower()
        return super().to_internal_value(data)

    def validate_contact_person(self, value):
        if not value.strip():
            raise serializers.ValidationError("This field may not be blank.")
        return value.strip()

    def validate_contact_phone(self, value):
        if not value.strip():
            raise serializers.ValidationError("This field may not be blank.")
        return value.strip()

    def validate_expiry_date(self, value):
        if value <= timezone.now():
            raise serializers.ValidationError("Expiry date must be in the future.")
        return value


class BloodRequestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=['fulfilled', 'expired'])
