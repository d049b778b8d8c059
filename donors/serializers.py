# donors/serializers.py
from rest_framework import serializers

from .models import DonorProfile, Donation


class DonorSerializer(serializers.ModelSerializer):
    email = serializers.SerializerMethodField()

    class Meta:
        model = DonorProfile
        fields = ['id', 'full_name', 'email', 'phone', 'blood_type', 'address', 'created_at']

    def get_email(self, obj):
        return obj.user.email if obj.user else "N/A"


class DonationSerializer(serializers.ModelSerializer):
    donor_name = serializers.CharField(source='donor.full_name', read_only=True)
    hospital_name = serializers.CharField(source='hospital.hospital_name', read_only=True)

    class Meta:
        model = Donation
        fields = [
            'id', 'donor', 'donor_name', 'hospital', 'hospital_name',
            'date', 'blood_type', 'units', 'status', 'impact',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['hospital', 'status', 'impact', 'created_at', 'updated_at']
        extra_kwargs = {
            'blood_type': {'required': False},
            'units': {'min_value': 1},
        }

    def validate(self, attrs):
        donor = attrs['donor']
        if not attrs.get('blood_type'):
            if not donor.blood_type:
                raise serializers.ValidationError(
                    {'blood_type': "Required when the donor's blood type is not on file."}
                )
            attrs['blood_type'] = donor.blood_type
        return attrs