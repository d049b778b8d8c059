# api/views.py
import logging

from django.db import DatabaseError
from django.shortcuts import get_object_or_404
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.decorators import IsHospitalUser, role_required
from algorithms.priority import sort_by_urgency
from donors.badges import BadgeEngine
from donors.models import DonorProfile, Donation
from donors.serializers import DonationSerializer, DonorSerializer
from donors.utils import award_badges_quietly, complete_donation
from hospitals.models import BloodRequest, HospitalProfile, InvalidStatusTransition
from hospitals.recognition import RecognitionAggregator
from hospitals.serializers import (
    BloodRequestCreateSerializer,
    BloodRequestSerializer,
    BloodRequestStatusSerializer,
)
from hospitals.tokens import InvalidOptInToken
from hospitals.utils import consented_donors, record_opt_in
from notifications.fanout import broadcast_blood_request
from notifications.models import Notification
from notifications.serializers import NotificationSerializer
from notifications.sms import sms_stats

logger = logging.getLogger(__name__)


def success(data, status_code=status.HTTP_200_OK):
    return Response({'status': 'success', 'data': data}, status=status_code)


def hospital_profile_of(user):
    profile = getattr(user, 'hospital_profile', None)
    if profile is None:
        raise PermissionDenied("No hospital profile is linked to this account.")
    return profile


def ensure_owner(user, hospital):
    if hospital_profile_of(user).pk != hospital.pk:
        raise PermissionDenied("This resource belongs to another hospital.")


# ============================================
# BLOOD REQUESTS
# ============================================
class BloodRequestViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    """Active blood requests for donors; creation and status changes for hospitals"""
    queryset = BloodRequest.objects.select_related('hospital')
    serializer_class = BloodRequestSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def get_permissions(self):
        if self.action in ('create', 'partial_update', 'sms_stats'):
            return [IsHospitalUser()]
        return super().get_permissions()

    def list(self, request, *args, **kwargs):
        active = self.get_queryset().filter(status='active')
        ranked = sort_by_urgency(active)
        return success(self.get_serializer(ranked, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        return success(self.get_serializer(self.get_object()).data)

    def create(self, request, *args, **kwargs):
        hospital = hospital_profile_of(request.user)
        serializer = BloodRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = broadcast_blood_request(hospital, serializer.validated_data)
        except DatabaseError:
            logger.exception("Blood request from %s could not be stored", hospital.hospital_name)
            return Response(
                {'status': 'error', 'message': 'Blood request could not be created. Nothing was sent.'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return success({
            'request': BloodRequestSerializer(result.blood_request).data,
            'notified_count': result.notified_count,
            'sms': {
                'attempted': result.sms.attempted,
                'sent': result.sms.sent,
                'failed': result.sms.failed,
            },
        }, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        blood_request = self.get_object()
        ensure_owner(request.user, blood_request.hospital)

        serializer = BloodRequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            blood_request.transition_to(serializer.validated_data['status'])
        except InvalidStatusTransition as e:
            raise ValidationError({'status': [str(e)]})

        return success(self.get_serializer(blood_request).data)

    @action(detail=True, methods=['get'], url_path='sms-stats')
    def sms_stats(self, request, pk=None):
        blood_request = self.get_object()
        ensure_owner(request.user, blood_request.hospital)
        return success(sms_stats(blood_request))


# ============================================
# NOTIFICATIONS
# ============================================
class NotificationViewSet(mixins.ListModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user).select_related('blood_request')

    def list(self, request, *args, **kwargs):
        return success(self.get_serializer(self.get_queryset(), many=True).data)

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        return success({'count': self.get_queryset().filter(is_read=False).count()})

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=['is_read'])
        return success(self.get_serializer(notification).data)


# ============================================
# DONATIONS
# ============================================
class DonationViewSet(mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Hospitals record donations and mark them completed"""
    queryset = Donation.objects.select_related('donor', 'hospital')
    serializer_class = DonationSerializer
    permission_classes = [IsHospitalUser]

    def get_queryset(self):
        return super().get_queryset().filter(hospital=hospital_profile_of(self.request.user))

    def create(self, request, *args, **kwargs):
        hospital = hospital_profile_of(request.user)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        complete = request.data.get('status') == 'completed'
        donation = serializer.save(hospital=hospital, status='scheduled')
        if complete:
            complete_donation(donation)

        return success(self.get_serializer(donation).data, status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        donation = complete_donation(self.get_object())
        return success(self.get_serializer(donation).data)


# ============================================
# BADGES
# ============================================
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def donor_badges(request, donor_id):
    donor = get_object_or_404(DonorProfile, pk=donor_id)
    report = BadgeEngine().compute_progress(donor)
    return success(report.as_dict())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recompute_badges(request, donor_id):
    """Award anything the donor has earned but not yet received"""
    donor = get_object_or_404(DonorProfile, pk=donor_id)
    user = request.user
    if not (user.is_staff or user.user_type == 'super_admin' or donor.user_id == user.pk):
        raise PermissionDenied("You can only recompute your own badges.")

    awarded = award_badges_quietly(donor)
    return success({'awarded': [badge.as_dict() for badge in awarded]})


# ============================================
# HOSPITAL RECOGNITION
# ============================================
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def hospital_recognition(request, hospital_id):
    hospital = get_object_or_404(HospitalProfile, pk=hospital_id)
    return success(RecognitionAggregator().hospital_recognition(hospital))


@api_view(['GET'])
@role_required('hospital')
def hospital_donors(request, hospital_id):
    hospital = get_object_or_404(HospitalProfile, pk=hospital_id)
    ensure_owner(request.user, hospital)
    return success(DonorSerializer(consented_donors(hospital), many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_opt_in(request, hospital_id):
    """Target of the link in the post-donation e-mail"""
    hospital = get_object_or_404(HospitalProfile, pk=hospital_id)
    try:
        membership = record_opt_in(hospital, request.query_params.get('token'))
    except InvalidOptInToken as e:
        return Response({'status': 'error', 'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return success({
        'hospital': hospital.hospital_name,
        'donorId': membership.donor_id,
        'consented': membership.consented,
        'consentedAt': membership.consented_at,
    })
