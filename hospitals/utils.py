import logging

from django.db import transaction
from django.utils import timezone

from donors.models import DonorProfile
from hospitals.models import HospitalDonorMembership
from hospitals.tokens import InvalidOptInToken, decode_opt_in_token

# Logger setup
logger = logging.getLogger(__name__)


def has_consented(donor, hospital):
    return HospitalDonorMembership.objects.filter(
        donor=donor, hospital=hospital, consented=True
    ).exists()


def record_opt_in(hospital, raw_token):
    """
    Record a donor's consent to be listed by ``hospital``.
    The token must have been issued for this hospital.
    """
    token = decode_opt_in_token(raw_token)

    if str(token['hospital_id']) != str(hospital.pk):
        raise InvalidOptInToken("This opt-in link belongs to a different hospital")

    try:
        donor = DonorProfile.objects.get(pk=token['donor_id'])
    except DonorProfile.DoesNotExist:
        raise InvalidOptInToken("Donor no longer exists") from None

    with transaction.atomic():
        membership, _ = HospitalDonorMembership.objects.select_for_update().get_or_create(
            hospital=hospital, donor=donor
        )
        if not membership.consented:
            membership.consented = True
            membership.consented_at = timezone.now()
            membership.save(update_fields=['consented', 'consented_at'])
            logger.info("Donor #%s opted in to hospital %s", donor.pk, hospital.hospital_name)

    return membership


def consented_donors(hospital):
    return (
        DonorProfile.objects.filter(hospital_memberships__hospital=hospital, hospital_memberships__consented=True)
        .select_related('user')
        .order_by('full_name')
    )
