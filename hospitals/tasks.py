import logging

from celery import shared_task
from django.utils import timezone

from hospitals.models import BloodRequest

logger = logging.getLogger(__name__)


@shared_task
def expire_blood_requests():
    """
    Mark active requests past their expiry date as expired.
    Scheduled by Celery beat (see CELERY_BEAT_SCHEDULE).
    """
    expired = BloodRequest.objects.filter(
        status='active',
        expiry_date__lte=timezone.now(),
    ).update(status='expired', updated_at=timezone.now())

    if expired:
        logger.info("Expired %d blood request(s)", expired)
    return expired
