"""
Blood request broadcast.

Creating a blood request happens in two phases:

1. ``commit_request_and_notifications`` stores the request and one in-app
   notification per eligible donor in a single transaction.
2. ``dispatch_sms_best_effort`` texts compatible donors, only for critical
   requests and only after phase 1 committed. It never raises.
"""
import logging
from typing import NamedTuple

from django.db import DEFAULT_DB_ALIAS, transaction

from algorithms.blood_compatibility import compatible_donor_types
from algorithms.eligibility import partition_donors
from donors.models import DonorProfile
from hospitals.models import BloodRequest
from notifications.models import Notification, SmsLog
from notifications.sms import SmsResult, format_blood_request_sms, format_phone_number, get_sms_backend

logger = logging.getLogger(__name__)

# Payload keys a hospital may set; name/location always come from its profile
REQUEST_FIELDS = (
    'blood_type',
    'units_needed',
    'urgency',
    'patient_condition',
    'contact_person',
    'contact_phone',
    'additional_notes',
    'expiry_date',
)


class SmsOutcome(NamedTuple):
    attempted: bool = False
    sent: int = 0
    failed: int = 0


class FanoutResult(NamedTuple):
    blood_request: BloodRequest
    notified_count: int
    sms_targets: list
    sms: SmsOutcome = SmsOutcome()


def compose_blood_request_notification(blood_request):
    """Title and message shared by every notification of one request"""
    if blood_request.is_critical:
        title = f"🚨 CRITICAL: {blood_request.blood_type} Blood Needed Urgently"
    else:
        title = f"Urgent: {blood_request.blood_type} Blood Needed"

    message = (
        f"{blood_request.hospital_name} needs {blood_request.units_needed} units of "
        f"{blood_request.blood_type} blood. Urgency: {blood_request.urgency}. "
        f"Contact: {blood_request.contact_phone}"
    )
    return title, message


class BloodRequestBroadcaster:
    def __init__(self, using=DEFAULT_DB_ALIAS, sms_backend=None):
        self.using = using
        self.sms_backend = sms_backend

    def get_donor_pool(self):
        return (
            DonorProfile.objects.db_manager(self.using)
            .select_related('user')
            .filter(user__is_active=True)
        )

    def commit_request_and_notifications(self, hospital, payload) -> FanoutResult:
        """
        Store the request and its in-app notifications atomically.
        Database errors roll back both and propagate to the caller.
        """
        fields = {key: payload[key] for key in REQUEST_FIELDS if key in payload}

        with transaction.atomic(using=self.using):
            blood_request = BloodRequest.objects.db_manager(self.using).create(
                hospital=hospital,
                hospital_name=hospital.hospital_name,
                location=hospital.address,
                status='active',
                **fields,
            )
            logger.info("Blood request #%s created by %s", blood_request.pk, hospital.hospital_name)

            compatible_types = compatible_donor_types(blood_request.blood_type)
            targets = partition_donors(self.get_donor_pool(), compatible_types)
            logger.info(
                "Request #%s (%s): %d in-app target(s), %d with phone numbers",
                blood_request.pk, blood_request.blood_type, len(targets.in_app), len(targets.sms),
            )

            self._create_notifications(blood_request, targets.in_app)

        return FanoutResult(
            blood_request=blood_request,
            notified_count=len(targets.in_app),
            sms_targets=targets.sms,
        )

    def _create_notifications(self, blood_request, donors):
        title, message = compose_blood_request_notification(blood_request)
        Notification.objects.db_manager(self.using).bulk_create([
            Notification(
                user_id=donor.user_id,
                kind='blood_request',
                title=title,
                message=message,
                blood_request=blood_request,
            )
            for donor in donors
        ])

    def dispatch_sms_best_effort(self, blood_request, recipients) -> SmsOutcome:
        """
        Text ``recipients`` about ``blood_request``.
        Failures are logged and counted, never raised.
        """
        message = ''
        phone_numbers = [donor.phone for donor in recipients]
        provider = getattr(self.sms_backend, 'provider_name', 'unknown')

        try:
            backend = self.sms_backend or get_sms_backend()
            provider = backend.provider_name
            message = format_blood_request_sms(blood_request)
            phone_numbers = [format_phone_number(donor.phone) for donor in recipients]

            logger.info("Sending %s blood request SMS to %d donor(s)", blood_request.urgency, len(phone_numbers))
            results = list(backend.send_bulk(message, phone_numbers))
        except Exception as e:
            logger.exception(
                "SMS dispatch failed for blood request #%s; in-app notifications are unaffected",
                blood_request.pk,
            )
            error = str(e) or e.__class__.__name__
            results = [SmsResult(success=False, error=error) for _ in recipients]

        # A short result list means the missing recipients were never sent
        results = results[:len(recipients)]
        results += [SmsResult(success=False, error='No result from provider')] * (len(recipients) - len(results))

        sent = sum(1 for result in results if result.success)
        failed = len(recipients) - sent
        self._log_sms(blood_request, recipients, phone_numbers, message, results, provider)

        logger.info("SMS results for request #%s: %d sent, %d failed", blood_request.pk, sent, failed)
        return SmsOutcome(attempted=True, sent=sent, failed=failed)

    def _log_sms(self, blood_request, recipients, phone_numbers, message, results, provider):
        try:
            SmsLog.objects.db_manager(self.using).bulk_create([
                SmsLog(
                    user_id=donor.user_id,
                    phone_number=phone,
                    message=message,
                    blood_request=blood_request,
                    status='sent' if result.success else 'failed',
                    provider=provider,
                    provider_message_id=result.message_id or '',
                    error_message=result.error or '',
                )
                for donor, phone, result in zip(recipients, phone_numbers, results)
            ])
        except Exception:
            logger.exception("Failed to write SMS logs for blood request #%s", blood_request.pk)

    def broadcast(self, hospital, payload) -> FanoutResult:
        result = self.commit_request_and_notifications(hospital, payload)
        blood_request = result.blood_request

        if not blood_request.is_critical:
            logger.info("Non-critical request #%s (%s): in-app notifications only", blood_request.pk, blood_request.urgency)
            return result

        if not result.sms_targets:
            logger.info("Critical request #%s: no compatible donors with phone numbers", blood_request.pk)
            return result

        outcome = self.dispatch_sms_best_effort(blood_request, result.sms_targets)
        return result._replace(sms=outcome)


def broadcast_blood_request(hospital, payload, sms_backend=None) -> FanoutResult:
    return BloodRequestBroadcaster(sms_backend=sms_backend).broadcast(hospital, payload)
