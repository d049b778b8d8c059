"""
SMS delivery.

Providers are pluggable backends chosen by ``settings.SMS_BACKEND``, in the
same spirit as Django's e-mail backends:

    ConsoleSmsBackend  - logs messages, reports them as not sent (default)
    LocmemSmsBackend   - keeps messages in ``outbox``, reports them as sent
    TwilioSmsBackend   - real delivery through the Twilio REST API
"""
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import List, NamedTuple, Optional

from django.conf import settings
from django.db.models import Count
from django.utils.module_loading import import_string
from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from notifications.models import SmsLog

logger = logging.getLogger(__name__)

# Messages captured by LocmemSmsBackend
outbox = []


class SmsResult(NamedTuple):
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class OutgoingSms(NamedTuple):
    to: str
    body: str


class BaseSmsBackend:
    provider_name = 'base'

    def send(self, phone_number: str, message: str) -> SmsResult:
        raise NotImplementedError('subclasses of BaseSmsBackend must override send()')

    def send_bulk(self, message: str, phone_numbers: List[str]) -> List[SmsResult]:
        """One result per phone number, in the same order"""
        return [self.send(phone, message) for phone in phone_numbers]


class ConsoleSmsBackend(BaseSmsBackend):
    provider_name = 'console'

    def send(self, phone_number, message):
        logger.info("[SMS simulation] Would send to %s: %s", phone_number, message)
        return SmsResult(success=False, error='SMS disabled')


class LocmemSmsBackend(BaseSmsBackend):
    provider_name = 'locmem'

    def send(self, phone_number, message):
        outbox.append(OutgoingSms(to=phone_number, body=message))
        return SmsResult(success=True, message_id=f'locmem-{len(outbox)}')


class TwilioSmsBackend(BaseSmsBackend):
    provider_name = 'twilio'

    def __init__(self, client=None, from_number=None, max_workers=None):
        if client is None:
            client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        self.client = client
        self.from_number = from_number or settings.TWILIO_PHONE_NUMBER
        self.max_workers = max_workers or settings.SMS_MAX_WORKERS

    def send(self, phone_number, message):
        try:
            result = self.client.messages.create(body=message, from_=self.from_number, to=phone_number)
        except TwilioException as e:
            logger.warning("Twilio SMS to %s failed: %s", phone_number, e)
            return SmsResult(success=False, error=str(e))
        except Exception as e:
            # Transport errors (timeouts, refused connections) fail this recipient only
            logger.warning("SMS to %s could not reach Twilio: %r", phone_number, e)
            return SmsResult(success=False, error=str(e) or e.__class__.__name__)
        return SmsResult(success=True, message_id=result.sid)

    def send_bulk(self, message, phone_numbers):
        if not phone_numbers:
            return []
        # Sends run concurrently; map() keeps results in input order
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(phone_numbers))) as pool:
            return list(pool.map(lambda phone: self.send(phone, message), phone_numbers))


def get_sms_backend(backend_path=None, **kwargs) -> BaseSmsBackend:
    backend_class = import_string(backend_path or settings.SMS_BACKEND)
    return backend_class(**kwargs)


def format_phone_number(phone):
    """
    Normalise a phone number to international format.
    A leading 0 or a missing '+' gets the default country code.
    """
    cleaned = re.sub(r'[\s\-()]', '', phone)
    country_code = settings.SMS_DEFAULT_COUNTRY_CODE

    if cleaned.startswith('0'):
        cleaned = country_code + cleaned[1:]
    if not cleaned.startswith('+'):
        cleaned = country_code + cleaned

    return cleaned


def format_blood_request_sms(blood_request):
    if blood_request.is_critical:
        return (
            "🚨 URGENT BLOOD NEEDED 🚨\n\n"
            f"Hospital: {blood_request.hospital_name}\n"
            f"Blood Type: {blood_request.blood_type}\n"
            f"Units: {blood_request.units_needed}\n"
            "Urgency: CRITICAL\n\n"
            f"Contact: {blood_request.contact_person}\n"
            f"Phone: {blood_request.contact_phone}\n\n"
            f"{blood_request.patient_condition}\n\n"
            "Please respond if you can donate.\n"
            "Lives depend on you! 🩸"
        )

    return (
        "🩸 Blood Donation Request\n\n"
        f"Hospital: {blood_request.hospital_name}\n"
        f"Blood Type: {blood_request.blood_type}\n"
        f"Units Needed: {blood_request.units_needed}\n\n"
        f"Contact: {blood_request.contact_phone}\n\n"
        "Your donation can save lives!"
    )


def sms_stats(blood_request=None):
    """SMS log counts grouped by status and provider"""
    logs = SmsLog.objects.all()
    if blood_request is not None:
        logs = logs.filter(blood_request=blood_request)

    return list(
        logs.values('status', 'provider')
        .annotate(count=Count('id'))
        .order_by('status', 'provider')
    )
