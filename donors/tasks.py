# donors/tasks.py
"""
Celery tasks for donor e-mails
"""
import logging
from urllib.parse import quote

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.utils.html import escape

from donors.models import Donation
from hospitals.tokens import HospitalOptInToken

logger = logging.getLogger(__name__)


def opt_in_url(donation, token):
    return (
        f"{settings.SITE_URL.rstrip('/')}/api/hospitals/{donation.hospital_id}/opt-in/"
        f"?token={quote(str(token))}"
    )


@shared_task
def send_opt_in_invitation(donation_id):
    """
    Ask a donor, after their first completed donation at a hospital,
    whether that hospital may list them as one of its donors.
    """
    try:
        donation = Donation.objects.select_related('donor__user', 'hospital').get(pk=donation_id)
    except Donation.DoesNotExist:
        return f"Donation {donation_id} not found"

    email = donation.donor.user.email
    if not email:
        return f"Donor {donation.donor_id} has no email address"

    hospital_name = donation.hospital.hospital_name or 'the hospital'
    url = opt_in_url(donation, HospitalOptInToken.for_donation(donation))

    message = f"""
Thank you for your donation at {hospital_name}.

Would you like to be listed as an available donor for this hospital?
Open this link to confirm (valid for 7 days):
{url}
    """.strip()
    html_message = (
        f"<p>Thank you for your donation at {escape(hospital_name)}.</p>"
        "<p>Would you like to be listed as an available donor for this hospital?</p>"
        f'<p><a href="{escape(url)}">Yes, list me for {escape(hospital_name)}</a></p>'
    )

    try:
        send_mail(
            subject="Confirm to be listed as a donor",
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception:
        logger.exception("Opt-in email to donor #%s failed", donation.donor_id)
        return f"Email to donor {donation.donor_id} failed"

    logger.info("Opt-in invitation sent to donor #%s for %s", donation.donor_id, hospital_name)
    return f"Opt-in invitation sent to donor {donation.donor_id}"
