import logging

from django.db import transaction

from donors.badges import BadgeEngine
from donors.models import Donation
from donors.tasks import send_opt_in_invitation
from hospitals.utils import has_consented
from notifications.models import Notification

# Logger setup
logger = logging.getLogger(__name__)


def complete_donation(donation):
    """
    Mark a donation completed and run the follow-ups: badge awards and the
    hospital opt-in invitation. Follow-up failures are logged, never raised,
    so they cannot undo the completion itself.
    """
    if donation.is_completed:
        return donation

    donation.status = 'completed'
    donation.save(update_fields=['status', 'updated_at'])
    logger.info("Donation #%s completed (%s unit(s))", donation.pk, donation.units)

    award_badges_quietly(donation.donor)
    invite_to_opt_in(donation)
    return donation


def award_badges_quietly(donor, engine=None):
    """Award new badges and notify the donor; returns the newly awarded ones"""
    engine = engine or BadgeEngine()
    try:
        with transaction.atomic():
            awarded = engine.award_new_badges(donor)
    except Exception:
        logger.exception("Badge award failed for donor #%s", donor.pk)
        return []

    try:
        notify_badge_awards(donor, awarded)
    except Exception:
        logger.exception("Badge notifications failed for donor #%s", donor.pk)

    return awarded


def notify_badge_awards(donor, badges):
    Notification.objects.bulk_create([
        Notification(
            user_id=donor.user_id,
            kind='badge_award',
            title=f"🏅 New badge: {badge.title}",
            message=f"Congratulations! You earned the '{badge.title}' badge. {badge.description}.",
        )
        for badge in badges
    ])


def invite_to_opt_in(donation):
    """
    Queue the opt-in e-mail after the donor's first completed donation at a
    hospital, unless they already consented there. Returns True when queued.
    """
    try:
        if has_consented(donation.donor, donation.hospital):
            return False

        earlier = Donation.objects.filter(
            donor=donation.donor_id,
            hospital=donation.hospital_id,
            status='completed',
        ).exclude(pk=donation.pk).exists()
        if earlier:
            return False

        transaction.on_commit(lambda: send_opt_in_invitation.delay(donation.pk))
        return True
    except Exception:
        logger.exception("Could not queue opt-in invitation for donation #%s", donation.pk)
        return False
