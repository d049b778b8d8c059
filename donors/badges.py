"""
Donor badges

Badge state is derived from completed donations on every call; nothing is
cached. Earned badges are stored once per (donor, badge key) and never
revoked.
"""
import logging
import math
from typing import NamedTuple, Optional, Tuple

from django.db import DEFAULT_DB_ALIAS
from django.db.models import Count, Sum
from django.utils import timezone

from algorithms.streaks import monthly_streak
from donors.models import Donation, DonorBadge

logger = logging.getLogger(__name__)


class BadgeTier(NamedTuple):
    key: str
    title: str
    description: str
    metric: str  # 'donations' | 'units' | 'streak'
    threshold: int
    blood_types: Optional[Tuple[str, ...]] = None  # rarity tiers only


BADGE_TIERS = (
    # Core tiers by donation count
    BadgeTier('donation_1', 'Beginner Donor', 'Complete 1 donation', 'donations', 1),
    BadgeTier('donation_5', 'Lifesaver', 'Complete 5 donations', 'donations', 5),
    BadgeTier('donation_10', 'Hero', 'Complete 10 donations', 'donations', 10),
    BadgeTier('donation_20', 'Champion', 'Complete 20 donations', 'donations', 20),

    # Impact by total units
    BadgeTier('impact_5', 'Bronze Impact', 'Donate 5 total units', 'units', 5),
    BadgeTier('impact_15', 'Silver Impact', 'Donate 15 total units', 'units', 15),
    BadgeTier('impact_30', 'Gold Impact', 'Donate 30 total units', 'units', 30),

    # Consistency streaks
    BadgeTier('streak_3', '3-Month Streak', 'Donate in 3 consecutive months', 'streak', 3),
    BadgeTier('streak_6', '6-Month Streak', 'Donate in 6 consecutive months', 'streak', 6),

    # Rarity
    BadgeTier('rare_on_5', 'O- Champion', 'O- donor with 5+ donations', 'donations', 5, ('O-',)),
    BadgeTier('rare_abp_5', 'AB+ Ally', 'AB+ donor with 5+ donations', 'donations', 5, ('AB+',)),
)

# Leaderboard points per badge
BADGE_POINTS = {
    'donation_1': 10,
    'donation_5': 50,
    'donation_10': 100,
    'donation_20': 200,
    'impact_5': 25,
    'impact_15': 75,
    'impact_30': 150,
    'streak_3': 30,
    'streak_6': 60,
    'rare_on_5': 50,
    'rare_abp_5': 50,
}


def badge_points(badge_keys):
    return sum(BADGE_POINTS.get(key, 0) for key in badge_keys)


class DonationTotals(NamedTuple):
    donations: int
    units: int
    streak: int


class EarnedBadge(NamedTuple):
    key: str
    title: str
    description: str
    earned_at: object

    def as_dict(self):
        return {
            'key': self.key,
            'title': self.title,
            'description': self.description,
            'earnedAt': self.earned_at,
        }


class BadgeProgress(NamedTuple):
    key: str
    title: str
    description: str
    current: int
    target: int
    percent: int

    def as_dict(self):
        return self._asdict()


class BadgeReport(NamedTuple):
    earned: list
    in_progress: list

    def as_dict(self):
        return {
            'earned': [badge.as_dict() for badge in self.earned],
            'inProgress': [badge.as_dict() for badge in self.in_progress],
        }


def progress_percent(current, target):
    # Half-up rounding: 12.5% shows as 13%
    return min(100, math.floor(current / target * 100 + 0.5))


def evaluate_tiers(totals: DonationTotals, blood_type, now=None) -> BadgeReport:
    """
    Split BADGE_TIERS into earned and in-progress for the given totals.
    Every tier is checked on its own, so higher tiers never hide lower ones.
    """
    now = now or timezone.now()
    earned = []
    in_progress = []

    for tier in BADGE_TIERS:
        if tier.blood_types is not None and blood_type not in tier.blood_types:
            continue

        current = getattr(totals, tier.metric)
        if current >= tier.threshold:
            earned.append(EarnedBadge(tier.key, tier.title, tier.description, now))
        else:
            in_progress.append(BadgeProgress(
                tier.key, tier.title, tier.description,
                current, tier.threshold, progress_percent(current, tier.threshold),
            ))

    return BadgeReport(earned=earned, in_progress=in_progress)


class BadgeEngine:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def donation_totals(self, donor) -> DonationTotals:
        completed = Donation.objects.db_manager(self.using).filter(donor=donor, status='completed')
        aggregates = completed.aggregate(
            donations=Count('id'),
            units=Sum('units', default=0),
        )
        streak = monthly_streak(completed.values_list('date', flat=True))
        return DonationTotals(donations=aggregates['donations'], units=aggregates['units'], streak=streak)

    def compute_progress(self, donor) -> BadgeReport:
        return evaluate_tiers(self.donation_totals(donor), donor.blood_type)

    def awarded_keys(self, donor):
        return set(
            DonorBadge.objects.db_manager(self.using)
            .filter(donor=donor)
            .values_list('badge_key', flat=True)
        )

    def award_new_badges(self, donor):
        """
        Store every earned badge the donor does not have yet.

        Returns only the badges this call created; a concurrent call that
        stored the same badge first wins, and the badge is left out here.
        """
        report = self.compute_progress(donor)
        existing = self.awarded_keys(donor)
        newly_awarded = []

        for badge in report.earned:
            if badge.key in existing:
                continue

            stored, created = DonorBadge.objects.db_manager(self.using).get_or_create(
                donor=donor,
                badge_key=badge.key,
                defaults={
                    'meta': {'title': badge.title, 'description': badge.description},
                },
            )
            if created:
                newly_awarded.append(badge._replace(earned_at=stored.earned_at))

        if newly_awarded:
            logger.info(
                "Donor #%s earned %s",
                donor.pk, ', '.join(badge.key for badge in newly_awarded),
            )
        return newly_awarded
