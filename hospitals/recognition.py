"""
Hospital recognition dashboard: read-only rollups over donations and badges
"""
from collections import defaultdict
from datetime import timedelta

from django.db import DEFAULT_DB_ALIAS
from django.db.models import Count, Max, Sum
from django.utils import timezone

from donors.badges import badge_points
from donors.models import LIVES_PER_UNIT, Donation, DonorBadge
from hospitals.models import HospitalDonorMembership

TOP_DONOR_LIMIT = 10
ACTIVE_WINDOW_DAYS = 365


class RecognitionAggregator:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def member_ids(self, hospital):
        """Donors who consented to be listed by this hospital"""
        return list(
            HospitalDonorMembership.objects.db_manager(self.using)
            .filter(hospital=hospital, consented=True)
            .values_list('donor_id', flat=True)
        )

    def completed_donations(self, hospital):
        return Donation.objects.db_manager(self.using).filter(hospital=hospital, status='completed')

    def summary(self, hospital, member_ids, today=None):
        """
        Headline numbers. Donor and badge counts cover consented members only;
        livesImpacted counts every completed donation at the hospital.
        """
        today = today or timezone.localdate()
        completed = self.completed_donations(hospital)

        active_donors = (
            completed.filter(donor_id__in=member_ids, date__gte=today - timedelta(days=ACTIVE_WINDOW_DAYS))
            .values('donor_id')
            .distinct()
            .count()
        )
        badges_earned = DonorBadge.objects.db_manager(self.using).filter(donor_id__in=member_ids).count()
        units = completed.aggregate(units=Sum('units', default=0))['units']

        return {
            'totalDonors': len(member_ids),
            'activeDonors': active_donors,
            'badgesEarned': badges_earned,
            'livesImpacted': units * LIVES_PER_UNIT,
        }

    def badges_by_donor(self, donor_ids):
        badges = defaultdict(list)
        rows = (
            DonorBadge.objects.db_manager(self.using)
            .filter(donor_id__in=donor_ids)
            .order_by('earned_at', 'badge_key')
            .values_list('donor_id', 'badge_key')
        )
        for donor_id, badge_key in rows:
            badges[donor_id].append(badge_key)
        return badges

    def top_donors(self, hospital, member_ids, limit=TOP_DONOR_LIMIT):
        """
        Members ranked by completed donations here, then units, then the
        most recent donation date.
        """
        ranked = list(
            self.completed_donations(hospital)
            .filter(donor_id__in=member_ids)
            .values('donor_id', 'donor__full_name', 'donor__blood_type')
            .annotate(
                donations=Count('id'),
                units=Sum('units'),
                last_donation=Max('date'),
            )
            .order_by('-donations', '-units', '-last_donation', 'donor_id')[:limit]
        )
        badges = self.badges_by_donor([row['donor_id'] for row in ranked])

        return [
            {
                'donorId': row['donor_id'],
                'fullName': row['donor__full_name'],
                'bloodType': row['donor__blood_type'],
                'donations': row['donations'],
                'units': row['units'],
                'lastDonation': row['last_donation'],
                'points': badge_points(badges[row['donor_id']]),
                'badges': badges[row['donor_id']],
            }
            for row in ranked
        ]

    def badge_counts(self, hospital):
        """
        How many donors hold each badge, over everyone who completed a donation
        here. Consent is not required, so totals can exceed summary badgesEarned.
        """
        donor_ids = self.completed_donations(hospital).values('donor_id')
        rows = (
            DonorBadge.objects.db_manager(self.using)
            .filter(donor_id__in=donor_ids)
            .values('badge_key')
            .annotate(count=Count('id'))
            .order_by('-count', 'badge_key')
        )
        return [{'badgeKey': row['badge_key'], 'count': row['count']} for row in rows]

    def hospital_recognition(self, hospital, today=None):
        member_ids = self.member_ids(hospital)
        return {
            'summary': self.summary(hospital, member_ids, today=today),
            'topDonors': self.top_donors(hospital, member_ids),
            'badgeCounts': self.badge_counts(hospital),
        }
