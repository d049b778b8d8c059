# donors/management/commands/recompute_badges.py
"""
Award badges donors have earned but not received yet, e.g. after
donations were imported or completed outside the API.

Usage: python manage.py recompute_badges [--donor ID ...]
"""
from django.core.management.base import BaseCommand

from donors.models import DonorProfile
from donors.utils import award_badges_quietly


class Command(BaseCommand):
    help = 'Recompute and award missing badges for donors'

    def add_arguments(self, parser):
        parser.add_argument('--donor', type=int, action='append', dest='donor_ids',
                            help='Only this donor id (repeatable)')

    def handle(self, *args, **options):
        donors = DonorProfile.objects.filter(donations__status='completed').distinct()
        if options['donor_ids']:
            donors = donors.filter(pk__in=options['donor_ids'])

        total = donors.count()
        self.stdout.write(f"Checking {total} donor(s) with completed donations")

        awarded_count = 0
        for donor in donors.iterator():
            awarded = award_badges_quietly(donor)
            if awarded:
                awarded_count += len(awarded)
                keys = ', '.join(badge.key for badge in awarded)
                self.stdout.write(f"  {donor.full_name}: {keys}")

        self.stdout.write(self.style.SUCCESS(f"Awarded {awarded_count} new badge(s)"))
