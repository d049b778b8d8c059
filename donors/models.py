from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES

LIVES_PER_UNIT = 3


# ---------------------------
# Donor Profile
# ---------------------------
class DonorProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='donor_profile'
    )

    full_name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, db_index=True)
    # Unknown until the donor is typed at their first visit
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES, null=True, blank=True)
    address = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_active(self) -> bool:
        return self.user.is_active

    def __str__(self):
        return f"{self.full_name} ({self.blood_type or 'unknown'})"

    class Meta:
        verbose_name = "Donor Profile"
        verbose_name_plural = "Donor Profiles"
        ordering = ['-created_at']


# ---------------------------
# Donations
# ---------------------------
class Donation(models.Model):
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    donor = models.ForeignKey(
        DonorProfile,
        on_delete=models.CASCADE,
        related_name='donations'
    )
    hospital = models.ForeignKey(
        'hospitals.HospitalProfile',
        on_delete=models.CASCADE,
        related_name='donations'
    )

    date = models.DateField(default=timezone.localdate)
    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    units = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='scheduled')
    # Lives-saved estimate, always units * LIVES_PER_UNIT
    impact = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.impact = self.units * LIVES_PER_UNIT
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'units' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'impact'}
        super().save(*args, **kwargs)

    @property
    def is_completed(self):
        return self.status == 'completed'

    def __str__(self):
        return f"{self.donor.full_name} | {self.date} | {self.units} unit(s) ({self.status})"

    class Meta:
        ordering = ['-date']
        indexes = [
            models.Index(fields=['donor', 'status'], name='donation_donor_status_idx'),
            models.Index(fields=['hospital', 'status'], name='donation_hospital_status_idx'),
        ]


# ---------------------------
# Badges
# ---------------------------
class DonorBadge(models.Model):
    donor = models.ForeignKey(
        DonorProfile,
        on_delete=models.CASCADE,
        related_name='badges'
    )
    badge_key = models.CharField(max_length=50)
    earned_at = models.DateTimeField(default=timezone.now)
    # Title/description as they read when the badge was awarded
    meta = models.JSONField(default=dict, blank=True)

    def __str__(self):
        return f"{self.donor.full_name} | {self.badge_key}"

    class Meta:
        ordering = ['-earned_at']
        constraints = [
            models.UniqueConstraint(fields=['donor', 'badge_key'], name='unique_donor_badge'),
        ]
