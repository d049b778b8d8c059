# hospitals/models.py
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES


class InvalidStatusTransition(Exception):
    """Raised when a blood request is moved out of a final status"""


class HospitalProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='hospital_profile'
    )
    hospital_name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    head_of_hospital = models.CharField(max_length=200, blank=True)

    license_number = models.CharField(max_length=100, blank=True)
    is_verified = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.hospital_name

    class Meta:
        verbose_name = 'Hospital Profile'
        verbose_name_plural = 'Hospital Profiles'


class BloodRequest(models.Model):
    URGENCY_CHOICES = [
        ('critical', 'Critical - Life Threatening'),
        ('urgent', 'Urgent - Within 24 Hours'),
        ('normal', 'Normal - Within 48 Hours'),
    ]

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('fulfilled', 'Fulfilled'),
        ('expired', 'Expired'),
    ]

    # Allowed moves; final statuses have none
    TRANSITIONS = {
        'active': {'fulfilled', 'expired'},
        'fulfilled': set(),
        'expired': set(),
    }

    hospital = models.ForeignKey(HospitalProfile, on_delete=models.CASCADE, related_name='blood_requests')
    # Copied from the hospital profile when the request is created
    hospital_name = models.CharField(max_length=200)
    location = models.TextField(blank=True)

    blood_type = models.CharField(max_length=3, choices=BLOOD_TYPE_CHOICES)
    units_needed = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    urgency = models.CharField(max_length=10, choices=URGENCY_CHOICES, default='normal')

    patient_condition = models.TextField(blank=True, help_text="Patient's medical condition")
    contact_person = models.CharField(max_length=200)
    contact_phone = models.CharField(max_length=20)
    additional_notes = models.TextField(blank=True)

    expiry_date = models.DateTimeField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.hospital_name} - {self.blood_type} ({self.urgency})"

    @property
    def is_critical(self):
        return self.urgency == 'critical'

    @property
    def is_expired(self):
        return self.expiry_date <= timezone.now()

    def transition_to(self, new_status):
        """Move the request along active -> fulfilled/expired and save it"""
        if new_status not in self.TRANSITIONS:
            raise InvalidStatusTransition(f"Unknown status '{new_status}'")
        if new_status not in self.TRANSITIONS[self.status]:
            raise InvalidStatusTransition(
                f"Cannot change blood request #{self.pk} from '{self.status}' to '{new_status}'"
            )
        self.status = new_status
        self.save(update_fields=['status', 'updated_at'])

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Blood Request'
        verbose_name_plural = 'Blood Requests'
        indexes = [
            models.Index(fields=['status', 'expiry_date'], name='bloodrequest_status_expiry_idx'),
        ]


class HospitalDonorMembership(models.Model):
    """A donor's consent to be listed as a recognised donor of a hospital"""
    hospital = models.ForeignKey(HospitalProfile, on_delete=models.CASCADE, related_name='memberships')
    donor = models.ForeignKey('donors.DonorProfile', on_delete=models.CASCADE, related_name='hospital_memberships')

    consented = models.BooleanField(default=False)
    consented_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.donor.full_name} @ {self.hospital.hospital_name} ({'consented' if self.consented else 'pending'})"

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['hospital', 'donor'], name='unique_hospital_donor_membership'),
        ]
