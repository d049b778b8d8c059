from django.conf import settings
from django.db import models


class Notification(models.Model):
    KIND_CHOICES = [
        ('blood_request', 'Blood Request'),
        ('badge_award', 'Badge Award'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    kind = models.CharField(max_length=20, choices=KIND_CHOICES)
    title = models.CharField(max_length=255)
    message = models.TextField()
    blood_request = models.ForeignKey(
        'hospitals.BloodRequest',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications'
    )

    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.kind} → {self.user.username}: {self.title}"

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
            models.Index(fields=['blood_request'], name='notification_request_idx'),
        ]


class SmsLog(models.Model):
    STATUS_CHOICES = [
        ('sent', 'Sent'),
        ('failed', 'Failed'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sms_logs'
    )
    phone_number = models.CharField(max_length=20)
    message = models.TextField()
    blood_request = models.ForeignKey(
        'hospitals.BloodRequest',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sms_logs'
    )

    status = models.CharField(max_length=10, choices=STATUS_CHOICES)
    provider = models.CharField(max_length=50)
    provider_message_id = models.CharField(max_length=100, blank=True)
    error_message = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"SMS {self.status} → {self.phone_number}"

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'SMS Log'
        verbose_name_plural = 'SMS Logs'
