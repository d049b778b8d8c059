from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    USER_TYPE_CHOICES = (
        ('donor', 'Donor'),
        ('hospital', 'Hospital'),
        ('super_admin', 'Super Admin'),
    )

    user_type = models.CharField(
        max_length=15,
        choices=USER_TYPE_CHOICES,
        default='donor'
    )
    email = models.EmailField(unique=True)

    def __str__(self):
        return f"{self.username} ({self.user_type})"

    @property
    def is_donor(self):
        return self.user_type == 'donor'

    @property
    def is_hospital(self):
        return self.user_type == 'hospital'
