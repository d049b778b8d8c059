import itertools
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from bloodbridge.celery import app as celery_app
from donors.models import DonorProfile, Donation
from hospitals.models import HospitalProfile, BloodRequest, HospitalDonorMembership
from notifications import sms

_sequence = itertools.count(1)


@pytest.fixture(autouse=True)
def celery_eager():
    # Reading a key loads CELERY_* from Django settings; overrides made before that are lost
    previous = (celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates)
    # With namespace='CELERY' the prefixed key is looked up first, so override that form
    celery_app.conf.update(CELERY_TASK_ALWAYS_EAGER=True, CELERY_TASK_EAGER_PROPAGATES=True)
    yield
    celery_app.conf.update(CELERY_TASK_ALWAYS_EAGER=previous[0], CELERY_TASK_EAGER_PROPAGATES=previous[1])


@pytest.fixture(autouse=True)
def sms_outbox(settings):
    settings.SMS_BACKEND = 'notifications.sms.LocmemSmsBackend'
    settings.SMS_DEFAULT_COUNTRY_CODE = '+250'
    sms.outbox.clear()
    yield sms.outbox
    sms.outbox.clear()


@pytest.fixture
def make_user(db):
    def make(user_type='donor', is_active=True, **kwargs):
        n = next(_sequence)
        return get_user_model().objects.create_user(
            username=kwargs.pop('username', f'user{n}'),
            email=kwargs.pop('email', f'user{n}@example.com'),
            password='pass1234',
            user_type=user_type,
            is_active=is_active,
            **kwargs,
        )
    return make


@pytest.fixture
def make_donor(make_user):
    def make(blood_type='O-', phone='+250788000001', is_active=True, full_name=None):
        user = make_user('donor', is_active=is_active)
        return DonorProfile.objects.create(
            user=user,
            full_name=full_name or f'Donor {user.pk}',
            phone=phone,
            blood_type=blood_type,
        )
    return make


@pytest.fixture
def make_hospital(make_user):
    def make(name='Kigali General'):
        user = make_user('hospital')
        return HospitalProfile.objects.create(
            user=user,
            hospital_name=name,
            phone='+250788999000',
            address='KN 4 Ave, Kigali',
        )
    return make


@pytest.fixture
def hospital(make_hospital):
    return make_hospital()


@pytest.fixture
def make_donation():
    def make(donor, hospital, units=1, date=None, status='completed', blood_type=None):
        return Donation.objects.create(
            donor=donor,
            hospital=hospital,
            units=units,
            date=date or timezone.localdate(),
            status=status,
            blood_type=blood_type or donor.blood_type or 'O+',
        )
    return make


@pytest.fixture
def make_blood_request(hospital):
    def make(blood_type='A+', urgency='normal', status='active', expiry_date=None, **kwargs):
        return BloodRequest.objects.create(
            hospital=kwargs.pop('hospital', hospital),
            hospital_name=hospital.hospital_name,
            location=hospital.address,
            blood_type=blood_type,
            units_needed=kwargs.pop('units_needed', 2),
            urgency=urgency,
            contact_person='Dr. Uwase',
            contact_phone='+250788111222',
            expiry_date=expiry_date or timezone.now() + timedelta(days=2),
            status=status,
            **kwargs,
        )
    return make


@pytest.fixture
def consent():
    def make(donor, hospital):
        return HospitalDonorMembership.objects.create(
            donor=donor, hospital=hospital, consented=True, consented_at=timezone.now()
        )
    return make


@pytest.fixture
def request_payload():
    return {
        'blood_type': 'O-',
        'units_needed': 3,
        'urgency': 'critical',
        'patient_condition': 'Post-partum haemorrhage',
        'contact_person': 'Dr. Uwase',
        'contact_phone': '+250788111222',
        'additional_notes': '',
        'expiry_date': timezone.now() + timedelta(days=1),
    }


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client(api_client):
    def authenticate(user):
        api_client.force_authenticate(user=user)
        return api_client
    return authenticate
