from datetime import timedelta

import pytest
from django.utils import timezone

from donors.models import Donation, DonorBadge
from hospitals.models import BloodRequest, HospitalDonorMembership
from hospitals.tokens import HospitalOptInToken
from notifications.models import Notification, SmsLog

pytestmark = pytest.mark.django_db


def create_payload(**overrides):
    payload = {
        'blood_type': 'O-',
        'units_needed': 2,
        'urgency': 'critical',
        'patient_condition': 'Road accident',
        'contact_person': 'Dr. Uwase',
        'contact_phone': '+250788111222',
        'expiry_date': (timezone.now() + timedelta(days=1)).isoformat(),
    }
    payload.update(overrides)
    return payload


class TestAuth:
    def test_login_with_email(self, api_client, make_user):
        user = make_user('hospital', email='ops@kgh.rw')

        response = api_client.post('/api/token/', {'username': 'ops@kgh.rw', 'password': 'pass1234'})

        assert response.status_code == 200
        assert 'access' in response.data
        assert 'refresh' in response.data
        assert user.user_type == 'hospital'

    def test_bad_password(self, api_client, make_user):
        make_user(email='donor@example.com')
        response = api_client.post('/api/token/', {'username': 'donor@example.com', 'password': 'nope'})
        assert response.status_code == 401

    def test_anonymous_requests_are_rejected(self, api_client):
        assert api_client.get('/api/blood-requests/').status_code == 401


class TestBloodRequests:
    def test_hospital_creates_request(self, auth_client, hospital, make_donor, sms_outbox):
        make_donor('O-', phone='+250788000001')
        make_donor('A+', phone='+250788000002')

        response = auth_client(hospital.user).post('/api/blood-requests/', create_payload(), format='json')

        assert response.status_code == 201
        data = response.data['data']
        assert response.data['status'] == 'success'
        assert data['notified_count'] == 1
        assert data['sms'] == {'attempted': True, 'sent': 1, 'failed': 0}
        assert data['request']['hospital_name'] == hospital.hospital_name
        assert data['request']['status'] == 'active'
        assert len(sms_outbox) == 1

    def test_urgency_is_case_insensitive(self, auth_client, hospital):
        response = auth_client(hospital.user).post(
            '/api/blood-requests/', create_payload(urgency='URGENT'), format='json'
        )
        assert response.status_code == 201
        assert response.data['data']['request']['urgency'] == 'urgent'

    @pytest.mark.parametrize('overrides', [
        {'blood_type': 'C+'},
        {'units_needed': 0},
        {'urgency': 'whenever'},
        {'contact_person': '  '},
        {'expiry_date': (timezone.now() - timedelta(days=1)).isoformat()},
    ])
    def test_invalid_payload(self, auth_client, hospital, make_donor, overrides):
        make_donor('O-')

        response = auth_client(hospital.user).post('/api/blood-requests/', create_payload(**overrides), format='json')

        assert response.status_code == 400
        assert BloodRequest.objects.count() == 0
        assert Notification.objects.count() == 0

    def test_missing_contact_phone(self, auth_client, hospital):
        payload = create_payload()
        del payload['contact_phone']
        response = auth_client(hospital.user).post('/api/blood-requests/', payload, format='json')
        assert response.status_code == 400

    def test_donor_cannot_create(self, auth_client, make_donor):
        donor = make_donor('O-')
        response = auth_client(donor.user).post('/api/blood-requests/', create_payload(), format='json')
        assert response.status_code == 403

    def test_list_shows_active_by_urgency(self, auth_client, make_donor, make_blood_request):
        normal = make_blood_request(urgency='normal')
        critical = make_blood_request(urgency='critical')
        urgent = make_blood_request(urgency='urgent')
        make_blood_request(urgency='critical', status='fulfilled')

        response = auth_client(make_donor('O-').user).get('/api/blood-requests/')

        assert response.status_code == 200
        assert [r['id'] for r in response.data['data']] == [critical.pk, urgent.pk, normal.pk]

    def test_retrieve(self, auth_client, make_donor, make_blood_request):
        br = make_blood_request(blood_type='B-')
        response = auth_client(make_donor().user).get(f'/api/blood-requests/{br.pk}/')
        assert response.status_code == 200
        assert response.data['data']['blood_type'] == 'B-'

    def test_owner_marks_fulfilled(self, auth_client, hospital, make_blood_request):
        br = make_blood_request()
        client = auth_client(hospital.user)

        response = client.patch(f'/api/blood-requests/{br.pk}/', {'status': 'fulfilled'}, format='json')
        assert response.status_code == 200
        assert response.data['data']['status'] == 'fulfilled'

        response = client.patch(f'/api/blood-requests/{br.pk}/', {'status': 'expired'}, format='json')
        assert response.status_code == 400
        br.refresh_from_db()
        assert br.status == 'fulfilled'

    def test_other_hospital_cannot_change_status(self, auth_client, make_hospital, make_blood_request):
        br = make_blood_request()
        response = auth_client(make_hospital('Other').user).patch(
            f'/api/blood-requests/{br.pk}/', {'status': 'fulfilled'}, format='json'
        )
        assert response.status_code == 403

    def test_sms_stats(self, auth_client, hospital, make_blood_request):
        br = make_blood_request(urgency='critical')
        SmsLog.objects.create(phone_number='+250788000001', message='m', blood_request=br,
                              status='sent', provider='twilio')

        response = auth_client(hospital.user).get(f'/api/blood-requests/{br.pk}/sms-stats/')

        assert response.status_code == 200
        assert response.data['data'] == [{'status': 'sent', 'provider': 'twilio', 'count': 1}]


class TestNotifications:
    def test_own_notifications(self, auth_client, hospital, make_donor):
        me, other = make_donor('O-'), make_donor('O-')
        auth_client(hospital.user).post('/api/blood-requests/', create_payload(urgency='normal'), format='json')
        client = auth_client(me.user)

        response = client.get('/api/notifications/')
        assert response.status_code == 200
        [item] = response.data['data']
        assert item['data']['blood_type'] == 'O-'
        assert item['kind'] == 'blood_request'

        assert client.get('/api/notifications/unread-count/').data['data'] == {'count': 1}

        response = client.post(f"/api/notifications/{item['id']}/read/")
        assert response.status_code == 200
        assert response.data['data']['is_read'] is True
        assert client.get('/api/notifications/unread-count/').data['data'] == {'count': 0}

        response = client.delete(f"/api/notifications/{item['id']}/")
        assert response.status_code == 204
        assert Notification.objects.filter(user=me.user).count() == 0
        assert Notification.objects.filter(user=other.user).count() == 1

    def test_cannot_touch_someone_elses_notification(self, auth_client, make_donor):
        owner, intruder = make_donor(), make_donor()
        notification = Notification.objects.create(user=owner.user, kind='badge_award', title='t', message='m')

        client = auth_client(intruder.user)
        assert client.post(f'/api/notifications/{notification.pk}/read/').status_code == 404
        assert client.delete(f'/api/notifications/{notification.pk}/').status_code == 404


class TestDonations:
    def test_record_and_complete(self, auth_client, hospital, make_donor):
        donor = make_donor('AB+')
        client = auth_client(hospital.user)

        response = client.post('/api/donations/', {'donor': donor.pk, 'units': 2}, format='json')
        assert response.status_code == 201
        donation_id = response.data['data']['id']
        assert response.data['data']['status'] == 'scheduled'
        assert response.data['data']['blood_type'] == 'AB+'
        assert response.data['data']['impact'] == 6

        response = client.post(f'/api/donations/{donation_id}/complete/')
        assert response.status_code == 200
        assert response.data['data']['status'] == 'completed'
        assert DonorBadge.objects.filter(donor=donor, badge_key='donation_1').exists()

    def test_record_completed_donation(self, auth_client, hospital, make_donor):
        donor = make_donor('O+')

        response = auth_client(hospital.user).post(
            '/api/donations/', {'donor': donor.pk, 'status': 'completed'}, format='json'
        )

        assert response.status_code == 201
        assert Donation.objects.get().status == 'completed'

    def test_blood_type_needed_when_donor_untyped(self, auth_client, hospital, make_donor):
        donor = make_donor(None)
        response = auth_client(hospital.user).post('/api/donations/', {'donor': donor.pk}, format='json')
        assert response.status_code == 400

    def test_other_hospital_cannot_complete(self, auth_client, hospital, make_hospital, make_donor, make_donation):
        donation = make_donation(make_donor('O+'), hospital, status='scheduled')
        response = auth_client(make_hospital('Other').user).post(f'/api/donations/{donation.pk}/complete/')
        assert response.status_code == 404


class TestBadges:
    def test_progress(self, auth_client, make_donor, hospital, make_donation):
        donor = make_donor('A+')
        make_donation(donor, hospital, units=2)

        response = auth_client(donor.user).get(f'/api/donors/{donor.pk}/badges/')

        assert response.status_code == 200
        data = response.data['data']
        assert [b['key'] for b in data['earned']] == ['donation_1']
        in_progress = {b['key']: b for b in data['inProgress']}
        assert in_progress['impact_5']['percent'] == 40

    def test_recompute_own_badges(self, auth_client, make_donor, hospital, make_donation):
        donor = make_donor('A+')
        make_donation(donor, hospital)
        client = auth_client(donor.user)

        response = client.post(f'/api/donors/{donor.pk}/badges/recompute/')
        assert response.status_code == 200
        assert [b['key'] for b in response.data['data']['awarded']] == ['donation_1']

        response = client.post(f'/api/donors/{donor.pk}/badges/recompute/')
        assert response.data['data']['awarded'] == []

    def test_cannot_recompute_for_someone_else(self, auth_client, make_donor):
        donor, other = make_donor(), make_donor()
        response = auth_client(other.user).post(f'/api/donors/{donor.pk}/badges/recompute/')
        assert response.status_code == 403


class TestHospitals:
    def test_recognition(self, auth_client, hospital, make_donor, make_donation, consent):
        donor = make_donor('O-')
        consent(donor, hospital)
        make_donation(donor, hospital, units=2)

        response = auth_client(donor.user).get(f'/api/hospitals/{hospital.pk}/recognition/')

        assert response.status_code == 200
        data = response.data['data']
        assert data['summary']['totalDonors'] == 1
        assert data['summary']['livesImpacted'] == 6
        assert data['topDonors'][0]['donorId'] == donor.pk

    def test_consented_donors(self, auth_client, hospital, make_hospital, make_donor, consent):
        member = make_donor('O-')
        make_donor('O-')
        consent(member, hospital)

        response = auth_client(hospital.user).get(f'/api/hospitals/{hospital.pk}/donors/')
        assert response.status_code == 200
        assert [d['id'] for d in response.data['data']] == [member.pk]

        other = auth_client(make_hospital('Other').user)
        assert other.get(f'/api/hospitals/{hospital.pk}/donors/').status_code == 403

    def test_opt_in_link(self, api_client, hospital, make_donor, make_donation):
        donation = make_donation(make_donor('O-'), hospital)
        token = str(HospitalOptInToken.for_donation(donation))

        response = api_client.get(f'/api/hospitals/{hospital.pk}/opt-in/', {'token': token})

        assert response.status_code == 200
        assert response.data['data']['consented'] is True
        assert HospitalDonorMembership.objects.get().consented

    def test_opt_in_with_bad_token(self, api_client, hospital):
        response = api_client.get(f'/api/hospitals/{hospital.pk}/opt-in/', {'token': 'garbage'})
        assert response.status_code == 400
        assert response.data['status'] == 'error'
