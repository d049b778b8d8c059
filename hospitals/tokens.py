from datetime import timedelta

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import Token


class InvalidOptInToken(Exception):
    pass


class HospitalOptInToken(Token):
    """Signed link a donor follows to be listed by a hospital"""
    token_type = 'hospital_opt_in'
    lifetime = timedelta(days=7)

    @classmethod
    def for_donation(cls, donation):
        token = cls()
        token['donor_id'] = donation.donor_id
        token['hospital_id'] = donation.hospital_id
        token['donation_id'] = donation.pk
        return token


def decode_opt_in_token(raw_token):
    """Verified token payload; expired, tampered or foreign tokens are rejected"""
    if not raw_token:
        raise InvalidOptInToken("Missing opt-in token")
    try:
        return HospitalOptInToken(raw_token)
    except TokenError as e:
        raise InvalidOptInToken(f"Invalid or expired opt-in link: {e}") from e
