from typing import Iterable, NamedTuple


class EligibleDonors(NamedTuple):
    in_app: list
    sms: list


def has_phone_number(donor) -> bool:
    phone = getattr(donor, 'phone', None)
    return bool(phone and phone.strip())


def partition_donors(donors: Iterable, compatible_types) -> EligibleDonors:
    """
    Split a donor pool into in-app and SMS notification targets.

    Criteria:
    - Inactive donors are dropped before anything else
    - In-app: blood type is compatible, or not recorded yet
    - SMS: in-app targets with a known compatible blood type and a phone number

    Args:
        donors: objects exposing ``blood_type``, ``phone`` and ``is_active``
        compatible_types: donor blood types accepted for the request

    Returns:
        EligibleDonors(in_app, sms)
    """
    in_app = []
    sms = []

    for donor in donors:
        if not donor.is_active:
            continue

        blood_type = donor.blood_type or None
        if blood_type is not None and blood_type not in compatible_types:
            continue

        in_app.append(donor)

        # Unknown blood type is only "possibly compatible": never text them
        if blood_type is not None and has_phone_number(donor):
            sms.append(donor)

    return EligibleDonors(in_app=in_app, sms=sms)
