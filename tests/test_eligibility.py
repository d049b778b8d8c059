from types import SimpleNamespace

from algorithms.blood_compatibility import compatible_donor_types
from algorithms.eligibility import has_phone_number, partition_donors


def donor(name, blood_type, phone='+250788000001', is_active=True):
    return SimpleNamespace(name=name, blood_type=blood_type, phone=phone, is_active=is_active)


def names(donors):
    return [d.name for d in donors]


def test_compatible_active_donors_get_both_channels():
    pool = [donor('a', 'O-'), donor('b', 'A+'), donor('c', 'O-', is_active=False)]

    result = partition_donors(pool, compatible_donor_types('O-'))

    assert names(result.in_app) == ['a']
    assert names(result.sms) == ['a']


def test_inactive_donors_are_never_targeted():
    pool = [donor('x', 'O-', is_active=False), donor('y', None, is_active=False)]

    result = partition_donors(pool, compatible_donor_types('AB+'))

    assert result.in_app == []
    assert result.sms == []


def test_unknown_blood_type_is_in_app_only():
    pool = [donor('unknown', None), donor('blank', '')]

    result = partition_donors(pool, compatible_donor_types('B+'))

    assert names(result.in_app) == ['unknown', 'blank']
    assert result.sms == []


def test_sms_requires_a_phone_number():
    pool = [donor('none', 'O+', phone=None), donor('spaces', 'O+', phone='   '), donor('ok', 'O+')]

    result = partition_donors(pool, compatible_donor_types('A+'))

    assert names(result.in_app) == ['none', 'spaces', 'ok']
    assert names(result.sms) == ['ok']


def test_sms_targets_are_a_subset_of_in_app_targets():
    pool = [donor(str(i), bt) for i, bt in enumerate(['A+', 'A-', 'B+', 'O-', None, 'AB+'])]

    result = partition_donors(pool, compatible_donor_types('A+'))

    assert set(names(result.sms)) <= set(names(result.in_app))
    assert names(result.in_app) == ['0', '1', '3', '4']


def test_has_phone_number():
    assert has_phone_number(donor('a', 'O-', phone='0788'))
    assert not has_phone_number(donor('a', 'O-', phone=''))
    assert not has_phone_number(SimpleNamespace())
