"""
Blood Type Compatibility Helper
Determines which donor blood types can give to a recipient blood type
"""

BLOOD_TYPES = ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')

BLOOD_TYPE_CHOICES = [(blood_type, blood_type) for blood_type in BLOOD_TYPES]

# Recipient blood type -> donor blood types it can safely receive
COMPATIBLE_DONORS = {
    'O-': frozenset(['O-']),
    'O+': frozenset(['O-', 'O+']),
    'A-': frozenset(['O-', 'A-']),
    'A+': frozenset(['O-', 'O+', 'A-', 'A+']),
    'B-': frozenset(['O-', 'B-']),
    'B+': frozenset(['O-', 'O+', 'B-', 'B+']),
    'AB-': frozenset(['O-', 'A-', 'B-', 'AB-']),
    'AB+': frozenset(BLOOD_TYPES),  # Universal recipient
}


def compatible_donor_types(requested_blood_type):
    """
    Get the set of donor blood types that can give to a recipient

    Args:
        requested_blood_type: Recipient's blood type (e.g., 'A+')

    Returns:
        frozenset of compatible donor blood types

    Raises:
        ValueError: if the blood type is not one of the 8 ABO/Rh types
    """
    try:
        return COMPATIBLE_DONORS[requested_blood_type]
    except KeyError:
        raise ValueError(f"Unknown blood type: {requested_blood_type!r}") from None


def is_compatible(donor_blood_type, recipient_blood_type):
    """
    Check if donor blood type is compatible with recipient

    Unknown donor types are never compatible.
    """
    if recipient_blood_type not in COMPATIBLE_DONORS:
        return False
    return donor_blood_type in COMPATIBLE_DONORS[recipient_blood_type]
