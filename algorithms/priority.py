# algorithms/priority.py
"""
Urgency ordering for blood requests shown to donors
"""

URGENCY_RANK = {
    'critical': 1,
    'urgent': 2,
    'normal': 3,
}


def urgency_rank(urgency):
    """Lower rank = more urgent. Unknown urgencies sort last."""
    return URGENCY_RANK.get(urgency, len(URGENCY_RANK) + 1)


def sort_by_urgency(blood_requests):
    """
    Order requests critical -> urgent -> normal, newest first within a tier.
    Accepts a queryset or a plain list; always returns a list.
    """
    requests_list = list(blood_requests) if blood_requests is not None else []

    # Two stable sorts: newest first, then by urgency tier
    requests_list.sort(key=lambda r: r.created_at, reverse=True)
    requests_list.sort(key=lambda r: urgency_rank(r.urgency))

    return requests_list
