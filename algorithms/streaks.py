"""
Monthly donation streaks
"""


def month_index(day):
    """Months since year 0, so consecutive calendar months differ by 1"""
    return day.year * 12 + (day.month - 1)


def monthly_streak(donation_dates):
    """
    Count consecutive calendar months with at least one donation.

    Counting starts at the most recent donation month and walks backward;
    the first gap of more than one month ends the streak.

    Args:
        donation_dates: iterable of ``date`` (or ``datetime``) objects

    Returns:
        Streak length in months (0 when there are no donations)
    """
    months = sorted({month_index(d) for d in donation_dates}, reverse=True)
    if not months:
        return 0

    streak = 1
    for previous, current in zip(months, months[1:]):
        if previous - current != 1:
            break
        streak += 1

    return streak
