"""
Dashboard aggregations. Everything is recomputed from the rows passed in;
nothing is cached between requests.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional
from datetime import datetime, date, timedelta

from models.registration import PENDING_STATUSES

TREND_DAY_OPTIONS = (7, 30, 90, 180)
OTHER_LABEL = 'Other'
GROUPINGS = ('status', 'division', 'location')

_STATUS_KEYS = {
    'new submission': 'new_submissions',
    'in review': 'in_review',
    'information requested': 'information_requested',
    'updated information': 'updated_information',
    'approved': 'approved',
    'denied': 'denied',
    'dropped': 'dropped',
}


def status_counts(statuses: Iterable[str]) -> Dict[str, int]:
    """Totals per status plus ``pending`` (still waiting on an admin)."""
    statuses = list(statuses)
    counter = Counter(statuses)
    counts = {'total': len(statuses)}
    for status, key in _STATUS_KEYS.items():
        counts[key] = counter.get(status, 0)
    counts['pending'] = sum(counter.get(status, 0) for status in PENDING_STATUSES)
    return counts


def player_counts(registrations) -> Dict[str, int]:
    """Roster sizes: three players per team plus the backup when present."""
    total = 0
    approved = 0
    for registration in registrations:
        size = 3 + (1 if registration.backup_player else 0)
        total += size
        if registration.status == 'approved':
            approved += size
    return {'total_players': total, 'approved_players': approved}


def _city(location):
    location = (location or '').strip()
    first = location.split(',')[0].strip()
    return first or location


def location_breakdown(locations: Iterable[Optional[str]]) -> List[Dict]:
    """``[{'city', 'count'}]`` grouped by the first segment of the location, biggest first."""
    counter = Counter(_city(location) for location in locations)
    counter.pop('', None)
    return [
        {'city': city, 'count': count}
        for city, count in sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    ]


def limit_city_breakdown(rows: List[Dict], max_cities: int = 10) -> List[Dict]:
    """
    Keep the ``max_cities`` biggest cities and fold the rest into "Other".

    An "Other" row already in ``rows`` is merged into the overflow, or put
    back at the end when nothing overflows.
    """
    rows = sorted(rows, key=lambda row: row['count'], reverse=True)

    other_count = 0
    for index, row in enumerate(rows):
        if row['city'] == OTHER_LABEL:
            other_count = row['count']
            del rows[index]
            break

    if len(rows) > max_cities:
        top = rows[:max_cities]
        remaining = sum(row['count'] for row in rows[max_cities:]) + other_count
        if remaining > 0:
            top.append({'city': OTHER_LABEL, 'count': remaining})
        return top

    if other_count > 0:
        rows.append({'city': OTHER_LABEL, 'count': other_count})
    return rows


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value[:10]).date()
    return None


def registration_trends(timestamps, days: int = 90, today: Optional[date] = None) -> List[Dict]:
    """
    Daily and cumulative registrations from ``today - days`` to ``today``.

    Every date in the window is present (zero-filled); submissions outside
    the window are ignored. Timestamps are naive UTC datetimes or ISO strings.
    """
    if days not in TREND_DAY_OPTIONS:
        raise ValueError(f'days must be one of {TREND_DAY_OPTIONS}')
    if today is None:
        today = datetime.utcnow().date()

    start = today - timedelta(days=days)
    daily = {start + timedelta(days=offset): 0 for offset in range(days + 1)}
    for timestamp in timestamps:
        day = _as_date(timestamp)
        if day in daily:
            daily[day] += 1

    rows = []
    cumulative = 0
    for day in sorted(daily):
        cumulative += daily[day]
        rows.append({
            'date': day.isoformat(),
            'registrations': daily[day],
            'cumulative': cumulative,
        })
    return rows


def trend_summary(rows: List[Dict]) -> Dict:
    total = sum(row['registrations'] for row in rows)
    return {
        'total': total,
        'days': len(rows),
        'average': total / len(rows) if rows else 0,
    }


def _group_key(registration, group_by):
    if group_by == 'status':
        return (registration.status or '').capitalize()
    if group_by == 'division':
        return registration.division or ''
    return (registration.team_location or '').split(',')[-1].strip()


def group_registrations(registrations, group_by: str = "none") -> Dict[str, list]:
    """
    ``{group label: [registrations]}`` in first-seen order. ``none`` puts
    everything under "All".
    """
    if group_by in (None, '', 'none'):
        return {'All': list(registrations)}
    if group_by not in GROUPINGS:
        raise ValueError(f'Unknown grouping: {group_by}')

    groups = {}
    for registration in registrations:
        groups.setdefault(_group_key(registration, group_by), []).append(registration)
    return groups


def dashboard_stats(registrations, max_cities=10):
    """Everything the dashboard header shows, from one list of registrations."""
    registrations = list(registrations)
    stats = status_counts(registration.status for registration in registrations)
    stats.update(player_counts(registrations))
    stats['city_breakdown'] = limit_city_breakdown(
        location_breakdown(registration.team_location for registration in registrations),
        max_cities=max_cities,
    )
    return stats
