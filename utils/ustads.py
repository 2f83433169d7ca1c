"""Helpers for the list of ustads (team mentors) attached to a registration."""

import re

MAX_USTADS = 5

_EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def _is_valid_email(email):
    return bool(_EMAIL_RE.match(email.strip()))


def normalize_ustads(ustads):
    """
    Trim names/emails and drop entries where both are blank.

    Raises ValueError when an entry is not a ``{'name', 'email'}`` object of
    strings.
    """
    if ustads is not None and not isinstance(ustads, list):
        raise ValueError('Ustads must be a list')

    normalized = []
    for index, ustad in enumerate(ustads or [], start=1):
        if not isinstance(ustad, dict):
            raise ValueError(f'Ustad {index}: Must have a name and an email')
        name = ustad.get('name') or ''
        email = ustad.get('email') or ''
        if not isinstance(name, str) or not isinstance(email, str):
            raise ValueError(f'Ustad {index}: Name and email must be text')
        name = name.strip()
        email = email.strip()
        if name or email:
            normalized.append({'name': name, 'email': email})
    return normalized


def validate_ustads(ustads):
    """Return a list of error messages; empty when the list is acceptable."""
    errors = []

    if len(ustads) > MAX_USTADS:
        errors.append(f'Maximum {MAX_USTADS} ustads allowed per registration')
    if not ustads:
        errors.append('At least one ustad is required')

    seen_names = set()
    seen_emails = set()
    for index, ustad in enumerate(ustads, start=1):
        position = f'Ustad {index}'
        name = (ustad.get('name') or '').strip()
        email = (ustad.get('email') or '').strip()

        if not name:
            errors.append(f'{position}: Name is required')
        elif len(name) < 2:
            errors.append(f'{position}: Name must be at least 2 characters long')
        else:
            if name.lower() in seen_names:
                errors.append(f'{position}: Duplicate name "{name}"')
            seen_names.add(name.lower())

        if not email:
            errors.append(f'{position}: Email is required')
        elif not _is_valid_email(email):
            errors.append(f'{position}: Invalid email format')
        else:
            if email.lower() in seen_emails:
                errors.append(f'{position}: Duplicate email "{email}"')
            seen_emails.add(email.lower())

    return errors


def format_ustads_display(ustads):
    if not ustads:
        return 'None'
    return ', '.join(ustad['name'] for ustad in ustads)


def format_ustads_for_csv(ustads):
    if not ustads:
        return 'None'
    return ', '.join(f"{ustad['name']} ({ustad['email']})" for ustad in ustads)


def convert_legacy_ustad(ustad_name, ustad_email):
    """Build an ustads list from the single ustad_name/ustad_email pair."""
    name = (ustad_name or '').strip()
    if not name:
        return []
    return [{'name': name, 'email': (ustad_email or '').strip()}]
