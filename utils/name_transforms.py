"""Helpers that combine split wizard inputs into single record values."""


def _clean_parts(*parts):
    return [part.strip() for part in parts if part and part.strip()]


def concatenate_name(first_name, middle_name, last_name):
    """
    Join first, middle and last name with single spaces.

    Empty or missing parts are skipped, so ``("John", "", "Doe")`` gives
    ``"John Doe"`` and all-empty input gives ``""``.
    """
    return ' '.join(_clean_parts(first_name, middle_name, last_name))


def combine_location(city, state, country):
    """Format a location as "City, State, Country", skipping empty parts."""
    return ', '.join(_clean_parts(city, state, country))


def combine_phone_number(country_code, phone_number):
    """
    Prefix a phone number with its country code: ``("1", "555-123-4567")``
    gives ``"+1 555-123-4567"``.

    A leading ``+`` on the code is tolerated. Without a code the phone is
    returned as is; without a phone the result is ``""``.
    """
    clean_code = (country_code or '').strip().lstrip('+')
    clean_phone = (phone_number or '').strip()

    if not clean_code or not clean_phone:
        return clean_phone

    return f'+{clean_code} {clean_phone}'


def combine_player_order(player1, player2, player3):
    """Comma-separated playing order, e.g. "John Singh, Mary Kaur, Bob Singh"."""
    return ', '.join(_clean_parts(player1, player2, player3))
