"""Shareable registration tokens in the form jet-YYYY-XXXXX."""

import re
import secrets
from datetime import datetime

TOKEN_PREFIX = 'jet'
TOKEN_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'
TOKEN_RANDOM_LENGTH = 5
TOKEN_PATTERN = re.compile(r'jet-[0-9]{4}-[A-Z0-9]{5}')


def generate_form_token(year=None):
    """Generate a token for the given (default: current) year."""
    if year is None:
        year = datetime.utcnow().year
    random_part = ''.join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_RANDOM_LENGTH))
    return f'{TOKEN_PREFIX}-{year}-{random_part}'


def is_valid_form_token(token):
    """Check a token against the fixed jet-YYYY-XXXXX format."""
    if not isinstance(token, str):
        return False
    return TOKEN_PATTERN.fullmatch(token) is not None
