"""
Unit tests for form token generation and validation.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from utils.form_token import generate_form_token, is_valid_form_token


class TestFormToken:
    """Tests for jet-YYYY-XXXXX tokens."""

    def test_generated_token_is_valid(self):
        token = generate_form_token()
        assert is_valid_form_token(token)

    def test_generated_token_uses_year(self):
        assert generate_form_token(2025).startswith('jet-2025-')

    def test_tokens_differ(self):
        tokens = {generate_form_token(2025) for _ in range(50)}
        assert len(tokens) > 1

    def test_valid_token(self):
        assert is_valid_form_token('jet-2025-AB3D9')

    def test_short_year_is_invalid(self):
        assert not is_valid_form_token('jet-25-AB3D9')

    def test_lowercase_is_invalid(self):
        assert not is_valid_form_token('jet-2025-ab3d9')

    def test_extra_characters_are_invalid(self):
        assert not is_valid_form_token('jet-2025-AB3D9X')
        assert not is_valid_form_token('jet-2025-AB3D9\n')
        assert not is_valid_form_token(' jet-2025-AB3D9')

    def test_non_string(self):
        assert not is_valid_form_token(None)
        assert not is_valid_form_token(2025)
