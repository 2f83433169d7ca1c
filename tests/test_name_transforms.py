"""
Unit tests for the wizard input combiners.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from utils.name_transforms import (
    concatenate_name,
    combine_location,
    combine_phone_number,
    combine_player_order,
)


class TestConcatenateName:
    """Tests for concatenate_name."""

    def test_skips_empty_middle_name(self):
        assert concatenate_name('John', '', 'Doe') == 'John Doe'

    def test_all_parts(self):
        assert concatenate_name('Harjit', 'Kaur', 'Sandhu') == 'Harjit Kaur Sandhu'

    def test_all_empty(self):
        assert concatenate_name('', '', '') == ''
        assert concatenate_name(None, None, None) == ''

    def test_trims_parts(self):
        assert concatenate_name('  John ', ' ', ' Doe') == 'John Doe'


class TestCombineLocation:
    """Tests for combine_location."""

    def test_full_location(self):
        assert combine_location('Toronto', 'Ontario', 'Canada') == 'Toronto, Ontario, Canada'

    def test_missing_state(self):
        assert combine_location('London', '', 'UK') == 'London, UK'

    def test_nothing(self):
        assert combine_location('', None, '  ') == ''


class TestCombinePhoneNumber:
    """Tests for combine_phone_number."""

    def test_code_and_phone(self):
        assert combine_phone_number('1', '555-123-4567') == '+1 555-123-4567'

    def test_plus_in_code_is_not_doubled(self):
        assert combine_phone_number('+44', '7700 900123') == '+44 7700 900123'

    def test_missing_code_returns_phone(self):
        assert combine_phone_number('', '555-123-4567') == '555-123-4567'

    def test_missing_phone(self):
        assert combine_phone_number('+1', '') == ''
        assert combine_phone_number(None, None) == ''


class TestCombinePlayerOrder:
    """Tests for combine_player_order."""

    def test_three_players(self):
        assert combine_player_order('John Singh', 'Mary Kaur', 'Bob Singh') == 'John Singh, Mary Kaur, Bob Singh'

    def test_skips_blanks(self):
        assert combine_player_order('John Singh', '', 'Bob Singh') == 'John Singh, Bob Singh'
