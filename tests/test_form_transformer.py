"""
Unit tests for the wizard state to registration record transformation.
"""
import io
import sys
import os
from datetime import datetime

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from werkzeug.datastructures import FileStorage

from conftest import make_form_data
from models.registration import TRACKED_FIELDS
from utils.form_token import is_valid_form_token
from utils.form_transformer import transform_form_data_to_registration, extract_files_from_form_data


def _file(name, content=b'data'):
    return FileStorage(stream=io.BytesIO(content), filename=name)


class TestTransformFormData:
    """Tests for transform_form_data_to_registration."""

    def test_team_block(self):
        record = transform_form_data_to_registration(make_form_data(), form_token='jet-2025-AB3D9')
        assert record['form_token'] == 'jet-2025-AB3D9'
        assert record['status'] == 'new submission'
        assert record['division'] == 'Open Singhs'
        assert record['team_location'] == 'Vancouver, BC, Canada'
        assert record['ustad_name'] == 'Gurdeep Singh'
        assert record['ustad_email'] == 'ustad@example.com'
        assert record['coach_email'] is None
        assert record['team_photo'] is None

    def test_player_block(self):
        record = transform_form_data_to_registration(make_form_data())
        assert record['player1_name'] == 'Harjit Singh'
        assert record['player1_phone_number'] == '+1 604-555-0101'
        assert record['player1_emergency_contact_name'] == 'Gurpreet Kaur'
        assert record['player1_father_name'] == 'Amrik Singh'
        assert record['player1_mother_name'] is None
        assert record['player1_city'] == 'Surrey'
        assert record['player1_dob'] == '2008-04-13'

    def test_generates_token_and_timestamp(self):
        now = datetime(2025, 3, 1, 12, 0)
        record = transform_form_data_to_registration(make_form_data(), now=now)
        assert is_valid_form_token(record['form_token'])
        assert record['submission_date_time'] == now

    def test_flags_start_false(self):
        record = transform_form_data_to_registration(make_form_data())
        assert all(record[f'{field}_needs_update'] is False for field in TRACKED_FIELDS)
        assert record['admin_notes'] is None
        assert record['last_modified_by'] == 'registrant'

    def test_declined_backup_discards_backup_data(self):
        record = transform_form_data_to_registration(make_form_data(has_backup_player=False))
        assert record['backup_player'] is False
        assert record['backup_name'] is None
        assert record['backup_email'] is None
        assert record['backup_phone_number'] is None

    def test_accepted_backup_keeps_backup_data(self):
        record = transform_form_data_to_registration(make_form_data(has_backup_player=True))
        assert record['backup_player'] is True
        assert record['backup_name'] == 'Manjit Singh'
        assert record['backup_mother_name'] == ''

    def test_single_ustad_inputs(self):
        form_data = make_form_data(ustads=None, ustad_name='Jasbir Singh', ustad_email='j@example.com')
        record = transform_form_data_to_registration(form_data)
        assert record['ustads'] == [{'name': 'Jasbir Singh', 'email': 'j@example.com'}]
        assert record['ustad_name'] == 'Jasbir Singh'


class TestExtractFiles:
    """Tests for extract_files_from_form_data."""

    def test_order_and_types(self):
        files = {
            'player2_proof_of_age': [_file('p2.pdf')],
            'team_photos': [_file('a.jpg'), _file('b.jpg')],
            'player1_proof_of_age': [_file('p1.pdf')],
        }
        extracted = extract_files_from_form_data(make_form_data(), files)
        assert [(file_type, f.filename) for file_type, f in extracted] == [
            ('team_photo', 'a.jpg'),
            ('team_photo', 'b.jpg'),
            ('player1_dob_proof', 'p1.pdf'),
            ('player2_dob_proof', 'p2.pdf'),
        ]

    def test_backup_proof_only_with_backup(self):
        files = {'backup_proof_of_age': [_file('backup.pdf')]}
        assert extract_files_from_form_data(make_form_data(has_backup_player=False), files) == []
        extracted = extract_files_from_form_data(make_form_data(has_backup_player=True), files)
        assert [file_type for file_type, _ in extracted] == ['backup_dob_proof']

    def test_empty_files_are_skipped(self):
        files = {'team_photos': [_file('empty.jpg', b''), _file('', b'data')]}
        assert extract_files_from_form_data(make_form_data(), files) == []
