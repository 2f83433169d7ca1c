"""
Tests for the public registration wizard endpoints.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from conftest import make_form_data, make_upload, multipart_submission
from models import Registration, FileUpload, RegistrationEvent
from utils.form_token import is_valid_form_token


def _complete_files(has_backup_player=False):
    files = {
        'team_photos': [make_upload('team-front.jpg'), make_upload('team-side.jpg')],
        'player1_proof_of_age': make_upload('p1.pdf', b'%PDF-1'),
        'player2_proof_of_age': make_upload('p2.pdf', b'%PDF-2'),
        'player3_proof_of_age': make_upload('p3.pdf', b'%PDF-3'),
    }
    if has_backup_player:
        files['backup_proof_of_age'] = make_upload('backup.pdf', b'%PDF-4')
    return files


def _strip_file_inputs(form_data):
    """Wizard state as sent with a multipart body: files travel separately."""
    for key in ('team_photos', 'player1_proof_of_age', 'player2_proof_of_age',
                'player3_proof_of_age', 'backup_proof_of_age'):
        form_data.pop(key, None)
    return form_data


class TestWizardEndpoints:
    """Tests for step config and per-step validation."""

    def test_steps_without_backup(self, client):
        response = client.get('/api/register/steps')
        assert response.status_code == 200
        keys = [step['key'] for step in response.get_json()['steps']]
        assert 'backup' not in keys
        assert keys[0] == 'division'

    def test_steps_with_backup(self, client):
        response = client.get('/api/register/steps?has_backup_player=true')
        keys = [step['key'] for step in response.get_json()['steps']]
        assert keys.index('backup') == keys.index('backupDecision') + 1

    def test_validate_step_reports_missing_fields(self, client):
        response = client.post('/api/register/validate/division', json={})
        data = response.get_json()
        assert response.status_code == 200
        assert data['is_valid'] is False
        assert data['missing_fields'] == ['Division']
        assert data['next_step'] == 'division'

    def test_validate_step_moves_on(self, client):
        response = client.post('/api/register/validate/backupDecision', json=make_form_data(has_backup_player=True))
        data = response.get_json()
        assert data['is_valid'] is True
        assert data['next_step'] == 'backup'
        assert data['previous_step'] == 'player3'

    def test_validate_unknown_step(self, client):
        response = client.post('/api/register/validate/payment', json={})
        assert response.status_code == 404


class TestSubmitRegistration:
    """Tests for POST /api/register."""

    def test_multipart_submission(self, app, client):
        form_data = _strip_file_inputs(make_form_data())
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **_complete_files()),
            content_type='multipart/form-data',
        )
        assert response.status_code == 201
        data = response.get_json()
        assert data['success'] is True
        assert data['message'] == 'Registration submitted successfully!'
        assert data['errors'] == []
        assert is_valid_form_token(data['form_token'])

        with app.app_context():
            registration = Registration.query.filter_by(form_token=data['form_token']).one()
            assert registration.status == 'new submission'
            assert len(registration.team_photo) == 2
            assert len(registration.player1_dob_proof) == 1
            assert registration.backup_dob_proof is None
            assert registration.last_modified_by == 'registrant'
            assert FileUpload.query.filter_by(registration_id=registration.id).count() == 5
            event = RegistrationEvent.query.filter_by(registration_id=registration.id).one()
            assert event.event_type == 'new'
            assert event.actor == 'registrant'

    def test_uploaded_files_are_served(self, app, client):
        form_data = _strip_file_inputs(make_form_data())
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **_complete_files()),
            content_type='multipart/form-data',
        )
        token = response.get_json()['form_token']
        with app.app_context():
            url = Registration.query.filter_by(form_token=token).one().player2_dob_proof[0]
        file_response = client.get(url)
        assert file_response.status_code == 200
        assert file_response.data == b'%PDF-2'

    def test_partial_upload_failure_keeps_registration(self, app, client):
        files = _complete_files()
        files['team_photos'] = [make_upload('team.jpg'), make_upload('virus.exe')]
        form_data = _strip_file_inputs(make_form_data())
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **files),
            content_type='multipart/form-data',
        )
        assert response.status_code == 201
        data = response.get_json()
        assert data['success'] is True
        assert data['errors'] == ['team_photo: File type .exe is not allowed']
        assert data['message'] == (
            'Registration submitted successfully, but some files failed to upload: '
            'team_photo: File type .exe is not allowed'
        )
        with app.app_context():
            registration = Registration.query.filter_by(form_token=data['form_token']).one()
            assert len(registration.team_photo) == 1

    def test_backup_declined_discards_backup_data(self, app, client):
        form_data = _strip_file_inputs(make_form_data(has_backup_player=False))
        files = _complete_files()
        files['backup_proof_of_age'] = make_upload('backup.pdf')
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **files),
            content_type='multipart/form-data',
        )
        token = response.get_json()['form_token']
        with app.app_context():
            registration = Registration.query.filter_by(form_token=token).one()
            assert registration.backup_player is False
            assert registration.backup_name is None
            assert registration.backup_dob_proof is None

    def test_backup_accepted(self, app, client):
        form_data = _strip_file_inputs(make_form_data(has_backup_player=True))
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **_complete_files(has_backup_player=True)),
            content_type='multipart/form-data',
        )
        assert response.status_code == 201
        token = response.get_json()['form_token']
        with app.app_context():
            registration = Registration.query.filter_by(form_token=token).one()
            assert registration.backup_name == 'Manjit Singh'
            assert len(registration.backup_dob_proof) == 1

    def test_missing_files_fail_validation(self, client):
        form_data = _strip_file_inputs(make_form_data())
        response = client.post('/api/register', json=form_data)
        assert response.status_code == 400
        data = response.get_json()
        assert data['step'] == 'player1'
        assert data['missing_fields'] == ['Proof of Age Document']

    def test_invalid_contact_fields(self, client):
        form_data = _strip_file_inputs(make_form_data(player1_email='not-an-email'))
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **_complete_files()),
            content_type='multipart/form-data',
        )
        assert response.status_code == 400
        assert 'player1_email' in response.get_json()['field_errors']

    def test_invalid_ustads(self, client):
        form_data = _strip_file_inputs(make_form_data(ustads=[{'name': 'G', 'email': 'g@example.com'}]))
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **_complete_files()),
            content_type='multipart/form-data',
        )
        assert response.status_code == 400
        assert response.get_json()['ustad_errors'] == ['Ustad 1: Name must be at least 2 characters long']

    def test_ustads_must_be_objects(self, client):
        form_data = _strip_file_inputs(make_form_data(ustads=['Gurdeep Singh']))
        response = client.post(
            '/api/register',
            data=multipart_submission(form_data, **_complete_files()),
            content_type='multipart/form-data',
        )
        assert response.status_code == 400
        assert response.get_json()['ustad_errors'] == ['Ustad 1: Must have a name and an email']

    def test_malformed_body(self, client):
        response = client.post('/api/register', data={'data': 'not json'}, content_type='multipart/form-data')
        assert response.status_code == 400
