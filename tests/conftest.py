"""
Shared pytest fixtures for the registration service tests.

Running tests:
    pytest tests/
"""
import io
import json
import os
import sys
import tempfile

import pytest

# Add the project root to the path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Keep the module-level app away from the real database and storage
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('UPLOAD_FOLDER', tempfile.mkdtemp(prefix='jet-storage-'))

ADMIN_EMAIL = 'admin@example.com'
OTHER_ADMIN_EMAIL = 'second@example.com'


@pytest.fixture
def app(tmp_path):
    """Fresh application on an in-memory database and a temporary bucket."""
    from app import create_app
    from models import db

    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(tmp_path / 'storage'),
        'ADMIN_EMAILS': {ADMIN_EMAIL, OTHER_ADMIN_EMAIL},
        'ADMIN_EMAIL_DOMAIN': '',
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def create_admin(app, email=ADMIN_EMAIL, name='Test Admin'):
    from models import db, User

    with app.app_context():
        user = User(google_id=f'google-{email}', email=email, name=name)
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture
def admin_client(app):
    """Test client with a signed-in admin."""
    user_id = create_admin(app)
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['user_id'] = user_id
    return client


@pytest.fixture
def other_admin_client(app):
    user_id = create_admin(app, OTHER_ADMIN_EMAIL, 'Second Admin')
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['user_id'] = user_id
    return client


def player_data(prefix, first_name='Harjit', last_name='Singh', singh_kaur='Singh'):
    return {
        f'{prefix}_first_name': first_name,
        f'{prefix}_middle_name': '',
        f'{prefix}_last_name': last_name,
        f'{prefix}_singh_kaur': singh_kaur,
        f'{prefix}_email': f'{prefix}@example.com',
        f'{prefix}_country_code': '+1',
        f'{prefix}_phone': '604-555-0101',
        f'{prefix}_dob': '2008-04-13',
        f'{prefix}_proof_of_age': ['birth-certificate.pdf'],
        f'{prefix}_emergency_contact_first_name': 'Gurpreet',
        f'{prefix}_emergency_contact_middle_name': '',
        f'{prefix}_emergency_contact_last_name': 'Kaur',
        f'{prefix}_emergency_contact_country_code': '+1',
        f'{prefix}_emergency_contact_phone': '604-555-0199',
        f'{prefix}_father_first_name': 'Amrik',
        f'{prefix}_father_middle_name': '',
        f'{prefix}_father_last_name': 'Singh',
        f'{prefix}_mother_first_name': '',
        f'{prefix}_mother_middle_name': '',
        f'{prefix}_mother_last_name': '',
        f'{prefix}_pind_village': 'Surrey',
        f'{prefix}_gatka_experience': '4',
    }


def make_form_data(has_backup_player=False, **overrides):
    """A complete wizard state that passes every step."""
    form_data = {'division': 'Open Singhs'}
    for prefix in ('player1', 'player2', 'player3'):
        form_data.update(player_data(prefix))
    form_data['has_backup_player'] = has_backup_player
    form_data.update(player_data('backup', first_name='Manjit'))
    form_data.update({
        'team_name': 'Khalsa Warriors',
        'city': 'Vancouver',
        'state': 'BC',
        'country': 'Canada',
        'ustads': [{'name': 'Gurdeep Singh', 'email': 'ustad@example.com'}],
        'senior_gatkai_name': 'Baljit Singh',
        'senior_gatkai_email': '',
        'player_order1': 'Harjit Singh',
        'player_order2': 'Harjit Singh',
        'player_order3': 'Harjit Singh',
        'team_photos': ['team.jpg'],
    })
    form_data.update(overrides)
    return form_data


@pytest.fixture
def form_data():
    return make_form_data()


def make_upload(name='team.jpg', content=b'fake image bytes'):
    return (io.BytesIO(content), name)


def multipart_submission(form_data, **files):
    """Multipart body for POST /api/register: the wizard state plus files by input name."""
    data = {'data': json.dumps(form_data)}
    data.update(files)
    return data


def create_registration(app, **overrides):
    """Insert a registration straight into the database; returns its id and token."""
    from models import db, Registration
    from utils.form_transformer import transform_form_data_to_registration

    columns = transform_form_data_to_registration(make_form_data())
    columns.update(overrides)
    with app.app_context():
        registration = Registration(**columns)
        db.session.add(registration)
        db.session.commit()
        return registration.id, registration.form_token
