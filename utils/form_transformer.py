"""
Transforms the flat registration wizard state into the registrations table
shape: names are concatenated, phones prefixed with their country code,
locations joined, and every needs_update flag starts out False.
"""

from datetime import datetime

from models.registration import TRACKED_FIELDS, PLAYER_FIELD_SUFFIXES, needs_update_column
from utils.form_token import generate_form_token
from utils.name_transforms import (
    concatenate_name,
    combine_location,
    combine_phone_number,
    combine_player_order,
)
from utils.ustads import normalize_ustads, convert_legacy_ustad, format_ustads_display

# Wizard file inputs and the file type they are stored as
FILE_INPUTS = [
    ('team_photos', 'team_photo'),
    ('player1_proof_of_age', 'player1_dob_proof'),
    ('player2_proof_of_age', 'player2_dob_proof'),
    ('player3_proof_of_age', 'player3_dob_proof'),
    ('backup_proof_of_age', 'backup_dob_proof'),
]


def _text(form_data, key):
    value = form_data.get(key)
    if value is None:
        return ''
    return str(value).strip()


def _date(form_data, key):
    value = _text(form_data, key)
    return value[:10] if value else None


def form_ustads(form_data):
    """Ustads from the wizard, falling back to the single ustad_name/ustad_email inputs."""
    ustads = normalize_ustads(form_data.get('ustads'))
    if ustads:
        return ustads
    return convert_legacy_ustad(form_data.get('ustad_name'), form_data.get('ustad_email'))


def transform_player(form_data, prefix, optional_parents=True):
    """Column values for one player block (prefix is player1/2/3 or backup)."""
    def name(part):
        return concatenate_name(
            form_data.get(f'{prefix}_{part}first_name'),
            form_data.get(f'{prefix}_{part}middle_name'),
            form_data.get(f'{prefix}_{part}last_name'),
        )

    father_name = name('father_')
    mother_name = name('mother_')
    return {
        f'{prefix}_name': name(''),
        f'{prefix}_singh_kaur': _text(form_data, f'{prefix}_singh_kaur'),
        f'{prefix}_dob': _date(form_data, f'{prefix}_dob'),
        f'{prefix}_dob_proof': None,  # set after upload
        f'{prefix}_email': _text(form_data, f'{prefix}_email'),
        f'{prefix}_phone_number': combine_phone_number(
            form_data.get(f'{prefix}_country_code'), form_data.get(f'{prefix}_phone')
        ),
        f'{prefix}_emergency_contact_name': name('emergency_contact_'),
        f'{prefix}_emergency_contact_phone': combine_phone_number(
            form_data.get(f'{prefix}_emergency_contact_country_code'),
            form_data.get(f'{prefix}_emergency_contact_phone'),
        ),
        f'{prefix}_father_name': (father_name or None) if optional_parents else father_name,
        f'{prefix}_mother_name': (mother_name or None) if optional_parents else mother_name,
        f'{prefix}_city': _text(form_data, f'{prefix}_pind_village'),
        f'{prefix}_gatka_experience': _text(form_data, f'{prefix}_gatka_experience'),
    }


def transform_form_data_to_registration(form_data, form_token=None, now=None):
    """
    Build the column dict for a new registration.

    Backup player columns are None whenever the registrant answered "no",
    even if backup details were typed in earlier.
    """
    if form_token is None:
        form_token = generate_form_token()
    if now is None:
        now = datetime.utcnow()

    ustads = form_ustads(form_data)

    registration = {
        'status': 'new submission',
        'submission_date_time': now,
        'form_token': form_token,

        'division': _text(form_data, 'division'),
        'team_name': _text(form_data, 'team_name'),
        'ustads': ustads,
        'ustad_name': format_ustads_display(ustads) if ustads else '',
        'ustad_email': (ustads[0]['email'] if ustads else '') or None,
        'coach_name': _text(form_data, 'senior_gatkai_name'),
        'coach_email': _text(form_data, 'senior_gatkai_email') or None,
        'team_location': combine_location(
            form_data.get('city'), form_data.get('state'), form_data.get('country')
        ),
        'player_order': combine_player_order(
            form_data.get('player_order1'),
            form_data.get('player_order2'),
            form_data.get('player_order3'),
        ),
        'team_photo': None,  # set after upload
    }

    for prefix in ('player1', 'player2', 'player3'):
        registration.update(transform_player(form_data, prefix))

    has_backup_player = form_data.get('has_backup_player') is True
    registration['backup_player'] = has_backup_player
    if has_backup_player:
        registration.update(transform_player(form_data, 'backup', optional_parents=False))
    else:
        for suffix in PLAYER_FIELD_SUFFIXES:
            registration[f'backup_{suffix}'] = None

    for field in TRACKED_FIELDS:
        registration[needs_update_column(field)] = False

    registration['admin_notes'] = None
    registration['last_modified_by'] = 'registrant'
    return registration


def _has_content(file):
    if file is None or not getattr(file, 'filename', ''):
        return False
    size = getattr(file, 'content_length', None)
    if size:
        return True
    stream = getattr(file, 'stream', None)
    if stream is None:
        return False
    position = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(position)
    return size > 0


def extract_files_from_form_data(form_data, files):
    """
    Pair each uploaded file with its file type.

    ``files`` maps wizard input names (team_photos, player1_proof_of_age, ...)
    to lists of uploaded files. Backup proofs are only taken when the backup
    player was accepted; empty files are skipped.
    """
    extracted = []
    has_backup_player = form_data.get('has_backup_player') is True
    for input_name, file_type in FILE_INPUTS:
        if file_type == 'backup_dob_proof' and not has_backup_player:
            continue
        for file in files.get(input_name) or []:
            if _has_content(file):
                extracted.append((file_type, file))
    return extracted
