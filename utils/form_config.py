"""
Registration wizard configuration: which fields each step collects, which of
them are required, and the step order (with the optional backup player step).
"""

import re

DEFAULT_COUNTRY_CODE = '+1'
BACKUP_DECISION_LABEL = 'Backup Player Decision'


def _player_fields(prefix):
    return [
        {'field': f'{prefix}_first_name', 'label': 'First Name', 'required': True},
        {'field': f'{prefix}_middle_name', 'label': 'Middle Name', 'required': False},
        {'field': f'{prefix}_last_name', 'label': 'Last Name', 'required': True},
        {'field': f'{prefix}_singh_kaur', 'label': 'Singh / Kaur', 'required': True},
        {'field': f'{prefix}_email', 'label': 'Email', 'required': True},
        {'field': f'{prefix}_country_code', 'label': 'Country Code', 'required': False},
        {'field': f'{prefix}_phone', 'label': 'Phone Number', 'required': True},
        {'field': f'{prefix}_dob', 'label': 'Date of Birth', 'required': True},
        {'field': f'{prefix}_proof_of_age', 'label': 'Proof of Age Document', 'required': True},
        {'field': f'{prefix}_emergency_contact_first_name', 'label': 'Emergency Contact First Name', 'required': True},
        {'field': f'{prefix}_emergency_contact_middle_name', 'label': 'Emergency Contact Middle Name', 'required': False},
        {'field': f'{prefix}_emergency_contact_last_name', 'label': 'Emergency Contact Last Name', 'required': True},
        {'field': f'{prefix}_emergency_contact_country_code', 'label': 'Emergency Contact Country Code', 'required': False},
        {'field': f'{prefix}_emergency_contact_phone', 'label': 'Emergency Contact Phone', 'required': True},
        {'field': f'{prefix}_father_first_name', 'label': 'Father First Name', 'required': False},
        {'field': f'{prefix}_father_middle_name', 'label': 'Father Middle Name', 'required': False},
        {'field': f'{prefix}_father_last_name', 'label': 'Father Last Name', 'required': False},
        {'field': f'{prefix}_mother_first_name', 'label': 'Mother First Name', 'required': False},
        {'field': f'{prefix}_mother_middle_name', 'label': 'Mother Middle Name', 'required': False},
        {'field': f'{prefix}_mother_last_name', 'label': 'Mother Last Name', 'required': False},
        {'field': f'{prefix}_pind_village', 'label': 'Pind/Village or Town/City', 'required': True},
        {'field': f'{prefix}_gatka_experience', 'label': 'Years of Gatka Experience', 'required': True},
    ]


FIELD_CONFIG = {
    'division': [
        {'field': 'division', 'label': 'Division', 'required': True},
    ],
    'player1': _player_fields('player1'),
    'player2': _player_fields('player2'),
    'player3': _player_fields('player3'),
    # The yes/no answer is checked separately: False is a valid answer
    'backupDecision': [
        {'field': 'has_backup_player', 'label': BACKUP_DECISION_LABEL, 'required': False},
    ],
    'backup': _player_fields('backup'),
    'team': [
        {'field': 'team_name', 'label': 'Team Name', 'required': True},
        {'field': 'city', 'label': 'City', 'required': True},
        {'field': 'state', 'label': 'State', 'required': False},
        {'field': 'country', 'label': 'Country', 'required': True},
        {'field': 'ustads', 'label': 'Ustads', 'required': True},
        {'field': 'senior_gatkai_name', 'label': 'Senior Gatkai Name', 'required': False},
        {'field': 'senior_gatkai_email', 'label': 'Senior Gatkai Email', 'required': False},
        {'field': 'player_order1', 'label': '1st Position', 'required': True},
        {'field': 'player_order2', 'label': '2nd Position', 'required': True},
        {'field': 'player_order3', 'label': '3rd Position', 'required': True},
        {'field': 'team_photos', 'label': 'Team Photos', 'required': True},
    ],
}

STEP_LABELS = {
    'division': 'DIVISION',
    'player1': 'PLAYER 1',
    'player2': 'PLAYER 2',
    'player3': 'PLAYER 3',
    'backupDecision': 'BACKUP DECISION',
    'backup': 'BACKUP PLAYER',
    'team': 'TEAM INFO',
}

BASE_STEPS = ['division', 'player1', 'player2', 'player3', 'backupDecision', 'team']

# Digit ranges per country calling code
PHONE_RULES = {
    '+1': {'min': 10, 'max': 10, 'name': 'US/Canada'},
    '+44': {'min': 10, 'max': 11, 'name': 'UK'},
    '+91': {'min': 10, 'max': 10, 'name': 'India'},
    '+61': {'min': 9, 'max': 9, 'name': 'Australia'},
    '+33': {'min': 9, 'max': 9, 'name': 'France'},
    '+49': {'min': 10, 'max': 12, 'name': 'Germany'},
    '+81': {'min': 10, 'max': 11, 'name': 'Japan'},
    '+86': {'min': 11, 'max': 11, 'name': 'China'},
}

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def is_empty(value):
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def is_field_required(field_name):
    """Look a field up in every step and report its required flag."""
    for config in FIELD_CONFIG.values():
        for item in config:
            if item['field'] == field_name:
                return item['required']
    return False


def validate_fields_from_config(config_key, form_data):
    """
    Collect the labels of required fields left empty for one step.

    Returns ``{'is_valid': bool, 'missing_fields': [label, ...]}`` with labels
    in the order the step declares them. An unknown step is never valid.
    """
    config = FIELD_CONFIG.get(config_key)
    if config is None:
        return {'is_valid': False, 'missing_fields': []}

    missing_fields = [
        item['label'] for item in config
        if item['required'] and is_empty(form_data.get(item['field']))
    ]
    return {'is_valid': not missing_fields, 'missing_fields': missing_fields}


def has_backup_decision(form_data):
    return form_data.get('has_backup_player') in (True, False)


def validate_step(step, form_data):
    """Validate one wizard step, including the conditional backup player block."""
    if step == 'backupDecision':
        if not has_backup_decision(form_data):
            return {'is_valid': False, 'missing_fields': [BACKUP_DECISION_LABEL]}
        if form_data.get('has_backup_player') is True:
            return validate_fields_from_config('backup', form_data)
        return {'is_valid': True, 'missing_fields': []}
    if step == 'backup' and form_data.get('has_backup_player') is not True:
        return {'is_valid': True, 'missing_fields': []}
    return validate_fields_from_config(step, form_data)


def get_steps(form_data):
    """Wizard steps for this form; the backup step only appears after a yes."""
    steps = list(BASE_STEPS)
    if form_data.get('has_backup_player') is True:
        steps.insert(steps.index('backupDecision') + 1, 'backup')
    return steps


def next_step(current_step, form_data):
    """
    Work out where the wizard goes after ``current_step``.

    Returns ``(next_step_or_None, validation)``. The wizard stays on the
    current step while it does not validate; ``None`` means the form is
    ready to submit.
    """
    validation = validate_step(current_step, form_data)
    if not validation['is_valid']:
        return current_step, validation

    steps = get_steps(form_data)
    if current_step not in steps:
        return None, {'is_valid': False, 'missing_fields': []}
    position = steps.index(current_step)
    if position + 1 >= len(steps):
        return None, validation
    return steps[position + 1], validation


def previous_step(current_step, form_data):
    steps = get_steps(form_data)
    if current_step not in steps:
        return None
    position = steps.index(current_step)
    return steps[position - 1] if position > 0 else None


def validate_all_steps(form_data):
    """Validate every step in wizard order; stop at the first failure."""
    for step in get_steps(form_data):
        validation = validate_step(step, form_data)
        if not validation['is_valid']:
            return step, validation
    return None, {'is_valid': True, 'missing_fields': []}


def validate_email(email):
    """Return an error message for a malformed email, None when fine or empty."""
    if not email:
        return None
    return None if EMAIL_RE.match(email) else 'Please enter a valid email address'


def validate_phone_number(phone, country_code=DEFAULT_COUNTRY_CODE):
    if not phone:
        return None

    clean_phone = re.sub(r'\D', '', phone)
    rule = PHONE_RULES.get(country_code)
    if rule is None:
        if len(clean_phone) < 7 or len(clean_phone) > 15:
            return 'Phone number should be between 7-15 digits'
        return None

    if len(clean_phone) < rule['min'] or len(clean_phone) > rule['max']:
        digits = str(rule['min']) if rule['min'] == rule['max'] else f"{rule['min']}-{rule['max']}"
        return f"Phone number for {rule['name']} should be {digits} digits"
    return None


def validate_field(field, value, country_code=None):
    """Per-field format check used while the registrant types."""
    if 'email' in field:
        return validate_email(value)
    if 'phone' in field and 'emergency' not in field:
        return validate_phone_number(value, country_code or DEFAULT_COUNTRY_CODE)
    return None


def validate_contact_fields(form_data):
    """Format errors for every email and phone field in the form, keyed by field."""
    errors = {}
    skip_backup = form_data.get('has_backup_player') is not True
    for field, value in form_data.items():
        if not isinstance(value, str) or not value:
            continue
        if skip_backup and field.startswith('backup_'):
            continue
        country_code = None
        if field.endswith('_phone'):
            country_code = form_data.get(field[:-len('phone')] + 'country_code')
        error = validate_field(field, value, country_code)
        if error:
            errors[field] = error
    return errors
