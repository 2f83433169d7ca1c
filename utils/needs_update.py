"""
Edit tracking for registrations sent back to the registrant.

An admin flags individual fields (``<field>_needs_update``); the flagged
field names are mirrored in ``admin_notes['requested_updates']``. While the
status is "information requested" the registrant may change exactly those
fields, after which the status becomes "updated information".

Backup player requests are parked in ``admin_notes['parked_backup_updates']``
while the team has no backup player and come back when it gets one again.
"""

from models.registration import (
    BACKUP_FIELDS,
    DIVISIONS,
    FILE_FIELDS,
    STATUSES,
    TRACKED_FIELDS,
    needs_update_column,
)
from utils.ustads import normalize_ustads, validate_ustads, format_ustads_display

INFO_REQUESTED = 'information requested'
INFO_UPDATED = 'updated information'

# Fields an admin can change besides the tracked ones
ADMIN_EXTRA_FIELDS = ('status', 'ustads')


class RegistrationEditError(Exception):
    """Base class for rejected registration edits."""


class EditNotAllowed(RegistrationEditError):
    """The registration is not waiting for updates from the registrant."""


class FieldsNotEditable(RegistrationEditError):
    """Some submitted fields were not requested by the admin."""

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__('These fields are not open for editing: ' + ', '.join(self.fields))


class InvalidFieldValue(RegistrationEditError):
    pass


def get_admin_notes(registration):
    """Copy of the admin notes with every key present."""
    notes = dict(registration.admin_notes or {})
    notes.setdefault('internal_notes', None)
    notes['requested_updates'] = list(notes.get('requested_updates') or [])
    notes['parked_backup_updates'] = list(notes.get('parked_backup_updates') or [])
    return notes


def set_needs_update(registration, field, needs_update):
    """Flag or unflag one field and keep requested_updates in step with it."""
    if field not in TRACKED_FIELDS:
        raise InvalidFieldValue(f'Unknown field: {field}')

    needs_update = bool(needs_update)
    notes = get_admin_notes(registration)
    if field in BACKUP_FIELDS and field != 'backup_player' and not registration.backup_player:
        if needs_update:
            raise InvalidFieldValue('This team has no backup player')

    setattr(registration, needs_update_column(field), needs_update)
    requested = notes['requested_updates']
    if needs_update and field not in requested:
        requested.append(field)
    elif not needs_update:
        notes['requested_updates'] = [name for name in requested if name != field]

    # Assign a new dict so the JSON column is marked dirty
    registration.admin_notes = notes
    return notes['requested_updates']


def set_backup_player(registration, has_backup_player):
    """
    Switch the backup player on or off.

    Switching off clears every backup_* flag and moves the backup names out of
    requested_updates into parked_backup_updates; switching on moves them
    back. Setting the current value again changes nothing. Returns whether
    anything changed.
    """
    has_backup_player = bool(has_backup_player)
    if bool(registration.backup_player) == has_backup_player:
        return False

    notes = get_admin_notes(registration)
    requested = notes['requested_updates']

    if not has_backup_player:
        parked = notes['parked_backup_updates']
        for field in BACKUP_FIELDS:
            flagged = getattr(registration, needs_update_column(field))
            if (flagged or field in requested) and field not in parked:
                parked.append(field)
            setattr(registration, needs_update_column(field), False)
        notes['requested_updates'] = [name for name in requested if name not in BACKUP_FIELDS]
    else:
        for field in notes['parked_backup_updates']:
            setattr(registration, needs_update_column(field), True)
            if field not in requested:
                requested.append(field)
        notes['parked_backup_updates'] = []

    registration.backup_player = has_backup_player
    registration.admin_notes = notes
    return True


def compute_changes(original, edited):
    """Keys of ``edited`` whose value differs from ``original`` (shallow comparison)."""
    return {
        key: value for key, value in edited.items()
        if key in original and original[key] != value
    }


def _coerce(field, value):
    if field in FILE_FIELDS:
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
            raise InvalidFieldValue(f'{field} must be a list of file URLs')
        return value
    if field == 'backup_player':
        if not isinstance(value, bool):
            raise InvalidFieldValue('backup_player must be true or false')
        return value
    if field == 'status':
        if value not in STATUSES:
            raise InvalidFieldValue(f'Invalid status: {value}')
        return value
    if field == 'division':
        if value not in DIVISIONS:
            raise InvalidFieldValue(f'Invalid division: {value}')
        return value
    if field == 'ustads':
        try:
            ustads = normalize_ustads(value if isinstance(value, list) else [])
        except ValueError as e:
            raise InvalidFieldValue(str(e))
        errors = validate_ustads(ustads)
        if errors:
            raise InvalidFieldValue('; '.join(errors))
        return ustads
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidFieldValue(f'{field} must be text')
    return value.strip()


def _current_values(registration, fields):
    return {field: getattr(registration, field) for field in fields}


def validate_registrant_update(registration, updates):
    """
    Check a registrant's corrections without touching the registration.

    Only fields flagged needs_update may be sent, and only while the status is
    "information requested". Returns the cleaned values.
    """
    if registration.status != INFO_REQUESTED:
        raise EditNotAllowed('This registration is not waiting for updates')

    editable = set(registration.editable_fields())
    not_editable = [field for field in updates if field not in editable]
    if not_editable:
        raise FieldsNotEditable(not_editable)

    return {field: _coerce(field, value) for field, value in updates.items()}


def apply_registrant_update(registration, updates):
    """
    Apply a registrant's corrections. Unchanged values are ignored and the
    status moves to "updated information". Returns the list of changed fields.
    """
    cleaned = validate_registrant_update(registration, updates)
    changes = compute_changes(_current_values(registration, cleaned), cleaned)
    changed = []

    if 'backup_player' in changes:
        set_backup_player(registration, changes.pop('backup_player'))
        changed.append('backup_player')

    for field, value in changes.items():
        setattr(registration, field, value)
        changed.append(field)

    registration.status = INFO_UPDATED
    return changed


def apply_admin_update(registration, updates):
    """
    Apply an admin's full save: any tracked field, status, ustads, internal
    notes and needs_update flags. Returns the list of changed fields.
    """
    updates = dict(updates)
    changed = []

    internal_notes = updates.pop('internal_notes', None)
    flag_updates = {
        key[:-len('_needs_update')]: value
        for key, value in list(updates.items())
        if key.endswith('_needs_update')
    }
    for key in list(updates):
        if key.endswith('_needs_update'):
            updates.pop(key)

    unknown = [field for field in updates if field not in TRACKED_FIELDS and field not in ADMIN_EXTRA_FIELDS]
    if unknown:
        raise InvalidFieldValue('Unknown fields: ' + ', '.join(unknown))

    cleaned = {field: _coerce(field, value) for field, value in updates.items()}
    changes = compute_changes(_current_values(registration, cleaned), cleaned)

    if 'backup_player' in changes:
        set_backup_player(registration, changes.pop('backup_player'))
        changed.append('backup_player')

    for field, value in changes.items():
        setattr(registration, field, value)
        changed.append(field)
    if 'ustads' in changes:
        registration.ustad_name = format_ustads_display(changes['ustads']) if changes['ustads'] else ''
        registration.ustad_email = changes['ustads'][0]['email'] if changes['ustads'] else None

    for field, needs_update in flag_updates.items():
        if field not in TRACKED_FIELDS:
            raise InvalidFieldValue(f'Unknown field: {field}')
        if bool(getattr(registration, needs_update_column(field))) != bool(needs_update):
            set_needs_update(registration, field, needs_update)
            changed.append(needs_update_column(field))

    if internal_notes is not None:
        notes = get_admin_notes(registration)
        if notes['internal_notes'] != internal_notes:
            notes['internal_notes'] = internal_notes
            registration.admin_notes = notes
            changed.append('internal_notes')

    return changed
