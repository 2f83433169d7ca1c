"""
Registrant portal: look a registration up by its form token and correct the
fields an admin asked about.
"""

import json

from flask import Blueprint, jsonify, request, current_app

from models import db
from models.registration import FIELD_DISPLAY_NAMES, FILE_FIELDS
from utils.change_feed import record_event
from utils.decorators import handle_db_errors
from utils.file_storage import get_file_store
from utils.form_token import is_valid_form_token
from utils.needs_update import (
    apply_registrant_update,
    validate_registrant_update,
    EditNotAllowed,
    FieldsNotEditable,
    InvalidFieldValue,
)
from utils.registration_queries import get_registration_by_token

portal_bp = Blueprint('portal', __name__)


def _portal_payload(registration):
    return {
        'registration': registration.to_public_dict(),
        'editable_fields': [
            {'field': field, 'label': FIELD_DISPLAY_NAMES.get(field, field)}
            for field in registration.editable_fields()
        ],
    }


def _read_updates():
    """Updates and uploaded files from a JSON body or a multipart ``data`` field."""
    if request.is_json:
        return request.get_json(silent=True), {}
    raw = request.form.get('data', '{}')
    try:
        updates = json.loads(raw)
    except ValueError:
        return None, {}
    files = {
        field: [upload for upload in request.files.getlist(field) if upload.filename]
        for field in FILE_FIELDS
        if field in request.files
    }
    return updates, {field: uploads for field, uploads in files.items() if uploads}


def _upload_files(registration, updates, files):
    """Upload new documents and append their URLs to the submitted (or stored) list."""
    upload_errors = []
    if not files:
        return upload_errors
    store = get_file_store()
    for field, uploads in files.items():
        urls, errors = store.upload_multiple_files(uploads, field)
        upload_errors.extend(f'{field}: {error}' for error in errors)
        current = updates.get(field, getattr(registration, field))
        updates[field] = list(current or []) + urls
    return upload_errors

@portal_bp.route('/lookup', methods=['POST'])
def lookup():
    data = request.get_json(silent=True) or {}
    form_token = (data.get('form_token') or '').strip()

    if not is_valid_form_token(form_token):
        return jsonify({'error': 'Invalid form token format'}), 400

    registration = get_registration_by_token(form_token)
    if registration is None:
        return jsonify({'error': 'Registration not found'}), 404

    return jsonify(_portal_payload(registration))


@portal_bp.route('/<form_token>', methods=['PUT'])
@handle_db_errors
def update_registration(form_token):
    """Save the registrant's corrections; the status becomes "updated information"."""
    registration = get_registration_by_token(form_token)
    if registration is None:
        return jsonify({'error': 'Registration not found'}), 404

    updates, files = _read_updates()
    if not isinstance(updates, dict):
        return jsonify({'error': 'Updates must be a JSON object'}), 400

    if registration.status != 'information requested':
        return jsonify({'error': 'This registration is not waiting for updates'}), 409

    editable = set(registration.editable_fields())
    not_editable = [field for field in list(updates) + list(files) if field not in editable]
    if not_editable:
        return jsonify({
            'error': 'These fields are not open for editing',
            'fields': sorted(set(not_editable)),
        }), 403

    try:
        validate_registrant_update(registration, updates)
        upload_errors = _upload_files(registration, updates, files)
        changed = apply_registrant_update(registration, updates)
    except EditNotAllowed as e:
        return jsonify({'error': str(e)}), 409
    except FieldsNotEditable as e:
        return jsonify({'error': 'These fields are not open for editing', 'fields': e.fields}), 403
    except InvalidFieldValue as e:
        return jsonify({'error': str(e)}), 400

    record_event(registration, 'updated', changed_fields=changed)
    db.session.commit()
    current_app.logger.info(f"Registrant updated {form_token}: {', '.join(changed) or 'no changes'}")

    payload = _portal_payload(registration)
    payload.update({'success': True, 'changed_fields': changed, 'errors': upload_errors})
    return jsonify(payload)
