"""Public registration wizard: step config, per-step validation and submission."""

import json

from flask import Blueprint, jsonify, request, current_app

from utils.form_config import (
    FIELD_CONFIG,
    STEP_LABELS,
    get_steps,
    next_step,
    previous_step,
    validate_all_steps,
    validate_contact_fields,
)
from utils.form_transformer import FILE_INPUTS, form_ustads
from utils.submission import submit_registration
from utils.ustads import validate_ustads

register_bp = Blueprint('register', __name__)


def _read_submission():
    """
    Wizard state and uploaded files from either a JSON body or a multipart
    body with the state in a ``data`` field.
    """
    if request.is_json:
        return request.get_json(silent=True), {}

    raw = request.form.get('data')
    if raw is None:
        return None, {}
    try:
        form_data = json.loads(raw)
    except ValueError:
        return None, {}

    files = {
        input_name: request.files.getlist(input_name)
        for input_name, _ in FILE_INPUTS
        if input_name in request.files
    }
    return form_data, files


def _with_file_inputs(form_data, files):
    """Form state where file inputs count as filled when files were sent."""
    merged = dict(form_data)
    for input_name, uploads in files.items():
        if any(upload.filename for upload in uploads):
            merged[input_name] = [upload.filename for upload in uploads if upload.filename]
    return merged


@register_bp.route('/steps')
def get_wizard_steps():
    """Step order and field config; pass has_backup_player=true to include the backup step."""
    has_backup_player = request.args.get('has_backup_player', '').lower() == 'true'
    steps = get_steps({'has_backup_player': has_backup_player})
    return jsonify({
        'steps': [{'key': step, 'label': STEP_LABELS[step]} for step in steps],
        'fields': {step: FIELD_CONFIG[step] for step in steps},
    })


@register_bp.route('/validate/<step>', methods=['POST'])
def validate_wizard_step(step):
    if step not in FIELD_CONFIG:
        return jsonify({'error': f'Unknown step: {step}'}), 404

    form_data = request.get_json(silent=True)
    if not isinstance(form_data, dict):
        return jsonify({'error': 'Form data must be a JSON object'}), 400

    following, validation = next_step(step, form_data)
    return jsonify({
        'step': step,
        'is_valid': validation['is_valid'],
        'missing_fields': validation['missing_fields'],
        'next_step': following if validation['is_valid'] else step,
        'previous_step': previous_step(step, form_data),
        'contact_errors': validate_contact_fields(form_data),
    })


@register_bp.route('', methods=['POST'])
def create_registration():
    """Submit a completed wizard."""
    form_data, files = _read_submission()
    if not isinstance(form_data, dict):
        return jsonify({'error': 'Registration data must be a JSON object'}), 400

    failing_step, validation = validate_all_steps(_with_file_inputs(form_data, files))
    if failing_step is not None:
        return jsonify({
            'error': 'Please complete all required fields',
            'step': failing_step,
            'missing_fields': validation['missing_fields'],
        }), 400

    contact_errors = validate_contact_fields(form_data)
    if contact_errors:
        return jsonify({'error': 'Please fix the highlighted fields', 'field_errors': contact_errors}), 400

    try:
        ustad_errors = validate_ustads(form_ustads(form_data))
    except ValueError as e:
        ustad_errors = [str(e)]
    if ustad_errors:
        return jsonify({'error': 'Please fix the ustad details', 'ustad_errors': ustad_errors}), 400

    result = submit_registration(form_data, files)
    if not result['success']:
        current_app.logger.error(f"Registration failed: {result['errors']}")
        return jsonify(result), 500

    current_app.logger.info(f"Registration submitted: {result['form_token']}")
    return jsonify(result), 201
