"""Admin dashboard API: registration review, edits and aggregate statistics."""

import csv
import io
from datetime import datetime

from flask import Blueprint, jsonify, request, current_app, Response

from models import db, Registration
from models.registration import FIELD_DISPLAY_NAMES, PLAYER_PREFIXES, STATUSES, DIVISIONS, TRACKED_FIELDS, needs_update_column
from utils.change_feed import record_event
from utils.decorators import admin_required, handle_db_errors, current_actor, get_current_admin, get_admin_user_name
from utils.file_storage import get_file_store
from utils.needs_update import apply_admin_update, get_admin_notes, set_needs_update, set_backup_player, InvalidFieldValue
from utils.registration_queries import filter_registrations, get_recent_registrations, get_registration
from utils.stats import (
    dashboard_stats,
    group_registrations,
    limit_city_breakdown,
    location_breakdown,
    registration_trends,
    trend_summary,
    TREND_DAY_OPTIONS,
)
from utils.ustads import format_ustads_for_csv

admin_bp = Blueprint('admin', __name__)

CSV_COLUMNS = [
    ('form_token', 'Form Token'),
    ('status', 'Status'),
    ('submission_date_time', 'Submitted'),
    ('division', 'Division'),
    ('team_name', 'Team Name'),
    ('team_location', 'Team Location'),
    ('ustads', 'Ustads'),
    ('coach_name', 'Senior Gatkai Coach'),
    ('coach_email', 'Senior Gatkai Coach Email'),
    ('player_order', 'Player Order'),
] + [
    (f'{prefix}_{suffix}', FIELD_DISPLAY_NAMES[f'{prefix}_{suffix}'])
    for prefix in PLAYER_PREFIXES
    for suffix in ('name', 'singh_kaur', 'dob', 'email', 'phone_number', 'city', 'gatka_experience')
] + [
    ('backup_player', 'Has Backup Player'),
]


@admin_bp.before_request
@admin_required
def require_admin():
    """Every dashboard endpoint needs a signed-in admin."""
    return None


def _record_admin_change(registration, changed_fields):
    record_event(
        registration,
        'updated',
        actor=current_actor(),
        actor_name=get_admin_user_name(get_current_admin()),
        changed_fields=changed_fields,
    )


def _load_or_404(registration_id):
    registration = get_registration(registration_id)
    if registration is None:
        return None, (jsonify({'error': 'Registration not found'}), 404)
    return registration, None


def _filtered_registrations():
    return filter_registrations(
        status=request.args.get('status'),
        division=request.args.get('division'),
        search=request.args.get('search'),
    ).all()


@admin_bp.route('/registrations')
def list_registrations():
    """Filtered registrations, optionally grouped by status, division or location."""
    try:
        registrations = _filtered_registrations()
        group_by = request.args.get('group_by', 'none')
        groups = group_registrations(registrations, group_by)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    summary = request.args.get('summary', '').lower() in ('1', 'true')
    serialize = Registration.to_summary_dict if summary else Registration.to_dict

    return jsonify({
        'registrations': [serialize(registration) for registration in registrations],
        'count': len(registrations),
        'groups': [
            {'label': label, 'count': len(members), 'ids': [member.id for member in members]}
            for label, members in groups.items()
        ],
    })


@admin_bp.route('/registrations/recent')
def recent_registrations():
    limit = request.args.get('limit', current_app.config['RECENT_REGISTRATIONS_LIMIT'], type=int)
    registrations = get_recent_registrations(limit)
    return jsonify({'registrations': [registration.to_summary_dict() for registration in registrations]})


@admin_bp.route('/registrations/export.csv')
def export_registrations():
    """CSV download of the registrations matching the current filters."""
    try:
        registrations = _filtered_registrations()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([label for _, label in CSV_COLUMNS])
    for registration in registrations:
        row = []
        for column, _ in CSV_COLUMNS:
            value = getattr(registration, column)
            if column == 'ustads':
                value = format_ustads_for_csv(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, bool):
                value = 'Yes' if value else 'No'
            row.append('' if value is None else value)
        writer.writerow(row)

    filename = f'registrations-{datetime.utcnow():%Y-%m-%d}.csv'
    return Response(
        output.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@admin_bp.route('/registrations/<int:registration_id>')
def get_registration_detail(registration_id):
    registration, error = _load_or_404(registration_id)
    if error:
        return error
    return jsonify({
        'registration': registration.to_dict(),
        'files': [upload.to_dict() for upload in registration.files.all()],
        'field_labels': FIELD_DISPLAY_NAMES,
    })


@admin_bp.route('/registrations/<int:registration_id>', methods=['PATCH'])
@handle_db_errors
def save_registration(registration_id):
    """Full save from the detail editor; only changed fields are written."""
    registration, error = _load_or_404(registration_id)
    if error:
        return error

    updates = request.get_json(silent=True)
    if not isinstance(updates, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        changed = apply_admin_update(registration, updates)
    except InvalidFieldValue as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    if changed:
        _record_admin_change(registration, changed)
        db.session.commit()
        current_app.logger.info(f"Registration {registration.form_token} saved: {', '.join(changed)}")

    return jsonify({'success': True, 'changed_fields': changed, 'registration': registration.to_dict()})


@admin_bp.route('/registrations/<int:registration_id>/status', methods=['PUT'])
@handle_db_errors
def update_status(registration_id):
    registration, error = _load_or_404(registration_id)
    if error:
        return error

    status = (request.get_json(silent=True) or {}).get('status')
    if status not in STATUSES:
        return jsonify({'error': f'Invalid status: {status}'}), 400

    if registration.status != status:
        previous = registration.status
        registration.status = status
        _record_admin_change(registration, ['status'])
        db.session.commit()
        current_app.logger.info(f"Registration {registration.form_token} status: {previous} -> {status}")

    return jsonify({'success': True, 'registration': registration.to_dict()})


@admin_bp.route('/registrations/<int:registration_id>/division', methods=['PUT'])
@handle_db_errors
def update_division(registration_id):
    registration, error = _load_or_404(registration_id)
    if error:
        return error

    division = (request.get_json(silent=True) or {}).get('division')
    if division not in DIVISIONS:
        return jsonify({'error': f'Invalid division: {division}'}), 400

    if registration.division != division:
        registration.division = division
        _record_admin_change(registration, ['division'])
        db.session.commit()
        current_app.logger.info(f"Registration {registration.form_token} division: {division}")

    return jsonify({'success': True, 'registration': registration.to_dict()})


@admin_bp.route('/registrations/<int:registration_id>/requested-updates', methods=['PUT'])
@handle_db_errors
def update_requested_field(registration_id):
    """Ask (or stop asking) the registrant to correct one field."""
    registration, error = _load_or_404(registration_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    field = data.get('field')
    if 'needs_update' not in data:
        return jsonify({'error': 'needs_update is required'}), 400

    if field in TRACKED_FIELDS and bool(getattr(registration, needs_update_column(field))) == bool(data['needs_update']):
        requested = get_admin_notes(registration)['requested_updates']
        return jsonify({'success': True, 'requested_updates': requested, 'registration': registration.to_dict()})

    try:
        requested = set_needs_update(registration, field, data['needs_update'])
    except InvalidFieldValue as e:
        return jsonify({'error': str(e)}), 400

    _record_admin_change(registration, [needs_update_column(field)])
    db.session.commit()
    return jsonify({'success': True, 'requested_updates': requested, 'registration': registration.to_dict()})


@admin_bp.route('/registrations/<int:registration_id>/backup-player', methods=['PUT'])
@handle_db_errors
def update_backup_player(registration_id):
    registration, error = _load_or_404(registration_id)
    if error:
        return error

    value = (request.get_json(silent=True) or {}).get('backup_player')
    if not isinstance(value, bool):
        return jsonify({'error': 'backup_player must be true or false'}), 400

    if set_backup_player(registration, value):
        _record_admin_change(registration, ['backup_player'])
        db.session.commit()

    return jsonify({'success': True, 'registration': registration.to_dict()})


@admin_bp.route('/stats')
def stats():
    registrations = Registration.query.all()
    data = dashboard_stats(registrations, max_cities=current_app.config['CITY_BREAKDOWN_MAX'])
    data['recent_registrations'] = [
        registration.to_summary_dict()
        for registration in get_recent_registrations(current_app.config['RECENT_REGISTRATIONS_LIMIT'])
    ]
    return jsonify(data)


@admin_bp.route('/stats/locations')
def location_stats():
    max_cities = request.args.get('max_cities', current_app.config['CITY_BREAKDOWN_MAX'], type=int)
    if max_cities is None or max_cities < 1:
        return jsonify({'error': 'max_cities must be a positive integer'}), 400

    locations = [location for (location,) in db.session.query(Registration.team_location).all()]
    return jsonify({'cities': limit_city_breakdown(location_breakdown(locations), max_cities=max_cities)})


@admin_bp.route('/stats/trends')
def trend_stats():
    days = request.args.get('days', current_app.config['DEFAULT_TREND_DAYS'], type=int)
    if days not in TREND_DAY_OPTIONS:
        return jsonify({'error': f'days must be one of {", ".join(map(str, TREND_DAY_OPTIONS))}'}), 400

    timestamps = [
        submitted for (submitted,) in db.session.query(Registration.submission_date_time).all()
    ]
    rows = registration_trends(timestamps, days)
    return jsonify({'trends': rows, 'summary': trend_summary(rows)})


@admin_bp.route('/files/signed-url')
def signed_file_url():
    """Short-lived link for previewing an uploaded document."""
    store = get_file_store()
    key = request.args.get('key') or store.key_from_url(request.args.get('url'))
    if not key:
        return jsonify({'error': 'A storage key or one of our file URLs is required'}), 400

    expires_in = request.args.get('expires_in', store.signed_url_expires, type=int)
    return jsonify({'signed_url': store.create_signed_url(key, expires_in), 'expires_in': expires_in})
