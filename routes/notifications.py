from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from utils.change_feed import list_notifications, mark_as_read, mark_all_as_read, clear_notifications
from utils.decorators import admin_required, handle_db_errors, get_current_admin

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('', methods=['GET'])
@admin_required
def get_notifications():
    """
    Change feed for the signed-in admin, newest first.

    Query params: ``since`` (ISO timestamp, for polling), ``include_own``
    (also list this admin's own changes) and ``limit``.
    """
    since = request.args.get('since')
    if since:
        try:
            since = datetime.fromisoformat(since)
        except ValueError:
            return jsonify({'error': 'since must be an ISO timestamp'}), 400
        if since.tzinfo is not None:
            since = since.astimezone(timezone.utc).replace(tzinfo=None)
    include_own = request.args.get('include_own', '').lower() in ('1', 'true')
    limit = request.args.get('limit', 50, type=int)

    notifications, unread_count = list_notifications(
        get_current_admin(), include_own=include_own, since=since or None, limit=limit
    )
    return jsonify({'notifications': notifications, 'unread_count': unread_count})


@notifications_bp.route('/<int:event_id>/read', methods=['POST'])
@admin_required
@handle_db_errors
def read_notification(event_id):
    if not mark_as_read(get_current_admin(), event_id):
        return jsonify({'error': 'Notification not found'}), 404
    return jsonify({'success': True})


@notifications_bp.route('/read-all', methods=['POST'])
@admin_required
@handle_db_errors
def read_all_notifications():
    marked = mark_all_as_read(get_current_admin())
    return jsonify({'success': True, 'marked': marked})


@notifications_bp.route('', methods=['DELETE'])
@admin_required
@handle_db_errors
def delete_notifications():
    clear_notifications(get_current_admin())
    return jsonify({'success': True})
