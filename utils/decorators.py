"""
Route decorators: admin access control and database error handling.
"""

import logging
from functools import wraps

from flask import session, redirect, url_for, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db, User
from models.registration_event import admin_actor

logger = logging.getLogger(__name__)


def _wants_json():
    return request.is_json or request.path.startswith('/api/')


def is_admin_email(email):
    """Whether an email may use the dashboard (explicit list or whole domain)."""
    email = (email or '').strip().lower()
    if not email:
        return False
    if email in current_app.config.get('ADMIN_EMAILS', set()):
        return True
    domain = current_app.config.get('ADMIN_EMAIL_DOMAIN')
    return bool(domain) and email.endswith('@' + domain.lower())


def get_current_admin():
    """Signed-in admin for this request, or None."""
    user_id = session.get('user_id')
    user = db.session.get(User, user_id) if user_id else None
    if user is not None and not is_admin_email(user.email):
        return None
    return user


def get_admin_user_name(user):
    """Name shown in the feed: display name, then Google name, then email."""
    if user is None:
        return None
    return user.display_name or user.name or user.email


def current_actor():
    return admin_actor(get_current_admin().email)


def admin_required(f):
    """Only signed-in admins; API callers get 401, browsers go to the login page."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_current_admin() is None:
            if _wants_json():
                return jsonify({'error': 'Authentication required'}), 401
            return redirect(url_for('auth.login', next=request.url))
        return f(*args, **kwargs)
    return decorated_function


def handle_db_errors(f):
    """Roll back and answer 500 when the database raises."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error('Database error in %s: %s', request.path, e)
            return jsonify({'error': 'Database operation failed, please try again'}), 500

    return decorated_function
