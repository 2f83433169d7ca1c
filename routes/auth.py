from datetime import datetime

from flask import Blueprint, url_for, session, redirect, jsonify, request, current_app
from authlib.integrations.flask_client import OAuth
from authlib.integrations.base_client import OAuthError

from models import db, User
from utils.decorators import admin_required, get_current_admin, handle_db_errors, is_admin_email

auth_bp = Blueprint('auth', __name__)
oauth = OAuth()

MAX_DISPLAY_NAME_LENGTH = 100


def init_oauth(app):
    oauth.init_app(app)
    oauth.register(
        name='google',
        client_id=app.config['GOOGLE_CLIENT_ID'],
        client_secret=app.config['GOOGLE_CLIENT_SECRET'],
        server_metadata_url=app.config['GOOGLE_DISCOVERY_URL'],
        client_kwargs={
            'scope': 'openid email profile'
        }
    )


@auth_bp.route('/login')
def login():
    redirect_uri = url_for('auth.callback', _external=True)
    domain = current_app.config.get('ADMIN_EMAIL_DOMAIN')
    if domain:
        return oauth.google.authorize_redirect(redirect_uri, hd=domain)
    return oauth.google.authorize_redirect(redirect_uri)


@auth_bp.route('/logout')
def logout():
    session.pop('user_id', None)
    return redirect(url_for('main.index'))


@auth_bp.route('/callback')
def callback():
    try:
        token = oauth.google.authorize_access_token()
    except OAuthError as e:
        current_app.logger.error(f"OAuth Error: {e}")
        return jsonify({'error': 'Authentication failed. Please try again.'}), 401

    user_info = token.get('userinfo')
    if not user_info:
        return jsonify({'error': 'Failed to fetch user info from Google.'}), 401

    email = (user_info.get('email') or '').lower()

    # Dashboard access is limited to the configured admins
    if not is_admin_email(email):
        current_app.logger.warning(f"Rejected dashboard login for {email}")
        return jsonify({'error': 'This account is not allowed to use the dashboard.'}), 403

    user = User.query.filter_by(google_id=user_info['sub']).first()
    if not user:
        user = User(
            google_id=user_info['sub'],
            email=email,
            name=user_info.get('name', ''),
            profile_pic=user_info.get('picture', '')
        )
        db.session.add(user)
    else:
        user.email = email
        user.name = user_info.get('name', user.name)
        user.profile_pic = user_info.get('picture', user.profile_pic)
    user.last_login_at = datetime.utcnow()
    db.session.commit()

    session['user_id'] = user.id
    current_app.logger.info(f"Admin logged in: {email}")
    return redirect(url_for('main.index'))


@auth_bp.route('/me')
@admin_required
def me():
    return jsonify({'user': get_current_admin().to_dict()})


@auth_bp.route('/profile', methods=['PUT'])
@admin_required
@handle_db_errors
def update_profile():
    """Update the admin's display name and phone number."""
    data = request.get_json(silent=True) or {}
    user = get_current_admin()

    if 'display_name' in data:
        display_name = (data['display_name'] or '').strip()
        if len(display_name) > MAX_DISPLAY_NAME_LENGTH:
            return jsonify({'error': f'display_name must be at most {MAX_DISPLAY_NAME_LENGTH} characters'}), 400
        user.display_name = display_name or None

    if 'phone' in data:
        user.phone = (data['phone'] or '').strip() or None

    db.session.commit()
    return jsonify({'success': True, 'user': user.to_dict()})
