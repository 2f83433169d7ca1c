from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models import db

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Service info and the main entry points."""
    return jsonify({
        'name': 'Jauhr-e-Teg registrations',
        'register': '/api/register',
        'portal': '/api/portal/lookup',
        'dashboard': '/api/admin/registrations',
    })


@main_bp.route('/health')
def health():
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        return jsonify({'status': 'error', 'database': str(e)}), 503
    return jsonify({'status': 'ok'})
