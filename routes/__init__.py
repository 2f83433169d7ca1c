from .main import main_bp
from .auth import auth_bp
from .register import register_bp
from .portal import portal_bp
from .admin import admin_bp
from .notifications import notifications_bp
from .files import files_bp

__all__ = ['main_bp', 'auth_bp', 'register_bp', 'portal_bp', 'admin_bp', 'notifications_bp', 'files_bp']
