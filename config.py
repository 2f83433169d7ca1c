import os
import dotenv
dotenv.load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))

# Flask configuration
SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-please-change-in-production'
DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

# Database configuration
if os.environ.get('DATABASE_URL'):
    SQLALCHEMY_DATABASE_URI = os.environ['DATABASE_URL']
elif os.environ.get('VERCEL'):
    # Vercel filesystem is read-only, use ephemeral /tmp
    SQLALCHEMY_DATABASE_URI = 'sqlite:////tmp/registrations.db'
else:
    SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(basedir, 'registrations.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

# File storage
UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'storage')
STORAGE_BUCKET = os.environ.get('STORAGE_BUCKET', 'jet-documents')
STORAGE_PUBLIC_URL = os.environ.get('STORAGE_PUBLIC_URL', '/storage')
SIGNED_URL_EXPIRES = int(os.environ.get('SIGNED_URL_EXPIRES', 7200))  # 2 hours
MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 25 * 1024 * 1024))
ALLOWED_UPLOAD_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp', '.heic', '.pdf'}

# Google OAuth Configuration
GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID', 'placeholder-client-id')
GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET', 'placeholder-client-secret')
GOOGLE_DISCOVERY_URL = "https://accounts.google.com/.well-known/openid-configuration"

# Who may sign in to the dashboard
ADMIN_EMAIL_DOMAIN = os.environ.get('ADMIN_EMAIL_DOMAIN', '')
ADMIN_EMAILS = {
    email.strip().lower()
    for email in os.environ.get('ADMIN_EMAILS', '').split(',')
    if email.strip()
}

# Dashboard
CITY_BREAKDOWN_MAX = int(os.environ.get('CITY_BREAKDOWN_MAX', 10))
DEFAULT_TREND_DAYS = int(os.environ.get('DEFAULT_TREND_DAYS', 90))
RECENT_REGISTRATIONS_LIMIT = 10
