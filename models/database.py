from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

def init_app(app):
    db.init_app(app)
    # Import models to register them with SQLAlchemy
    from .registration import Registration
    from .file_upload import FileUpload
    from .registration_event import RegistrationEvent
    from .user import User, NotificationRead
