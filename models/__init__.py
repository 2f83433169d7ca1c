from .database import db
from .registration import Registration
from .file_upload import FileUpload
from .registration_event import RegistrationEvent

from .user import User, NotificationRead

__all__ = ['db', 'Registration', 'FileUpload', 'RegistrationEvent', 'User', 'NotificationRead']
