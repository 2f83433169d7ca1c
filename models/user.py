from datetime import datetime
from .database import db

class User(db.Model):
    """Dashboard administrator signed in through Google OAuth."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    google_id = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    display_name = db.Column(db.String(100))
    phone = db.Column(db.String(40))
    profile_pic = db.Column(db.String(200))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login_at = db.Column(db.DateTime)
    notifications_cleared_at = db.Column(db.DateTime)

    # Notifications this admin has read
    read_notifications = db.relationship('NotificationRead', backref='user', lazy='dynamic', cascade="all, delete-orphan")

    def __repr__(self):
        return f'<User {self.email}>'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'display_name': self.display_name,
            'phone': self.phone,
            'profile_pic': self.profile_pic,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_login_at': self.last_login_at.isoformat() if self.last_login_at else None
        }


class NotificationRead(db.Model):
    """Marks a change-feed event as read by one admin."""
    __tablename__ = 'notification_reads'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('registration_events.id'), primary_key=True)
    read_at = db.Column(db.DateTime, default=datetime.utcnow)
