from datetime import datetime
from .database import db


REGISTRANT_ACTOR = 'registrant'


def admin_actor(email):
    """Actor id stored for changes made from the dashboard."""
    return f'admin:{email.lower()}'


class RegistrationEvent(db.Model):
    """One entry of the registration change feed shown as dashboard notifications."""

    __tablename__ = 'registration_events'

    id = db.Column(db.Integer, primary_key=True)
    registration_id = db.Column(db.Integer, db.ForeignKey('registrations.id'), nullable=False, index=True)
    event_type = db.Column(db.String(10), nullable=False)  # new, updated
    actor = db.Column(db.String(220), nullable=False, default=REGISTRANT_ACTOR)
    actor_name = db.Column(db.String(200))
    form_token = db.Column(db.String(20), nullable=False)
    team_name = db.Column(db.String(200))
    changed_fields = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    registration = db.relationship('Registration', backref=db.backref('events', lazy='dynamic'))

    def __repr__(self):
        return f'<RegistrationEvent {self.event_type} {self.form_token} by {self.actor}>'

    def to_dict(self):
        return {
            'id': self.id,
            'registration_id': self.registration_id,
            'type': self.event_type,
            'actor': self.actor,
            'actor_name': self.actor_name,
            'form_token': self.form_token,
            'team_name': self.team_name,
            'changed_fields': self.changed_fields or [],
            'timestamp': self.created_at.isoformat() if self.created_at else None
        }
