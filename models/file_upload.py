from datetime import datetime
from .database import db


class FileUpload(db.Model):
    """Metadata for one document uploaded with a registration."""

    __tablename__ = 'file_uploads'

    id = db.Column(db.Integer, primary_key=True)
    registration_id = db.Column(db.Integer, db.ForeignKey('registrations.id'), nullable=False, index=True)
    file_type = db.Column(db.String(30), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)  # public URL
    file_name = db.Column(db.String(255), nullable=False)
    file_size = db.Column(db.Integer, nullable=True)
    mime_type = db.Column(db.String(100), nullable=True)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<FileUpload {self.file_type}: {self.file_name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'registration_id': self.registration_id,
            'file_type': self.file_type,
            'file_path': self.file_path,
            'file_name': self.file_name,
            'file_size': self.file_size,
            'mime_type': self.mime_type,
            'uploaded_at': self.uploaded_at.isoformat() if self.uploaded_at else None
        }
