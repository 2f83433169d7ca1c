from datetime import datetime
from .database import db


STATUSES = (
    'new submission',
    'in review',
    'information requested',
    'updated information',
    'approved',
    'denied',
    'dropped',
)

# Statuses that still need an admin decision
PENDING_STATUSES = ('new submission', 'in review', 'information requested')

DIVISIONS = ('Junior Kaurs', 'Junior Singhs', 'Open Kaurs', 'Open Singhs')

TEAM_FIELDS = [
    'division',
    'team_name',
    'ustad_name',
    'ustad_email',
    'coach_name',
    'coach_email',
    'team_location',
    'player_order',
    'team_photo',
]

PLAYER_PREFIXES = ('player1', 'player2', 'player3', 'backup')

PLAYER_FIELD_SUFFIXES = [
    'name',
    'singh_kaur',
    'dob',
    'dob_proof',
    'email',
    'phone_number',
    'emergency_contact_name',
    'emergency_contact_phone',
    'father_name',
    'mother_name',
    'city',
    'gatka_experience',
]

BACKUP_FIELDS = ['backup_player'] + [f'backup_{suffix}' for suffix in PLAYER_FIELD_SUFFIXES]

# Every field that carries a <field>_needs_update flag, in display order
TRACKED_FIELDS = (
    TEAM_FIELDS
    + [f'{prefix}_{suffix}' for prefix in PLAYER_PREFIXES[:3] for suffix in PLAYER_FIELD_SUFFIXES]
    + BACKUP_FIELDS
)

# Columns holding lists of uploaded file URLs
FILE_FIELDS = ['team_photo'] + [f'{prefix}_dob_proof' for prefix in PLAYER_PREFIXES]

_SUFFIX_LABELS = {
    'name': 'Name',
    'singh_kaur': 'Singh/Kaur',
    'dob': 'Date of Birth',
    'dob_proof': 'DOB Proof',
    'email': 'Email',
    'phone_number': 'Phone',
    'emergency_contact_name': 'Emergency Contact Name',
    'emergency_contact_phone': 'Emergency Contact Phone',
    'father_name': 'Father Name',
    'mother_name': 'Mother Name',
    'city': 'City',
    'gatka_experience': 'Gatka Experience',
}

FIELD_DISPLAY_NAMES = {
    'division': 'Division',
    'team_name': 'Team Name',
    'ustad_name': 'Ustad Name',
    'ustad_email': 'Ustad Email',
    'coach_name': 'Senior Gatkai Coach',
    'coach_email': 'Senior Gatkai Coach Email',
    'team_location': 'Team Location',
    'player_order': 'Player Order',
    'team_photo': 'Team Photos',
    'backup_player': 'Has Backup Player',
}
for _prefix, _owner in zip(PLAYER_PREFIXES, ('Player 1', 'Player 2', 'Player 3', 'Backup Player')):
    for _suffix, _label in _SUFFIX_LABELS.items():
        FIELD_DISPLAY_NAMES[f'{_prefix}_{_suffix}'] = f'{_label} ({_owner})'


def needs_update_column(field):
    """Name of the flag column for a tracked field."""
    return f'{field}_needs_update'


class Registration(db.Model):
    """A team's tournament registration: team info, three players and an optional backup."""

    __tablename__ = 'registrations'

    id = db.Column(db.Integer, primary_key=True)
    form_token = db.Column(db.String(20), unique=True, nullable=False, index=True)
    status = db.Column(db.String(30), nullable=False, default='new submission', index=True)
    submission_date_time = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # Team
    division = db.Column(db.String(30), nullable=False, index=True)
    team_name = db.Column(db.String(200), nullable=False)
    ustad_name = db.Column(db.String(300))
    ustad_email = db.Column(db.String(200))
    ustads = db.Column(db.JSON)  # [{'name': ..., 'email': ...}]
    coach_name = db.Column(db.String(200))
    coach_email = db.Column(db.String(200))
    team_location = db.Column(db.String(300), nullable=False, default='')
    player_order = db.Column(db.String(600))
    team_photo = db.Column(db.JSON)

    # Player 1
    player1_name = db.Column(db.String(200))
    player1_singh_kaur = db.Column(db.String(10))
    player1_dob = db.Column(db.String(10))  # YYYY-MM-DD
    player1_dob_proof = db.Column(db.JSON)
    player1_email = db.Column(db.String(200))
    player1_phone_number = db.Column(db.String(40))
    player1_emergency_contact_name = db.Column(db.String(200))
    player1_emergency_contact_phone = db.Column(db.String(40))
    player1_father_name = db.Column(db.String(200))
    player1_mother_name = db.Column(db.String(200))
    player1_city = db.Column(db.String(200))
    player1_gatka_experience = db.Column(db.String(50))

    # Player 2
    player2_name = db.Column(db.String(200))
    player2_singh_kaur = db.Column(db.String(10))
    player2_dob = db.Column(db.String(10))
    player2_dob_proof = db.Column(db.JSON)
    player2_email = db.Column(db.String(200))
    player2_phone_number = db.Column(db.String(40))
    player2_emergency_contact_name = db.Column(db.String(200))
    player2_emergency_contact_phone = db.Column(db.String(40))
    player2_father_name = db.Column(db.String(200))
    player2_mother_name = db.Column(db.String(200))
    player2_city = db.Column(db.String(200))
    player2_gatka_experience = db.Column(db.String(50))

    # Player 3
    player3_name = db.Column(db.String(200))
    player3_singh_kaur = db.Column(db.String(10))
    player3_dob = db.Column(db.String(10))
    player3_dob_proof = db.Column(db.JSON)
    player3_email = db.Column(db.String(200))
    player3_phone_number = db.Column(db.String(40))
    player3_emergency_contact_name = db.Column(db.String(200))
    player3_emergency_contact_phone = db.Column(db.String(40))
    player3_father_name = db.Column(db.String(200))
    player3_mother_name = db.Column(db.String(200))
    player3_city = db.Column(db.String(200))
    player3_gatka_experience = db.Column(db.String(50))

    # Backup player (only filled when backup_player is set at submission)
    backup_player = db.Column(db.Boolean, nullable=False, default=False)
    backup_name = db.Column(db.String(200))
    backup_singh_kaur = db.Column(db.String(10))
    backup_dob = db.Column(db.String(10))
    backup_dob_proof = db.Column(db.JSON)
    backup_email = db.Column(db.String(200))
    backup_phone_number = db.Column(db.String(40))
    backup_emergency_contact_name = db.Column(db.String(200))
    backup_emergency_contact_phone = db.Column(db.String(40))
    backup_father_name = db.Column(db.String(200))
    backup_mother_name = db.Column(db.String(200))
    backup_city = db.Column(db.String(200))
    backup_gatka_experience = db.Column(db.String(50))

    # Fields the admin asked the registrant to correct
    division_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    team_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    ustad_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    ustad_email_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    coach_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    coach_email_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    team_location_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player_order_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    team_photo_needs_update = db.Column(db.Boolean, nullable=False, default=False)

    player1_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_singh_kaur_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_dob_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_dob_proof_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_email_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_phone_number_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_emergency_contact_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_emergency_contact_phone_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_father_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_mother_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_city_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player1_gatka_experience_needs_update = db.Column(db.Boolean, nullable=False, default=False)

    player2_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_singh_kaur_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_dob_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_dob_proof_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_email_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_phone_number_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_emergency_contact_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_emergency_contact_phone_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_father_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_mother_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_city_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player2_gatka_experience_needs_update = db.Column(db.Boolean, nullable=False, default=False)

    player3_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_singh_kaur_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_dob_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_dob_proof_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_email_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_phone_number_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_emergency_contact_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_emergency_contact_phone_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_father_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_mother_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_city_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    player3_gatka_experience_needs_update = db.Column(db.Boolean, nullable=False, default=False)

    backup_player_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_singh_kaur_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_dob_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_dob_proof_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_email_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_phone_number_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_emergency_contact_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_emergency_contact_phone_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_father_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_mother_name_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_city_needs_update = db.Column(db.Boolean, nullable=False, default=False)
    backup_gatka_experience_needs_update = db.Column(db.Boolean, nullable=False, default=False)

    # Admin review: {'internal_notes': str|None, 'requested_updates': [...], 'parked_backup_updates': [...]}
    admin_notes = db.Column(db.JSON)

    # 'registrant' or 'admin:<email>'
    last_modified_by = db.Column(db.String(220), default='registrant')

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)

    # Relationship to uploaded files
    files = db.relationship('FileUpload', backref='registration', lazy='dynamic', cascade="all, delete-orphan")

    def __repr__(self):
        return f'<Registration {self.form_token}: {self.team_name}>'

    @property
    def player_count(self):
        """Three main players plus the backup, when there is one."""
        return 3 + (1 if self.backup_player else 0)

    @property
    def requested_updates(self):
        notes = self.admin_notes or {}
        return list(notes.get('requested_updates') or [])

    def flagged_fields(self):
        """Tracked fields whose needs_update flag is set, in display order."""
        return [field for field in TRACKED_FIELDS if getattr(self, needs_update_column(field))]

    def editable_fields(self):
        """Fields the registrant may change through the portal right now."""
        if self.status != 'information requested':
            return []
        return self.flagged_fields()

    def to_dict(self):
        data = {
            'id': self.id,
            'form_token': self.form_token,
            'status': self.status,
            'submission_date_time': _isoformat(self.submission_date_time),
            'ustads': self.ustads or [],
            'admin_notes': self.admin_notes,
            'last_modified_by': self.last_modified_by,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }
        for field in TRACKED_FIELDS:
            data[field] = getattr(self, field)
            data[needs_update_column(field)] = getattr(self, needs_update_column(field))
        return data

    def to_summary_dict(self):
        """Condensed listing row used by the dashboard tables."""
        return {
            'id': self.id,
            'form_token': self.form_token,
            'status': self.status,
            'submission_date_time': _isoformat(self.submission_date_time),
            'division': self.division,
            'team_name': self.team_name,
            'ustad_name': self.ustad_name,
            'ustad_email': self.ustad_email,
            'coach_name': self.coach_name,
            'coach_email': self.coach_email,
            'team_location': self.team_location,
            'player_order': self.player_order,
            'backup_player': self.backup_player,
            'admin_notes': self.admin_notes,
            'team_photos_count': len(self.team_photo or []),
            'dob_proofs_count': sum(
                len(getattr(self, f'{prefix}_dob_proof') or []) for prefix in PLAYER_PREFIXES
            ),
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

    def to_public_dict(self):
        """What the registrant sees in the portal: no internal notes."""
        data = self.to_dict()
        data.pop('last_modified_by')
        notes = self.admin_notes or {}
        data['admin_notes'] = {'requested_updates': notes.get('requested_updates') or []}
        data['editable_fields'] = self.editable_fields()
        return data


def _isoformat(value):
    return value.isoformat() if value else None
