from models import db, Registration
from models.registration import STATUSES, DIVISIONS


def filter_registrations(status=None, division=None, search=None):
    """Registrations query with the dashboard filters applied, latest changes first."""
    query = Registration.query

    if status and status != 'all':
        if status not in STATUSES:
            raise ValueError(f'Invalid status: {status}')
        query = query.filter(Registration.status == status)

    if division and division != 'all':
        if division not in DIVISIONS:
            raise ValueError(f'Invalid division: {division}')
        query = query.filter(Registration.division == division)

    search = (search or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(
            db.or_(
                Registration.team_name.ilike(pattern),
                Registration.form_token.ilike(pattern),
                Registration.team_location.ilike(pattern),
                Registration.ustad_name.ilike(pattern),
            )
        )

    return query.order_by(Registration.updated_at.desc(), Registration.id.desc())


def get_recent_registrations(limit=10):
    return (
        Registration.query
        .order_by(Registration.submission_date_time.desc(), Registration.id.desc())
        .limit(limit)
        .all()
    )


def get_registration_by_token(form_token):
    return Registration.query.filter_by(form_token=form_token).first()


def get_registration(registration_id):
    return db.session.get(Registration, registration_id)
