"""
Registration change feed behind the dashboard notifications.

Every mutation records who made it (``registrant`` or ``admin:<email>``) on
the registration and on a feed event, so the dashboard can tell an admin's
own saves apart from registrant activity without guessing.
"""

import logging
from datetime import datetime

from models import db, RegistrationEvent, NotificationRead
from models.registration_event import REGISTRANT_ACTOR, admin_actor

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 50


def record_event(registration, event_type, actor=REGISTRANT_ACTOR, actor_name=None, changed_fields=None):
    """Stamp the registration with its last modifier and add a feed event (not committed)."""
    registration.last_modified_by = actor
    event = RegistrationEvent(
        registration_id=registration.id,
        event_type=event_type,
        actor=actor,
        actor_name=actor_name,
        form_token=registration.form_token,
        team_name=registration.team_name,
        changed_fields=list(changed_fields or []),
    )
    db.session.add(event)
    logger.info('Registration %s %s by %s', registration.form_token, event_type, actor)
    return event


def list_notifications(user, include_own=False, since=None, limit=DEFAULT_FEED_LIMIT):
    """
    Feed events for one admin, newest first.

    Returns ``(notifications, unread_count)``; each notification is the event
    dict plus ``read`` and ``is_own``. Events the admin made are left out
    unless ``include_own`` is set; events before the admin's last "clear" are
    never shown.
    """
    own_actor = admin_actor(user.email)
    query = RegistrationEvent.query
    if not include_own:
        query = query.filter(RegistrationEvent.actor != own_actor)
    if user.notifications_cleared_at:
        query = query.filter(RegistrationEvent.created_at > user.notifications_cleared_at)

    read_ids = {
        row.event_id for row in NotificationRead.query.filter_by(user_id=user.id).all()
    }
    unread_count = sum(
        1 for (event_id,) in query.with_entities(RegistrationEvent.id).all()
        if event_id not in read_ids
    )

    if since is not None:
        query = query.filter(RegistrationEvent.created_at > since)
    events = query.order_by(RegistrationEvent.created_at.desc(), RegistrationEvent.id.desc()).limit(limit).all()

    notifications = []
    for event in events:
        item = event.to_dict()
        item['read'] = event.id in read_ids
        item['is_own'] = event.actor == own_actor
        notifications.append(item)
    return notifications, unread_count


def mark_as_read(user, event_id):
    """Mark one event read for the admin; returns False for an unknown event."""
    if db.session.get(RegistrationEvent, event_id) is None:
        return False
    if db.session.get(NotificationRead, (user.id, event_id)) is None:
        db.session.add(NotificationRead(user_id=user.id, event_id=event_id))
    db.session.commit()
    return True


def mark_all_as_read(user):
    read_ids = {row.event_id for row in NotificationRead.query.filter_by(user_id=user.id).all()}
    query = RegistrationEvent.query
    if user.notifications_cleared_at:
        query = query.filter(RegistrationEvent.created_at > user.notifications_cleared_at)
    new_reads = [
        NotificationRead(user_id=user.id, event_id=event_id)
        for (event_id,) in query.with_entities(RegistrationEvent.id).all()
        if event_id not in read_ids
    ]
    db.session.add_all(new_reads)
    db.session.commit()
    return len(new_reads)


def clear_notifications(user):
    """Hide everything currently in the admin's feed."""
    user.notifications_cleared_at = datetime.utcnow()
    NotificationRead.query.filter_by(user_id=user.id).delete()
    db.session.commit()
