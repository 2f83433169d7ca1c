"""
Registration submission: insert the record, upload its documents, attach the
file URLs and store per-file metadata.

Upload problems do not undo the registration; they are reported back in the
result message so the registrant still gets a form token.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from models import db, Registration, FileUpload
from utils.change_feed import record_event
from utils.file_storage import get_file_store, create_file_metadata
from utils.form_token import generate_form_token
from utils.form_transformer import transform_form_data_to_registration, extract_files_from_form_data

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = 'Registration submitted successfully!'
PARTIAL_SUCCESS_MESSAGE = 'Registration submitted successfully, but some files failed to upload: '
CREATE_FAILED_MESSAGE = 'Failed to create registration record'
FILE_URLS_FAILED_MESSAGE = 'Failed to attach uploaded files to the registration'
METADATA_FAILED_MESSAGE = 'Failed to save file metadata'
SUBMISSION_FAILED_MESSAGE = 'Registration submission failed'

_TOKEN_ATTEMPTS = 5


def _unused_form_token():
    for _ in range(_TOKEN_ATTEMPTS):
        token = generate_form_token()
        if Registration.query.filter_by(form_token=token).first() is None:
            return token
    return generate_form_token()


def _result(success, message, registration=None, errors=None):
    return {
        'success': success,
        'message': message,
        'registration_id': registration.id if registration is not None else None,
        'form_token': registration.form_token if registration is not None else None,
        'errors': errors or [],
    }


def _create_registration(form_data):
    registration = Registration(**transform_form_data_to_registration(form_data, _unused_form_token()))
    db.session.add(registration)
    db.session.flush()
    record_event(registration, 'new')
    db.session.commit()
    return registration


def _upload_files(registration, file_entries):
    """Upload one file at a time; returns (urls grouped by column, metadata rows, errors)."""
    store = get_file_store()
    file_groups = {}
    metadata = []
    errors = []

    for file_type, file in file_entries:
        logger.info('Uploading %s for %s', file_type, registration.form_token)
        url, error = store.upload_file(file, file_type)
        if url:
            metadata.append(create_file_metadata(file, file_type, url, registration.id))
            file_groups.setdefault(file_type, []).append(url)
        else:
            errors.append(f'{file_type}: {error}')

    return file_groups, metadata, errors


def submit_registration(form_data, files=None):
    """
    Run the whole submission for one wizard payload.

    ``files`` maps wizard file inputs to lists of uploaded files. Returns
    ``{'success', 'message', 'registration_id', 'form_token', 'errors'}``.
    """
    try:
        logger.info('Starting registration submission')
        try:
            registration = _create_registration(form_data)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error('Registration insertion failed: %s', e)
            return _result(False, CREATE_FAILED_MESSAGE, errors=[str(e)])

        logger.info('Registration created with ID: %s', registration.id)

        file_entries = extract_files_from_form_data(form_data, files or {})
        file_groups, metadata, errors = _upload_files(registration, file_entries)

        if file_groups:
            try:
                for column, urls in file_groups.items():
                    setattr(registration, column, urls)
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error('Attaching file URLs failed: %s', e)
                errors.append(FILE_URLS_FAILED_MESSAGE)

        if metadata:
            logger.info('Inserting %d file records', len(metadata))
            try:
                db.session.add_all(FileUpload(**row) for row in metadata)
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.warning('File metadata insertion failed: %s', e)
                errors.append(METADATA_FAILED_MESSAGE)

        if errors:
            message = PARTIAL_SUCCESS_MESSAGE + ', '.join(errors)
        else:
            message = SUCCESS_MESSAGE

        logger.info('Registration submission completed: %s', registration.form_token)
        return _result(True, message, registration, errors)

    except Exception as e:
        db.session.rollback()
        logger.exception('Registration submission failed')
        return _result(False, SUBMISSION_FAILED_MESSAGE, errors=[str(e)])
