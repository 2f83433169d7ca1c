"""
Document storage for registration uploads.

Objects live under ``<UPLOAD_FOLDER>/<key>`` where the key follows
``jet-documents/jet-<year>/{team-photos|dob-proof}/<timestamp>_<random>_<name>``.
Public URLs point at ``STORAGE_PUBLIC_URL/<key>``; signed URLs carry an
itsdangerous token that expires after ``SIGNED_URL_EXPIRES`` seconds.
"""

import logging
import os
import re
import secrets
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

from flask import current_app
from itsdangerous import URLSafeTimedSerializer, SignatureExpired
from werkzeug.security import safe_join

logger = logging.getLogger(__name__)

_RANDOM_ALPHABET = 'abcdefghijklmnopqrstuvwxyz0123456789'
_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9.-]')


def generate_unique_file_name(original_name, timestamp_ms=None):
    """Storage name: {ms timestamp}_{6 random chars}_{sanitised original name}."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    random_part = ''.join(secrets.choice(_RANDOM_ALPHABET) for _ in range(6))
    sanitized = _UNSAFE_CHARS.sub('_', original_name or 'file')
    return f'{timestamp_ms}_{random_part}_{sanitized}'


def get_storage_path(file_type, bucket='jet-documents', year=None):
    """Folder (with trailing slash) a file type is stored in for the given year."""
    if year is None:
        year = datetime.utcnow().year

    if file_type == 'team_photo':
        return f'{bucket}/jet-{year}/team-photos/'
    if 'dob_proof' in file_type:
        return f'{bucket}/jet-{year}/dob-proof/'

    raise ValueError(f'Unknown file type: {file_type}')


def _file_size(file):
    stream = getattr(file, 'stream', None)
    if stream is None:
        return None
    position = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(position)
    return size


class FileStore:
    """Local object store with public and signed URLs."""

    def __init__(self, root, bucket, public_url, secret_key, signed_url_expires=7200,
                 allowed_extensions=None):
        self.root = root
        self.bucket = bucket
        self.public_url = public_url.rstrip('/')
        self.signed_url_expires = signed_url_expires
        self.allowed_extensions = allowed_extensions
        self._serializer = URLSafeTimedSerializer(secret_key, salt='storage-signed-url')

    def absolute_path(self, key):
        path = safe_join(self.root, key)
        if path is None:
            raise ValueError(f'Invalid storage key: {key}')
        return path

    def get_public_url(self, key):
        return f'{self.public_url}/{key}'

    def key_from_url(self, url):
        """Storage key for one of our public URLs, or None for anything else."""
        prefix = f'{self.public_url}/'
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    def upload_file(self, file, file_type):
        """
        Store one uploaded file.

        Returns ``(url, None)`` on success or ``(None, error_message)``.
        """
        try:
            extension = os.path.splitext(file.filename or '')[1].lower()
            if self.allowed_extensions and extension not in self.allowed_extensions:
                return None, f'File type {extension or "(none)"} is not allowed'

            key = get_storage_path(file_type, self.bucket) + generate_unique_file_name(file.filename)
            path = self.absolute_path(key)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            logger.info('Uploading file to: %s', key)
            file.save(path)
        except (OSError, ValueError) as e:
            logger.error('File upload failed: %s', e)
            return None, str(e)

        url = self.get_public_url(key)
        logger.info('File uploaded successfully: %s', url)
        return url, None

    def upload_multiple_files(self, files, file_type):
        """Upload a batch concurrently; returns ``(urls, errors)``."""
        logger.info('Uploading %d files of type: %s', len(files), file_type)
        if not files:
            return [], []

        with ThreadPoolExecutor(max_workers=min(4, len(files))) as executor:
            results = list(executor.map(lambda f: self.upload_file(f, file_type), files))

        urls = []
        errors = []
        for index, (url, error) in enumerate(results, start=1):
            if url:
                urls.append(url)
            else:
                errors.append(f'File {index}: {error}')

        logger.info('Uploaded %d/%d files successfully', len(urls), len(files))
        return urls, errors

    def create_signed_url(self, key, expires_in=None):
        """Time-limited URL for a stored object, for dashboard previews."""
        if expires_in is None:
            expires_in = self.signed_url_expires
        token = self._serializer.dumps({'key': key, 'expires_in': expires_in})
        return f'{self.public_url}/signed/{token}'

    def resolve_signed_token(self, token):
        """
        Storage key for a signed URL token.

        Raises ``itsdangerous.BadSignature`` (or its ``SignatureExpired``
        subclass) when the token is forged or too old.
        """
        payload, signed_at = self._serializer.loads(token, return_timestamp=True)
        age = datetime.now(timezone.utc) - signed_at
        if age > timedelta(seconds=payload['expires_in']):
            raise SignatureExpired('Signed URL expired', payload=payload, date_signed=signed_at)
        return payload['key']


def create_file_metadata(file, file_type, file_url, registration_id):
    """Row values for the file_uploads table."""
    return {
        'registration_id': registration_id,
        'file_type': file_type,
        'file_path': file_url,
        'file_name': file.filename,
        'file_size': _file_size(file),
        'mime_type': getattr(file, 'mimetype', None),
    }


def init_storage(app):
    app.extensions['file_store'] = FileStore(
        root=app.config['UPLOAD_FOLDER'],
        bucket=app.config['STORAGE_BUCKET'],
        public_url=app.config['STORAGE_PUBLIC_URL'],
        secret_key=app.config['SECRET_KEY'],
        signed_url_expires=app.config['SIGNED_URL_EXPIRES'],
        allowed_extensions=app.config.get('ALLOWED_UPLOAD_EXTENSIONS'),
    )


def get_file_store():
    return current_app.extensions['file_store']
