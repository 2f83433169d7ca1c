"""
Unit tests for document storage naming, uploads and signed URLs.
"""
import io
import re
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from itsdangerous import BadSignature, SignatureExpired
from werkzeug.datastructures import FileStorage

from utils.file_storage import FileStore, generate_unique_file_name, get_storage_path, create_file_metadata


def _file(name, content=b'data', mimetype='image/jpeg'):
    return FileStorage(stream=io.BytesIO(content), filename=name, content_type=mimetype)


@pytest.fixture
def store(tmp_path):
    return FileStore(
        root=str(tmp_path),
        bucket='jet-documents',
        public_url='/storage',
        secret_key='secret',
        allowed_extensions={'.jpg', '.pdf'},
    )


class TestNaming:

    def test_unique_file_name(self):
        name = generate_unique_file_name('my photo (1).jpg', timestamp_ms=1700000000000)
        assert re.fullmatch(r'1700000000000_[a-z0-9]{6}_my_photo__1_\.jpg', name)

    def test_storage_paths(self):
        assert get_storage_path('team_photo', year=2025) == 'jet-documents/jet-2025/team-photos/'
        assert get_storage_path('player2_dob_proof', year=2025) == 'jet-documents/jet-2025/dob-proof/'
        assert get_storage_path('backup_dob_proof', year=2025) == 'jet-documents/jet-2025/dob-proof/'

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            get_storage_path('selfie')


class TestFileStore:

    def test_upload_file(self, store, tmp_path):
        url, error = store.upload_file(_file('team.jpg', b'jpeg'), 'team_photo')
        assert error is None
        assert url.startswith('/storage/jet-documents/jet-')
        key = store.key_from_url(url)
        with open(os.path.join(str(tmp_path), key), 'rb') as stored:
            assert stored.read() == b'jpeg'

    def test_rejects_extension(self, store):
        url, error = store.upload_file(_file('script.exe'), 'team_photo')
        assert url is None
        assert error == 'File type .exe is not allowed'

    def test_upload_multiple_files(self, store):
        files = [_file('a.jpg'), _file('b.exe'), _file('c.pdf')]
        urls, errors = store.upload_multiple_files(files, 'player1_dob_proof')
        assert len(urls) == 2
        assert errors == ['File 2: File type .exe is not allowed']

    def test_upload_multiple_files_empty(self, store):
        assert store.upload_multiple_files([], 'team_photo') == ([], [])

    def test_key_from_foreign_url(self, store):
        assert store.key_from_url('https://elsewhere.example.com/a.jpg') is None
        assert store.key_from_url(None) is None

    def test_signed_url_round_trip(self, store):
        signed = store.create_signed_url('jet-documents/jet-2025/team-photos/a.jpg')
        assert signed.startswith('/storage/signed/')
        token = signed.rsplit('/', 1)[1]
        assert store.resolve_signed_token(token) == 'jet-documents/jet-2025/team-photos/a.jpg'

    def test_tampered_signed_url(self, store):
        token = store.create_signed_url('jet-documents/a.jpg').rsplit('/', 1)[1]
        with pytest.raises(BadSignature):
            store.resolve_signed_token('x' + token)

    def test_expired_signed_url(self, store):
        token = store.create_signed_url('jet-documents/a.jpg', expires_in=-1).rsplit('/', 1)[1]
        with pytest.raises(SignatureExpired):
            store.resolve_signed_token(token)

    def test_path_outside_root(self, store):
        with pytest.raises(ValueError):
            store.absolute_path('../escape.txt')


def test_create_file_metadata():
    upload = _file('proof.pdf', b'12345', mimetype='application/pdf')
    metadata = create_file_metadata(upload, 'player1_dob_proof', '/storage/x/proof.pdf', 7)
    assert metadata == {
        'registration_id': 7,
        'file_type': 'player1_dob_proof',
        'file_path': '/storage/x/proof.pdf',
        'file_name': 'proof.pdf',
        'file_size': 5,
        'mime_type': 'application/pdf',
    }
