"""Serves stored documents by public key or by signed token."""

from flask import Blueprint, jsonify, send_from_directory, current_app
from itsdangerous import BadSignature, SignatureExpired

from utils.file_storage import get_file_store

files_bp = Blueprint('files', __name__)


@files_bp.route('/signed/<token>')
def signed_file(token):
    store = get_file_store()
    try:
        key = store.resolve_signed_token(token)
    except SignatureExpired:
        return jsonify({'error': 'This link has expired'}), 403
    except BadSignature:
        return jsonify({'error': 'Invalid link'}), 403
    return send_from_directory(store.root, key)


@files_bp.route('/<path:key>')
def public_file(key):
    store = get_file_store()
    if not key.startswith(store.bucket + '/'):
        current_app.logger.warning(f"Rejected storage key outside bucket: {key}")
        return jsonify({'error': 'File not found'}), 404
    return send_from_directory(store.root, key)
