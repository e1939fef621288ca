from functools import wraps

from flask import request, jsonify

from bookmarks_api.extensions import db
from bookmarks_api.services.auth import resolve_by_api_key
from bookmarks_api.services.errors import InvalidAPIKey


def _bearer_token():
    """Return the key from ``Authorization: Bearer <key>``.

    Returns None when the header is missing, '' when it is malformed.
    """
    auth_header = request.headers.get('Authorization')
    if not auth_header:
        return None
    parts = auth_header.split(' ')
    if len(parts) != 2 or parts[0] != 'Bearer' or not parts[1]:
        return ''
    return parts[1]


def require_api_key(f):
    """Resolve the caller's account and pass it to the view as ``account``."""
    @wraps(f)
    def decorated(*args, **kwargs):
        api_key = _bearer_token()
        if api_key is None:
            return jsonify({'error': 'Missing Authorization header'}), 401
        if not api_key:
            return jsonify({'error': 'Invalid Authorization header format'}), 401

        try:
            account = resolve_by_api_key(db.session, api_key)
        except InvalidAPIKey:
            return jsonify({'error': 'Invalid API key'}), 401

        return f(*args, account=account, **kwargs)
    return decorated
