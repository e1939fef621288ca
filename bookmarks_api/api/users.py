from flask import Blueprint, jsonify

from bookmarks_api.api import json_string_fields
from bookmarks_api.api.bookmarks import bookmark_to_dict
from bookmarks_api.extensions import db
from bookmarks_api.middleware.auth import require_api_key
from bookmarks_api.services.accounts import (
    create_account,
    delete_account_and_bookmarks,
)
from bookmarks_api.services.bookmarks import list_bookmarks
from bookmarks_api.services.errors import EmailTaken, NotFound

bp = Blueprint('users', __name__, url_prefix='/users')


def user_to_dict(user, include_api_key=False):
    """Serialize a User. The key is only exposed when it was just issued."""
    data = {
        'id': user.id,
        'name': user.name,
        'email': user.email,
    }
    if include_api_key:
        data['api_key'] = user.api_key
    return data


@bp.route('', methods=['POST'])
def create_user():
    """Register an account and return it with its API key."""
    fields, error = json_string_fields('name', 'email')
    if error:
        return jsonify({'error': error}), 400
    name, email = fields

    try:
        user = create_account(db.session, name, email)
    except EmailTaken as e:
        return jsonify({'error': str(e)}), 409

    return jsonify({'user': user_to_dict(user, include_api_key=True)}), 201


@bp.route('/<int:user_id>/bookmarks', methods=['GET'])
def list_user_bookmarks(user_id):
    """Public listing of any user's bookmarks."""
    try:
        bookmarks = list_bookmarks(db.session, user_id)
    except NotFound:
        return jsonify({'error': 'User not found'}), 404

    return jsonify({'bookmarks': [bookmark_to_dict(b) for b in bookmarks]})


@bp.route('/me', methods=['DELETE'])
@require_api_key
def delete_current_user(account):
    """Delete the caller's account together with all of its bookmarks."""
    try:
        delete_account_and_bookmarks(db.session, account.id)
    except NotFound:
        return jsonify({'error': 'User not found'}), 404

    return jsonify({'ok': True})
