from flask import Blueprint, jsonify

from bookmarks_api.extensions import db
from bookmarks_api.middleware.auth import require_api_key
from bookmarks_api.services.accounts import rotate_api_key
from bookmarks_api.services.errors import NotFound

bp = Blueprint('auth', __name__, url_prefix='/auth')


@bp.route('/regenerate-key', methods=['POST'])
@require_api_key
def regenerate_key(account):
    """Replace the caller's API key. The old key stops working immediately."""
    try:
        new_key = rotate_api_key(db.session, account.id)
    except NotFound:
        return jsonify({'error': 'User not found'}), 404

    return jsonify({
        'api_key': new_key,
        'message': 'API key regenerated successfully',
    })
