from flask import Blueprint, request, jsonify

from bookmarks_api.api import json_string_fields
from bookmarks_api.extensions import db
from bookmarks_api.middleware.auth import require_api_key
from bookmarks_api.services.bookmarks import (
    create_bookmark,
    delete_bookmark_by_title,
    list_bookmarks,
)
from bookmarks_api.services.errors import NotFound

bp = Blueprint('bookmarks', __name__, url_prefix='/bookmarks')


def bookmark_to_dict(bookmark):
    return {
        'id': bookmark.id,
        'user_id': bookmark.user_id,
        'title': bookmark.title,
        'url': bookmark.url,
        'created_at': bookmark.created_at.isoformat(),
    }


@bp.route('', methods=['POST'])
@require_api_key
def create_bookmark_for_current_user(account):
    fields, error = json_string_fields('title', 'url')
    if error:
        return jsonify({'error': error}), 400
    title, url = fields

    bookmark = create_bookmark(db.session, account.id, title, url)
    return jsonify({'bookmark': bookmark_to_dict(bookmark)}), 201


@bp.route('', methods=['GET'])
@require_api_key
def list_bookmarks_for_current_user(account):
    try:
        bookmarks = list_bookmarks(db.session, account.id)
    except NotFound:
        # Account deleted between authentication and listing
        return jsonify({'error': 'User not found'}), 404

    return jsonify({'bookmarks': [bookmark_to_dict(b) for b in bookmarks]})


@bp.route('', methods=['DELETE'])
@require_api_key
def delete_bookmarks_by_title(account):
    """Delete the caller's bookmarks titled exactly ``?title=``.

    ``deleted`` is 0 when no bookmark matched.
    """
    title = request.args.get('title')
    if not title:
        return jsonify({'error': 'title is required'}), 400

    deleted = delete_bookmark_by_title(db.session, account.id, title)
    return jsonify({'deleted': deleted})
