import logging

from sqlalchemy.exc import SQLAlchemyError

from bookmarks_api.models.bookmark import Bookmark
from .accounts import get_account
from .errors import PersistenceError

logger = logging.getLogger(__name__)


def create_bookmark(session, account_id, title, url):
    """Insert a bookmark and return it with its store-assigned fields.

    The row is read back after the insert so ``id`` and ``created_at`` are
    what was persisted. A bookmark without a timestamp is never returned.
    """
    bookmark = Bookmark(user_id=account_id, title=title, url=url)
    try:
        session.add(bookmark)
        session.flush()
        session.refresh(bookmark)
        if bookmark.created_at is None:
            raise PersistenceError(
                f'could not read created_at for bookmark {bookmark.id}'
            )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not create bookmark: {e}') from e
    except PersistenceError:
        session.rollback()
        raise

    logger.debug('Created bookmark %d for user %d', bookmark.id, account_id)
    return bookmark


def list_bookmarks(session, account_id):
    """Return the account's bookmarks in insertion order.

    Raises NotFound when the account does not exist; an account without
    bookmarks gets an empty list.
    """
    get_account(session, account_id)
    try:
        return (
            session.query(Bookmark)
            .filter(Bookmark.user_id == account_id)
            .order_by(Bookmark.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not list bookmarks: {e}') from e


def delete_bookmark_by_title(session, account_id, title):
    """Delete the account's bookmarks whose title matches exactly.

    Returns the number of rows removed; 0 means nothing matched.
    """
    try:
        removed = (
            session.query(Bookmark)
            .filter(Bookmark.user_id == account_id, Bookmark.title == title)
            .delete(synchronize_session=False)
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not delete bookmark: {e}') from e
    return removed
