"""Account store: creation, lookup, API key issuance and account deletion.

Every function takes the SQLAlchemy session it should use; nothing here
reaches for a module-level handle.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bookmarks_api.models.bookmark import Bookmark
from bookmarks_api.models.user import User
from .errors import (
    BackfillError,
    EmailTaken,
    NotFound,
    PersistenceError,
    ServiceError,
)
from .keys import generate_api_key

logger = logging.getLogger(__name__)


def create_account(session, name, email):
    """Insert a new account with a freshly issued API key.

    The unique constraint on ``users.email`` is the authority on duplicates:
    a constraint violation for an email that now exists is EmailTaken.
    """
    api_key = generate_api_key()
    user = User(name=name, email=email, api_key=api_key)

    try:
        session.add(user)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if _email_exists(session, email):
            raise EmailTaken(email) from e
        raise PersistenceError(f'could not create user: {e}') from e
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not create user: {e}') from e

    logger.info('Created user %d', user.id)
    return user


def _email_exists(session, email):
    try:
        return session.query(
            session.query(User.id).filter(User.email == email).exists()
        ).scalar()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not check email: {e}') from e


def lookup_by_email(session, email):
    try:
        user = session.query(User).filter(User.email == email).one_or_none()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not look up user: {e}') from e
    if user is None:
        raise NotFound('user', email)
    return user


def get_account(session, account_id):
    try:
        user = session.get(User, account_id)
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not load user: {e}') from e
    if user is None:
        raise NotFound('user', account_id)
    return user


def rotate_api_key(session, account_id):
    """Overwrite the account's key with a new one and return it.

    The old key stops resolving as soon as the update commits.
    """
    new_key = generate_api_key()
    try:
        updated = (
            session.query(User)
            .filter(User.id == account_id)
            .update({'api_key': new_key}, synchronize_session='fetch')
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not update API key: {e}') from e

    if not updated:
        raise NotFound('user', account_id)

    logger.info('Rotated API key for user %d', account_id)
    return new_key


def backfill_missing_keys(session):
    """Issue API keys to every account that has none.

    Commits per account. The sweep stops at the first failure and raises
    BackfillError naming that account; earlier updates are kept.
    Returns the number of accounts updated.
    """
    try:
        account_ids = [
            row.id for row in
            session.query(User.id).filter(User.api_key.is_(None)).order_by(User.id)
        ]
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not list users without API key: {e}') from e

    for account_id in account_ids:
        try:
            api_key = generate_api_key()
            session.query(User).filter(User.id == account_id).update(
                {'api_key': api_key}, synchronize_session=False
            )
            session.commit()
        except (ServiceError, SQLAlchemyError) as e:
            session.rollback()
            raise BackfillError(account_id, str(e)) from e
        logger.debug('Backfilled API key for user %d', account_id)

    if account_ids:
        logger.info('Backfilled API keys for %d users', len(account_ids))
    return len(account_ids)


def delete_account_and_bookmarks(session, account_id):
    """Remove an account and all of its bookmarks in one transaction.

    Bookmarks go first so the delete also works where the foreign key has
    no ON DELETE CASCADE. Nothing is committed unless both deletes succeed.
    """
    try:
        removed = (
            session.query(Bookmark)
            .filter(Bookmark.user_id == account_id)
            .delete(synchronize_session=False)
        )
        deleted = (
            session.query(User)
            .filter(User.id == account_id)
            .delete(synchronize_session='fetch')
        )
        if not deleted:
            session.rollback()
            raise NotFound('user', account_id)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not delete user {account_id}: {e}') from e

    logger.info('Deleted user %d and %d bookmarks', account_id, removed)
