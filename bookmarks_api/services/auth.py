from sqlalchemy.exc import SQLAlchemyError

from bookmarks_api.models.user import User
from .errors import InvalidAPIKey, PersistenceError


def resolve_by_api_key(session, api_key):
    """Return the account owning ``api_key`` or raise InvalidAPIKey."""
    if not api_key:
        raise InvalidAPIKey()

    try:
        user = session.query(User).filter(User.api_key == api_key).one_or_none()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'could not look up API key: {e}') from e

    if user is None:
        raise InvalidAPIKey()
    return user
