from bookmarks_api.models.user import User
from bookmarks_api.models.bookmark import Bookmark

__all__ = ['User', 'Bookmark']
