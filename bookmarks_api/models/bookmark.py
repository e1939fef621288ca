from datetime import datetime, timezone

from bookmarks_api.extensions import db


class Bookmark(db.Model):
    __tablename__ = 'bookmarks'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False
    )
    title = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(2000), nullable=False)
    # Set at insert time, never taken from the caller
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        db.Index('ix_bookmarks_user', 'user_id'),
    )

    def __repr__(self):
        return f'<Bookmark {self.id} {self.title!r}>'
