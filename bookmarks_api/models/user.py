from bookmarks_api.extensions import db


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    # NULL until issued; accounts from before key auth get one via backfill
    api_key = db.Column(db.String(64), nullable=True)

    __table_args__ = (
        db.UniqueConstraint('email', name='uq_users_email'),
        db.UniqueConstraint('api_key', name='uq_users_api_key'),
    )

    def __repr__(self):
        return f'<User {self.id} {self.email}>'
