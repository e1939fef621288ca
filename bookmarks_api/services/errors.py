"""Error kinds raised by the account and bookmark stores.

EmailTaken, InvalidAPIKey and NotFound are domain errors the HTTP layer maps
to specific client responses. GenerationError and PersistenceError are
internal failures and are only ever reported as a generic 500.
"""


class ServiceError(Exception):
    """Base class for every store-level failure."""


class EmailTaken(ServiceError):
    def __init__(self, email):
        self.email = email
        super().__init__('email already in use')


class InvalidAPIKey(ServiceError):
    def __init__(self):
        super().__init__('invalid API key')


class NotFound(ServiceError):
    def __init__(self, kind, key):
        self.kind = kind
        self.key = key
        super().__init__(f'{kind} not found: {key}')


class GenerationError(ServiceError):
    """The entropy source could not supply bytes for a new secret."""


class PersistenceError(ServiceError):
    """Any underlying database failure."""


class BackfillError(PersistenceError):
    """The key backfill sweep stopped at ``account_id``."""

    def __init__(self, account_id, detail):
        self.account_id = account_id
        self.detail = detail
        super().__init__(f'could not backfill API key for user {account_id}: {detail}')
