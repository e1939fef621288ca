import secrets

from .errors import GenerationError

API_KEY_BYTES = 32


def generate_api_key() -> str:
    """Return 32 random bytes as a 64 character lowercase hex string."""
    try:
        return secrets.token_hex(API_KEY_BYTES)
    except (OSError, NotImplementedError) as e:
        raise GenerationError(f'could not generate API key: {e}') from e
