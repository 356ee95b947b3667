"""
Placeholder api key generation.

The hosted service does not issue credentials yet, so keys handed out by the
dashboard are random strings with no authority behind them.
"""

import secrets
import string

from promptshelf_commons.api_schema.dashboard_schema import ApiKey

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_TOKEN_LENGTH = 13


def _random_token(length: int = _TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(length))


def generate_placeholder_api_key(name: str) -> ApiKey:
    """Build a new placeholder api key record.

    Args:
        name (str): Display name chosen by the user

    Returns:
        ApiKey: Record with a random id, an `sk_` prefixed key and the creation time
    """
    return ApiKey(
        id=_random_token(),
        name=name.strip(),
        key=f"sk_{_random_token()}_{_random_token()}",
    )
