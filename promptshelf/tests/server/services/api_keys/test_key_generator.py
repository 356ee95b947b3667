import re
from datetime import datetime

from promptshelf.server.services.api_keys.key_generator import (
    generate_placeholder_api_key,
)

KEY_PATTERN = re.compile(r"^sk_[0-9a-z]{13}_[0-9a-z]{13}$")


def test_generated_key_shape():
    api_key = generate_placeholder_api_key("  prod  ")

    assert api_key.name == "prod"
    assert re.fullmatch(r"[0-9a-z]{13}", api_key.id)
    assert KEY_PATTERN.match(api_key.key)
    # ISO timestamp
    datetime.fromisoformat(api_key.created_at)


def test_generated_keys_are_unique():
    keys = {generate_placeholder_api_key("k").key for _ in range(50)}

    assert len(keys) == 50


def test_serializes_created_at_as_camel_case():
    dumped = generate_placeholder_api_key("k").model_dump(by_alias=True)

    assert set(dumped) == {"id", "name", "key", "createdAt"}
