import json

from promptshelf_commons.api_schema.dashboard_schema import ApiKey
from promptshelf.server.services.storage.api_key_store import (
    SAVED_API_KEYS_KEY,
    ApiKeyStore,
)
from promptshelf.server.services.storage.memory_kv_store import InMemoryKeyValueStore


def _api_key(key_id: str, name: str) -> ApiKey:
    return ApiKey(
        id=key_id,
        name=name,
        key=f"sk_{key_id}_secret",
        created_at="2025-01-01T00:00:00+00:00",
    )


def test_add_and_list():
    store = ApiKeyStore(InMemoryKeyValueStore())

    assert store.add(_api_key("1", "prod")) is True
    assert store.add(_api_key("2", "dev")) is True

    api_keys = store.list()
    assert [api_key.name for api_key in api_keys] == ["prod", "dev"]
    assert api_keys[0].key == "sk_1_secret"


def test_duplicate_name_is_not_stored():
    store = ApiKeyStore(InMemoryKeyValueStore())
    store.add(_api_key("1", "prod"))

    assert store.add(_api_key("2", "prod")) is False

    api_keys = store.list()
    assert len(api_keys) == 1
    assert api_keys[0].id == "1"


def test_records_are_persisted_with_camel_case_timestamp():
    kv_store = InMemoryKeyValueStore()
    ApiKeyStore(kv_store).add(_api_key("1", "prod"))

    stored = json.loads(kv_store.get(SAVED_API_KEYS_KEY))
    assert stored == [
        {
            "id": "1",
            "name": "prod",
            "key": "sk_1_secret",
            "createdAt": "2025-01-01T00:00:00+00:00",
        }
    ]


def test_remove_by_id_not_name():
    store = ApiKeyStore(InMemoryKeyValueStore())
    store.add(_api_key("1", "prod"))
    store.add(_api_key("2", "dev"))

    store.remove("prod")
    assert len(store.list()) == 2

    store.remove("1")
    assert [api_key.name for api_key in store.list()] == ["dev"]


def test_malformed_records_are_skipped():
    kv_store = InMemoryKeyValueStore(
        initial={
            SAVED_API_KEYS_KEY: json.dumps(
                [
                    {"id": "1", "name": "prod", "key": "sk_x", "createdAt": "t"},
                    {"name": "missing id"},
                    "junk",
                ]
            )
        }
    )

    api_keys = ApiKeyStore(kv_store).list()

    assert [api_key.id for api_key in api_keys] == ["1"]


def test_corrupt_json_reads_as_empty():
    kv_store = InMemoryKeyValueStore(initial={SAVED_API_KEYS_KEY: "["})

    assert ApiKeyStore(kv_store).list() == []
