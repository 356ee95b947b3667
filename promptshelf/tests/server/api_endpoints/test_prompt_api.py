import asyncio

import pytest

from promptshelf_client.errors import APIConnectionError
from promptshelf.server.api_endpoints.prompt_api import (
    InvalidQueryError,
    list_categories,
    parse_non_negative_int,
    parse_prompt_ids,
)


def test_parse_non_negative_int_defaults():
    assert parse_non_negative_int(None, 20, "limit") == 20
    assert parse_non_negative_int("", 20, "limit") == 20
    assert parse_non_negative_int(" 12 ", 20, "limit") == 12


@pytest.mark.parametrize("raw", ["abc", "1.5", "-1"])
def test_parse_non_negative_int_rejects(raw):
    with pytest.raises(InvalidQueryError):
        parse_non_negative_int(raw, 0, "offset")


def test_parse_prompt_ids():
    assert parse_prompt_ids("a, b,,c ") == ["a", "b", "c"]
    assert parse_prompt_ids(" , ,") == []


def test_list_categories_degrades_to_empty(mock_gateway):
    mock_gateway.list_categories.side_effect = APIConnectionError("down")

    assert asyncio.run(list_categories(mock_gateway)) == []
