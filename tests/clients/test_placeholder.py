"""Tests for the JSONPlaceholder client."""

import httpx
import pytest

from lazy_record.clients.placeholder import PlaceholderClient


@pytest.mark.asyncio
async def test_get_todo_and_user(placeholder_api):
    async with PlaceholderClient(
        api_base="https://api.test/", transport=placeholder_api
    ) as client:
        todo = await client.get_todo(1)
        user = await client.get_user(2)

    assert todo["title"] == "delectus aut autem"
    assert user["name"] == "Ervin Howell"
    assert placeholder_api.requests == ["/todos/1", "/users/2"]


@pytest.mark.asyncio
async def test_missing_resource_raises(placeholder_api):
    client = PlaceholderClient(api_base="https://api.test/", transport=placeholder_api)
    try:
        with pytest.raises(httpx.HTTPStatusError):
            await client.get_todo(404)
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_client_is_created_lazily_and_closed(placeholder_api):
    client = PlaceholderClient(api_base="https://api.test/", transport=placeholder_api)
    assert client._client is None

    await client.get_user(1)
    assert client._client is not None

    await client.close()
    assert client._client is None
