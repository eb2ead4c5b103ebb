"""Tests for the REST-backed demo records."""

import asyncio

import httpx
import pytest
import pytest_asyncio

from lazy_record import KeyState, LazyRecord
from lazy_record.clients.placeholder import PlaceholderClient
from lazy_record.demos import (
    TODO_LOADABLE_PROPERTIES,
    Todo,
    User,
    lazy_nested_todo,
    lazy_todo,
    run_nested_todo,
    run_todo,
)


@pytest_asyncio.fixture
async def client(placeholder_api):
    client = PlaceholderClient(api_base="https://api.test/", transport=placeholder_api)
    yield client
    await client.close()


def test_models_accept_api_payloads():
    todo = Todo.model_validate({"userId": 4, "id": 9, "title": "t", "completed": True})
    assert todo.user_id == 4
    assert todo.model_dump(by_alias=True)["userId"] == 4

    user = User.model_validate({"id": 1, "name": "n", "unknown": "ignored"})
    assert user.model_dump(exclude_none=True) == {"id": 1, "name": "n"}


@pytest.mark.asyncio
async def test_lazy_todo_loads_everything_in_one_request(client, placeholder_api):
    todo = lazy_todo(client, 1)

    values = await todo.fetch("title", "completed")

    assert values == {"title": "delectus aut autem", "completed": False}
    assert todo.userId == 1
    assert placeholder_api.requests == ["/todos/1"]


@pytest.mark.asyncio
async def test_nested_todo_builds_lazy_user(client, placeholder_api):
    todo = lazy_nested_todo(client, 3)

    assert todo.state("userId") is KeyState.BLOCKED
    title, user = todo.title, todo.user
    assert await title == "fugiat veniam minus"

    user = await user
    assert isinstance(user, LazyRecord)
    assert user.id == 2
    assert "userId" not in todo
    assert todo.allow_list == TODO_LOADABLE_PROPERTIES

    email, name = user.email, user.name
    assert await asyncio.gather(email, name) == ["Shanna@melissa.tv", "Ervin Howell"]
    assert todo.user.name == "Ervin Howell"
    assert placeholder_api.requests == ["/todos/3", "/users/2"]


@pytest.mark.asyncio
async def test_failed_request_rejects_and_can_retry(client, placeholder_api):
    todo = lazy_todo(client, 404)

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await todo.title
    assert "404" in str(exc_info.value)

    with pytest.raises(httpx.HTTPStatusError):
        await todo.title
    assert placeholder_api.requests == ["/todos/404", "/todos/404"]


@pytest.mark.asyncio
async def test_run_todo_prints_walkthrough(client, capsys):
    todo = await run_todo(client, 1)

    out = capsys.readouterr().out
    assert "accessing title results in <Future pending>" in out
    assert "fetched title 'delectus aut autem'" in out
    assert "access cached title 'delectus aut autem'" in out
    assert todo.is_loaded("title")


@pytest.mark.asyncio
async def test_run_nested_todo_prints_walkthrough(client, placeholder_api, capsys):
    todo = await run_nested_todo(client, 1)

    out = capsys.readouterr().out
    assert "use lazy todo <LazyRecord nested-todo loaded=['id'] pending=[]>" in out
    assert "fetched user email 'Sincere@april.biz'" in out
    assert "direct access user name 'Leanne Graham'" in out
    assert placeholder_api.requests == ["/todos/1", "/users/1"]
    assert todo.is_loaded("user")


@pytest.mark.asyncio
async def test_run_todo_reports_failures(client, capsys):
    await run_todo(client, 404)

    out = capsys.readouterr().out
    assert "failed to fetch title: Error in fetch title: HTTPStatusError" in out
    assert "access cached title" not in out
