"""
Demo records backed by a JSONPlaceholder-style REST API.

``todo`` shows the simple case: every missing key triggers a load of the
whole todo. ``nested-todo`` restricts loadable keys with an allow list and
turns the returned ``userId`` into a lazily loaded user record.
"""

import asyncio
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lazy_record.batching import Loader
from lazy_record.clients.placeholder import PlaceholderClient
from lazy_record.errors import describe_error
from lazy_record.record import LazyRecord

logger = logging.getLogger(__name__)

TODO_LOADABLE_PROPERTIES: tuple[str, ...] = ("completed", "title", "user")


class User(BaseModel):
    """User resource."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str | None = None
    username: str | None = None
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    address: dict[str, Any] | None = None
    company: dict[str, Any] | None = None


class Todo(BaseModel):
    """Todo resource."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    user_id: int | None = Field(default=None, alias="userId")
    title: str | None = None
    completed: bool | None = None


def make_user_loader(client: PlaceholderClient) -> Loader:
    """Loader fetching the whole user whatever keys were requested."""

    async def load_user(record, keys):
        user_id = record["id"]
        logger.info(f"loading users/{user_id} properties {list(keys)}")
        raw = await client.get_user(user_id)
        user = User.model_validate(raw)
        logger.info(f"loaded users/{user_id}")
        return user.model_dump(exclude_none=True)

    return load_user


def make_todo_loader(client: PlaceholderClient) -> Loader:
    """Loader fetching the whole todo whatever keys were requested."""

    async def load_todo(record, keys):
        todo_id = record["id"]
        logger.info(f"loading todos/{todo_id} properties {list(keys)}")
        raw = await client.get_todo(todo_id)
        return Todo.model_validate(raw).model_dump(by_alias=True, exclude_none=True)

    return load_todo


def make_nested_todo_loader(client: PlaceholderClient) -> Loader:
    """
    Loader replacing ``userId`` with a lazy user record under ``user``.

    The nested user record has no allow list, so any key read from it is
    sent to the users endpoint.
    """
    load_user = make_user_loader(client)

    async def load_nested_todo(record, keys):
        todo_id = record["id"]
        logger.info(f"loading todos/{todo_id} properties {list(keys)}")
        todo = Todo.model_validate(await client.get_todo(todo_id))

        values = todo.model_dump(exclude={"user_id"}, exclude_none=True)
        if todo.user_id is not None:
            values["user"] = LazyRecord({"id": todo.user_id}, load_user, name="user")
        return values

    return load_nested_todo


def lazy_todo(client: PlaceholderClient, todo_id: int) -> LazyRecord:
    """A todo where every key is loadable."""
    return LazyRecord({"id": todo_id}, make_todo_loader(client), name="todo")


def lazy_nested_todo(client: PlaceholderClient, todo_id: int) -> LazyRecord:
    """A todo whose loadable keys are TODO_LOADABLE_PROPERTIES."""
    return LazyRecord(
        {"id": todo_id},
        make_nested_todo_loader(client),
        TODO_LOADABLE_PROPERTIES,
        name="nested-todo",
    )


# -------------------- Walkthroughs --------------------


async def _report(label: str, value: Any) -> Any:
    print(f"accessing {label} results in {value!r}")
    if not isinstance(value, asyncio.Future):
        return value

    print(f"wait {label} future...")
    try:
        result = await value
    except Exception as e:
        print(f"failed to fetch {label}: {describe_error(e, f'fetch {label}')}")
        return None

    print(f"fetched {label} {result!r}")
    return result


async def run_todo(client: PlaceholderClient, todo_id: int) -> LazyRecord:
    """Read ``title`` of a simple lazy todo, then read it again from cache."""
    todo = lazy_todo(client, todo_id)

    title = await _report("title", todo.title)
    if title is not None:
        print(f"access cached title {todo.title!r}")

    return todo


async def run_nested_todo(client: PlaceholderClient, todo_id: int) -> LazyRecord:
    """
    Read ``title``, ``completed`` and ``user`` of a nested todo in one batch,
    then ``email`` and ``name`` of the nested user in a second one.
    """
    todo = lazy_nested_todo(client, todo_id)
    print(f"use lazy todo {todo!r}")

    title, completed, user = todo.title, todo.completed, todo.user
    await _report("title", title)
    await _report("completed", completed)
    user = await _report("user", user)

    if isinstance(user, LazyRecord):
        email, name = user.email, user.name
        await _report("user email", email)
        await _report("user name", name)
        print(f"direct access user name {todo.user.name!r}")

    return todo
