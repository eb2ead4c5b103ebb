from unittest.mock import AsyncMock

import httpx
import pytest

from lazy_record.metrics import MetricsCollector, reset_metrics


async def _load_test_record(record, keys):
    loaded = {}
    if "prop" in keys:
        loaded["prop"] = 2 * record["id"]
    if "other" in keys:
        loaded["other"] = 3 * record["id"]
    return loaded


@pytest.fixture
def loader():
    """Loader resolving ``prop`` to 2*id and ``other`` to 3*id."""
    return AsyncMock(side_effect=_load_test_record)


@pytest.fixture
def metrics():
    """Isolated metrics collector."""
    return MetricsCollector()


@pytest.fixture(autouse=True)
def clear_global_metrics():
    reset_metrics()
    yield
    reset_metrics()


TODOS = {
    1: {"userId": 1, "id": 1, "title": "delectus aut autem", "completed": False},
    3: {"userId": 2, "id": 3, "title": "fugiat veniam minus", "completed": True},
}

USERS = {
    1: {
        "id": 1,
        "name": "Leanne Graham",
        "username": "Bret",
        "email": "Sincere@april.biz",
        "phone": "1-770-736-8031 x56442",
        "website": "hildegard.org",
        "address": {"city": "Gwenborough"},
        "company": {"name": "Romaguera-Crona"},
    },
    2: {"id": 2, "name": "Ervin Howell", "email": "Shanna@melissa.tv"},
}


@pytest.fixture
def placeholder_api():
    """MockTransport serving a few todos and users; records request paths."""
    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        resource, _, raw_id = request.url.path.strip("/").partition("/")
        table = {"todos": TODOS, "users": USERS}.get(resource, {})
        item = table.get(int(raw_id)) if raw_id.isdigit() else None
        if item is None:
            return httpx.Response(404, json={})
        return httpx.Response(200, json=item)

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport
