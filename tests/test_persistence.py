"""
Fallback chain ordering, re-persisting and the storage adapters.
"""
import asyncio
import json

import httpx
import pytest

from app.core.context import build_context
from app.core.database.engine import create_engine, create_session_factory, init_db
from app.core.entities import EntityKind
from app.core.seed import DEFAULT_ORDERS, DEFAULT_ORGANIZATIONS, DEFAULT_USERS
from app.core.storage.blob import HttpBlobStore, JsonFileBlobStore, MemoryBlobStore
from app.core.storage.local import LocalStorage, MemoryStorage
from app.core.storage.mirror import LocalMirror


pytestmark = pytest.mark.asyncio


REMOTE_USERS = [
    {
        "id": "user-r1",
        "email": "remote@example.com",
        "name": "Remote Admin",
        "role": "super_admin",
        "createdAt": "2024-03-01T00:00:00Z",
        "updatedAt": "2024-03-01T00:00:00Z",
    }
]

MIRROR_ORGANIZATIONS = [
    {
        "id": "org-m1",
        "name": "Mirror Org",
        "createdAt": "2024-04-01T00:00:00Z",
        "updatedAt": "2024-04-01T00:00:00Z",
    }
]


def ids(records):
    return [record.id for record in records]


async def test_empty_tiers_fall_back_to_defaults(context, blob_store, storage):
    assert context.store.counts() == {"users": 3, "organizations": 2, "orders": 2}
    # Resolved dataset written back to both tiers
    assert blob_store.collections[EntityKind.USERS] == DEFAULT_USERS
    assert blob_store.collections[EntityKind.ORGANIZATIONS] == DEFAULT_ORGANIZATIONS
    assert blob_store.collections[EntityKind.ORDERS] == DEFAULT_ORDERS
    assert json.loads(storage.items["app_orders"]) == DEFAULT_ORDERS


async def test_each_kind_resolved_independently():
    blob_store = MemoryBlobStore({EntityKind.USERS: REMOTE_USERS})
    storage = MemoryStorage({"app_organizations": json.dumps(MIRROR_ORGANIZATIONS)})
    context = build_context(blob_store=blob_store, storage=storage)

    await context.start()

    assert ids(context.store.users.all()) == ["user-r1"]
    assert ids(context.store.organizations.all()) == ["org-m1"]
    assert ids(context.store.orders.all()) == ["order-1", "order-2"]


async def test_remote_data_wins_over_mirror():
    blob_store = MemoryBlobStore({EntityKind.USERS: REMOTE_USERS})
    storage = MemoryStorage({"app_users": json.dumps(DEFAULT_USERS)})
    context = build_context(blob_store=blob_store, storage=storage)

    await context.start()

    assert ids(context.store.users.all()) == ["user-r1"]
    assert json.loads(storage.items["app_users"]) == REMOTE_USERS


async def test_unreachable_remote_uses_mirror():
    blob_store = MemoryBlobStore({EntityKind.USERS: REMOTE_USERS})
    blob_store.fail = True
    storage = MemoryStorage({"app_organizations": json.dumps(MIRROR_ORGANIZATIONS)})
    context = build_context(blob_store=blob_store, storage=storage)

    await context.start()

    assert ids(context.store.users.all()) == ["user-1", "user-2", "user-3"]
    assert ids(context.store.organizations.all()) == ["org-m1"]


async def test_malformed_tiers_are_skipped():
    blob_store = MemoryBlobStore({EntityKind.USERS: [{"id": "broken"}]})
    storage = MemoryStorage({"app_users": "{not json", "app_orders": json.dumps({"orders": []})})
    context = build_context(blob_store=blob_store, storage=storage)

    await context.start()

    assert ids(context.store.users.all()) == ["user-1", "user-2", "user-3"]
    assert ids(context.store.orders.all()) == ["order-1", "order-2"]


async def test_remote_users_with_local_domain_addresses_are_kept():
    remote_users = [dict(DEFAULT_USERS[0], name="Renamed Admin")] + DEFAULT_USERS[1:] + [
        {
            "id": "user-ops",
            "email": "ops@corp.local",
            "name": "Ops",
            "role": "org_user",
            "organizationId": "org-1",
            "createdAt": "2024-03-01T00:00:00Z",
            "updatedAt": "2024-03-01T00:00:00Z",
        }
    ]
    blob_store = MemoryBlobStore({EntityKind.USERS: remote_users})
    context = build_context(blob_store=blob_store, storage=MemoryStorage())

    await context.start()

    assert ids(context.store.users.all()) == ["user-1", "user-2", "user-3", "user-ops"]
    assert context.store.users.get("user-1").name == "Renamed Admin"
    assert blob_store.collections[EntityKind.USERS] == remote_users


async def test_initialize_twice_yields_identical_collections(make_context):
    first = make_context()
    await first.start()
    await first.store.create(EntityKind.ORGANIZATIONS, {"name": "Persisted Org"})
    snapshot = first.store.snapshot()

    second = make_context()
    await second.start()
    third = make_context()
    await third.start()

    assert second.store.snapshot() == snapshot
    assert third.store.snapshot() == snapshot


async def test_cleared_collections_fall_back_to_defaults_on_restart(make_context):
    first = make_context()
    await first.start()
    await first.store.clear_all()

    second = make_context()
    await second.start()

    assert second.store.counts() == {"users": 3, "organizations": 2, "orders": 2}


async def test_wait_until_ready(make_context):
    context = make_context()
    assert not context.store.is_ready
    await context.start()
    await context.store.wait_until_ready()
    assert context.store.is_ready


async def test_json_file_blob_store_format(tmp_path):
    file_store = JsonFileBlobStore(tmp_path / "data")

    assert await file_store.get(EntityKind.ORDERS) == []
    assert await file_store.put(EntityKind.ORDERS, DEFAULT_ORDERS) is True

    content = (tmp_path / "data" / "orders.json").read_text(encoding="utf-8")
    assert content == json.dumps({"orders": DEFAULT_ORDERS}, indent=2)
    assert await file_store.get(EntityKind.ORDERS) == DEFAULT_ORDERS


async def test_json_file_blob_store_corrupt_file_reads_empty(tmp_path):
    (tmp_path / "users.json").write_text("[1, 2", encoding="utf-8")
    file_store = JsonFileBlobStore(tmp_path)
    assert await file_store.get(EntityKind.USERS) == []


async def test_json_file_blob_store_overlapping_writes_leave_valid_json(tmp_path):
    file_store = JsonFileBlobStore(tmp_path)
    big = [dict(DEFAULT_USERS[2], id=f"user-{n}", name="x" * 500) for n in range(200)]
    small = DEFAULT_USERS[:1]

    for _ in range(50):
        results = await asyncio.gather(
            file_store.put(EntityKind.USERS, big),
            file_store.put(EntityKind.USERS, small),
        )
        assert results == [True, True]
        assert await file_store.read(EntityKind.USERS) == small

    assert [path.name for path in tmp_path.iterdir()] == ["users.json"]


async def test_sqlite_local_storage_backs_mirror(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'console.db'}")
    await init_db(engine)
    storage = LocalStorage(create_session_factory(engine))
    mirror = LocalMirror(storage)

    try:
        assert await mirror.get(EntityKind.USERS) == []
        assert await mirror.put(EntityKind.USERS, DEFAULT_USERS) is True
        assert await mirror.put(EntityKind.USERS, REMOTE_USERS) is True
        assert await mirror.get(EntityKind.USERS) == REMOTE_USERS

        await storage.remove_item("app_users")
        assert await storage.get_item("app_users") is None
    finally:
        await engine.dispose()


async def test_context_with_database_url_survives_restart(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'console.db'}"
    blob_store = MemoryBlobStore()
    blob_store.fail = True

    first = build_context(blob_store=blob_store, database_url=url)
    await first.start()
    await first.store.create(EntityKind.ORGANIZATIONS, {"name": "Only In Mirror"})
    await first.close()

    second = build_context(blob_store=blob_store, database_url=url)
    await second.start()
    try:
        names = [org.name for org in second.store.organizations.all()]
        assert "Only In Mirror" in names
    finally:
        await second.close()


def _save_data_transport(files: dict) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            body = json.loads(request.content)
            files[body["type"]] = body["data"]
            return httpx.Response(200, json={"success": True, "count": len(body["data"])})
        kind = request.url.params["type"]
        if kind not in files:
            return httpx.Response(500, json={"success": False, "message": "Failed to load data"})
        return httpx.Response(200, json={"success": True, "data": files[kind], "count": len(files[kind])})
    return httpx.MockTransport(handler)


async def test_http_blob_store_round_trip():
    files = {}
    http_store = HttpBlobStore("http://console.test", transport=_save_data_transport(files))

    assert await http_store.get(EntityKind.USERS) == []
    assert await http_store.put(EntityKind.USERS, DEFAULT_USERS) is True
    assert files["users"] == DEFAULT_USERS
    assert await http_store.get(EntityKind.USERS) == DEFAULT_USERS


async def test_http_blob_store_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http_store = HttpBlobStore("http://console.test", transport=httpx.MockTransport(handler))
    assert await http_store.get(EntityKind.ORDERS) == []
    assert await http_store.put(EntityKind.ORDERS, DEFAULT_ORDERS) is False
