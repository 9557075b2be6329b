"""
KV backend with an in-memory client, the SQL client on a temporary SQLite
database and the REST client behind httpx.MockTransport.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streamverse.core import config as core_config  # noqa: E402
from streamverse.db import models  # noqa: E402
from streamverse.db import session as db_session  # noqa: E402
from streamverse.domain.seed import INITIAL_SITES  # noqa: E402
from streamverse.domain.sites import SiteDraft  # noqa: E402
from streamverse.repositories.base import StorageUnavailableError  # noqa: E402
from streamverse.repositories.kv_storage import (  # noqa: E402
    KVSiteStorage,
    RestKVClient,
    SQLKVClient,
    build_kv_client,
)


class DictKVClient:
    def __init__(self, data=None):
        self.data = dict(data or {})
        self.writes = 0

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.writes += 1
        self.data[key] = value


def _draft(name: str = "Foo") -> SiteDraft:
    return SiteDraft(name=name, url="https://foo.test", description="d", category="Movies")


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database with fresh settings/engine caches."""
    db_file = tmp_path / "kv.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.delenv("KV_REST_API_URL", raising=False)
    monkeypatch.delenv("KV_REST_API_TOKEN", raising=False)
    core_config.get_settings.cache_clear()
    db_session.reset_engine()

    engine = db_session.get_engine()
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    db_session.reset_engine()
    core_config.get_settings.cache_clear()


def test_first_read_seeds_key_once():
    client = DictKVClient()
    storage = KVSiteStorage(client, "streamverse:sites")
    assert storage.list_all() == list(INITIAL_SITES)
    assert client.writes == 1
    assert storage.list_all() == list(INITIAL_SITES)
    assert client.writes == 1


def test_initialize_reseeds_empty_collection_idempotently():
    client = DictKVClient({"k": "[]"})
    storage = KVSiteStorage(client, "k")
    first = storage.initialize()
    second = storage.initialize()
    assert first == second == list(INITIAL_SITES)
    assert len(json.loads(client.data["k"])) == len(INITIAL_SITES)


def test_crud_round_trips_whole_key():
    client = DictKVClient()
    storage = KVSiteStorage(client, "k", seed=())
    created = storage.add(_draft())
    assert json.loads(client.data["k"]) == [created.to_dict()]
    updated = storage.update(created.id, _draft("Bar"))
    assert updated.id == created.id and updated.name == "Bar"
    assert storage.update("missing", _draft()) is None
    assert storage.delete("missing") is False
    assert storage.delete(created.id) is True
    assert storage.list_all() == []


def test_unconfigured_store_surfaces_unavailable():
    storage = KVSiteStorage(None)
    assert storage.available is False
    with pytest.raises(StorageUnavailableError):
        storage.list_all()
    with pytest.raises(StorageUnavailableError):
        storage.add(_draft())
    with pytest.raises(StorageUnavailableError):
        storage.update("1", _draft())
    with pytest.raises(StorageUnavailableError):
        storage.delete("1")


def test_corrupt_value_is_a_fault_not_a_reseed():
    client = DictKVClient({"k": '{"not": "a list"}'})
    with pytest.raises(StorageUnavailableError):
        KVSiteStorage(client, "k").list_all()
    assert client.writes == 0


def test_sql_client_persists_across_instances(temp_db):
    storage = KVSiteStorage(SQLKVClient(), "streamverse:sites", seed=())
    created = storage.add(_draft())
    again = KVSiteStorage(SQLKVClient(), "streamverse:sites", seed=())
    assert again.list_all() == [created]
    assert isinstance(build_kv_client(), SQLKVClient)


def test_sql_client_without_table_is_unavailable(temp_db):
    models.Base.metadata.drop_all(bind=db_session.get_engine())
    with pytest.raises(StorageUnavailableError):
        SQLKVClient().get("k")
    models.Base.metadata.create_all(bind=db_session.get_engine())


def _rest_transport(store: dict, calls: list):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path, request.headers.get("authorization")))
        command, _, key = request.url.path.strip("/").partition("/")
        if command == "get":
            return httpx.Response(200, json={"result": store.get(key)})
        if command == "set":
            store[key] = request.content.decode("utf-8")
            return httpx.Response(200, json={"result": "OK"})
        return httpx.Response(400, json={"error": "ERR unknown command"})

    return httpx.MockTransport(handler)


def test_rest_client_speaks_get_and_set():
    store: dict = {}
    calls: list = []
    client = RestKVClient("https://kv.example", "secret", transport=_rest_transport(store, calls))
    storage = KVSiteStorage(client, "sites", seed=())
    created = storage.add(_draft())
    assert json.loads(store["sites"]) == [created.to_dict()]
    assert storage.list_all() == [created]
    assert {c[0] for c in calls} == {"GET", "POST"}
    assert all(c[2] == "Bearer secret" for c in calls)


def test_rest_client_errors_become_unavailable():
    def handler(request):
        return httpx.Response(401, json={"error": "Unauthorized"})

    client = RestKVClient("https://kv.example", "bad", transport=httpx.MockTransport(handler))
    with pytest.raises(StorageUnavailableError, match="Unauthorized"):
        KVSiteStorage(client, "sites").list_all()


def test_rest_client_transport_failure_becomes_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = RestKVClient("https://kv.example", "t", transport=httpx.MockTransport(handler))
    with pytest.raises(StorageUnavailableError):
        client.get("sites")


def test_rest_client_requires_credentials():
    with pytest.raises(StorageUnavailableError):
        RestKVClient("", "")


def test_create_tables_seeds_sites_key(temp_db):
    from streamverse.db import create_tables

    create_tables.create_all()
    assert create_tables.seed_sites() == len(INITIAL_SITES)
    assert create_tables.seed_sites() == len(INITIAL_SITES)


def test_migrate_file_into_sql_kv(temp_db, tmp_path):
    from scripts import migrate_file_to_kv

    source = tmp_path / "sites.json"
    source.write_text(json.dumps([s.to_dict() for s in INITIAL_SITES[:2]]), encoding="utf-8")
    assert migrate_file_to_kv.migrate(source) == 2
    assert KVSiteStorage(SQLKVClient()).list_all() == list(INITIAL_SITES[:2])
    with pytest.raises(SystemExit):
        migrate_file_to_kv.migrate(source)
    assert migrate_file_to_kv.migrate(source, overwrite=True) == 2
