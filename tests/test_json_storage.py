"""
Flat-file backend against a temporary data directory.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streamverse.domain.seed import INITIAL_SITES  # noqa: E402
from streamverse.domain.sites import SiteDraft  # noqa: E402
from streamverse.repositories.base import StorageWriteError  # noqa: E402
from streamverse.repositories.json_storage import JSONFileSiteStorage  # noqa: E402


def _draft(name: str = "Foo") -> SiteDraft:
    return SiteDraft(name=name, url="https://foo.test", description="d", category="Movies")


def test_initialize_creates_directory_and_seeds(tmp_path):
    path = tmp_path / "data" / "sites.json"
    storage = JSONFileSiteStorage(path)
    assert storage.initialize() is True
    assert path.exists()
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert [item["id"] for item in stored] == [site.id for site in INITIAL_SITES]
    # pretty-printed document
    assert "\n  " in path.read_text(encoding="utf-8")


def test_initialize_twice_does_not_duplicate_seed(tmp_path):
    path = tmp_path / "sites.json"
    JSONFileSiteStorage(path).initialize()
    JSONFileSiteStorage(path).initialize()
    assert len(JSONFileSiteStorage(path).list_all()) == len(INITIAL_SITES)


def test_empty_seed_crud_flow(tmp_path):
    storage = JSONFileSiteStorage(tmp_path / "sites.json", seed=())
    assert storage.list_all() == []

    created = storage.add(_draft("Foo"))
    assert created.id
    assert created.name == "Foo"
    assert storage.list_all() == [created]

    updated = storage.update(created.id, _draft("Bar"))
    assert updated is not None
    assert updated.id == created.id
    assert updated.name == "Bar"

    assert storage.delete(created.id) is True
    assert storage.list_all() == []


def test_add_preserves_insertion_order_and_unique_ids(tmp_path):
    storage = JSONFileSiteStorage(tmp_path / "sites.json", seed=())
    created = [storage.add(_draft(f"site-{i}")) for i in range(5)]
    listed = storage.list_all()
    assert [s.name for s in listed] == [f"site-{i}" for i in range(5)]
    assert len({s.id for s in created}) == 5


def test_missing_ids_leave_collection_unchanged(tmp_path):
    storage = JSONFileSiteStorage(tmp_path / "sites.json")
    before = storage.list_all()
    assert storage.update("nope", _draft()) is None
    assert storage.delete("nope") is False
    assert storage.list_all() == before


def test_delete_removes_exactly_one(tmp_path):
    storage = JSONFileSiteStorage(tmp_path / "sites.json")
    before = storage.list_all()
    assert storage.delete(before[0].id) is True
    after = storage.list_all()
    assert len(after) == len(before) - 1
    assert before[0].id not in {s.id for s in after}


def test_corrupt_file_degrades_to_seed_without_repair(tmp_path):
    path = tmp_path / "sites.json"
    path.write_text("{not json", encoding="utf-8")
    storage = JSONFileSiteStorage(path)
    assert storage.list_all() == list(INITIAL_SITES)
    assert path.read_text(encoding="utf-8") == "{not json"


def test_write_failure_is_reported(tmp_path):
    # a directory where the file should be makes every write fail
    path = tmp_path / "sites.json"
    path.mkdir()
    storage = JSONFileSiteStorage(path, seed=())
    assert storage.save([]) is False
    with pytest.raises(StorageWriteError):
        storage.add(_draft())
