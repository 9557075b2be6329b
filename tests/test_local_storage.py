from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streamverse.domain.seed import INITIAL_SITES  # noqa: E402
from streamverse.domain.sites import SiteDraft  # noqa: E402
from streamverse.repositories.local_storage import (  # noqa: E402
    LocalSiteStorage,
    MemorySlotStore,
    SlotStore,
)


def _draft(name: str = "Foo") -> SiteDraft:
    return SiteDraft(name=name, url="https://foo.test", description="d", category="Anime")


class BrokenSlots:
    def get_item(self, name):
        raise OSError("disk unavailable")

    def set_item(self, name, value):
        raise OSError("disk full")

    def remove_item(self, name):
        raise OSError("disk unavailable")


def test_missing_slot_reads_as_seed():
    storage = LocalSiteStorage(MemorySlotStore())
    assert storage.list_all() == list(INITIAL_SITES)


def test_corrupt_slot_reads_as_seed():
    storage = LocalSiteStorage(MemorySlotStore({"streamverse-sites": "[{oops"}))
    assert storage.list_all() == list(INITIAL_SITES)


def test_initialize_is_idempotent():
    slots = MemorySlotStore()
    storage = LocalSiteStorage(slots)
    first = storage.initialize()
    second = storage.initialize()
    assert first == second == list(INITIAL_SITES)
    assert len(json.loads(slots.get_item("streamverse-sites"))) == len(INITIAL_SITES)


def test_crud_in_named_slot_only():
    slots = MemorySlotStore({"other": "keep"})
    storage = LocalSiteStorage(slots, slot="mine", seed=())
    created = storage.add(_draft())
    assert storage.list_all() == [created]
    assert slots.get_item("other") == "keep"
    assert storage.update("missing", _draft("Bar")) is None
    assert storage.delete("missing") is False
    assert storage.delete(created.id) is True
    assert storage.list_all() == []


def test_file_slots_survive_new_instances(tmp_path):
    path = tmp_path / "client" / "local_storage.json"
    created = LocalSiteStorage(SlotStore(path), seed=()).add(_draft())
    reopened = LocalSiteStorage(SlotStore(path), seed=())
    assert reopened.list_all() == [created]


def test_unreadable_slot_file_degrades_and_is_replaced_on_write(tmp_path):
    path = tmp_path / "local_storage.json"
    path.write_text("[]", encoding="utf-8")
    storage = LocalSiteStorage(SlotStore(path), seed=())
    assert storage.list_all() == []
    created = storage.add(_draft())
    assert storage.list_all() == [created]


def test_broken_medium_never_raises():
    storage = LocalSiteStorage(BrokenSlots())
    assert storage.list_all() == list(INITIAL_SITES)
    created = storage.add(_draft())
    assert created.name == "Foo"
    assert storage.initialize() == list(INITIAL_SITES)


def test_reset_drops_slot_and_reads_seed_again(tmp_path):
    slots = SlotStore(tmp_path / "local.json")
    slots.set_item("other", "kept")
    storage = LocalSiteStorage(slots)
    storage.initialize()
    storage.add(_draft())

    storage.reset()
    assert slots.get_item(storage.slot) is None
    assert slots.get_item("other") == "kept"
    assert storage.list_all() == list(INITIAL_SITES)

    storage.reset()  # already absent
    assert slots.get_item(storage.slot) is None


def test_reset_on_memory_slots_and_broken_slots():
    memory = LocalSiteStorage(MemorySlotStore(), seed=())
    memory.add(_draft())
    memory.reset()
    assert memory.list_all() == []

    class UnremovableSlots(BrokenSlots):
        def remove_item(self, name):
            raise OSError("read-only")

    LocalSiteStorage(UnremovableSlots()).reset()
