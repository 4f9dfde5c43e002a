import json
from datetime import datetime, timedelta, timezone

import pytest

from workshot.storage import Metadata, SnapshotNotFoundError, Storage, StorageError
from workshot.types import SCHEMA_VERSION, new_snapshot


@pytest.fixture
def store(tmp_path):
    return Storage(tmp_path)


def test_storage_save_load(tmp_path, store):
    snap = new_snapshot("test-snapshot")
    snap.working_dir = "C:\\test\\dir"
    snap.git_branch = "main"
    snap.git_remote = "https://github.com/test/repo.git"
    store.save(snap)

    expected_path = tmp_path / ".workshot" / "shots" / "test-snapshot.json"
    assert expected_path.is_file()

    loaded = store.load("test-snapshot")
    assert loaded.name == snap.name
    assert loaded.working_dir == snap.working_dir
    assert loaded.git_branch == snap.git_branch
    assert loaded.git_remote == snap.git_remote
    assert loaded.created_at == snap.created_at


def test_storage_list(store):
    names = ["snap1", "snap2", "snap3"]
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for offset, name in enumerate(names):
        snap = new_snapshot(name)
        snap.working_dir = "C:\\test"
        snap.created_at = base + timedelta(minutes=offset)
        store.save(snap)

    metadata_list = store.list()
    assert len(metadata_list) == len(names)
    assert [meta.name for meta in metadata_list] == ["snap3", "snap2", "snap1"]
    for newer, older in zip(metadata_list, metadata_list[1:]):
        assert newer.created_at >= older.created_at


def test_storage_delete(store):
    snap = new_snapshot("to-delete")
    snap.working_dir = "C:\\test"
    store.save(snap)

    assert store.exists("to-delete")
    store.delete("to-delete")
    assert not store.exists("to-delete")
    assert [meta.name for meta in store.list()] == []


def test_storage_schema_version(store):
    snap = new_snapshot("version-test")
    snap.working_dir = "C:\\test"
    store.save(snap)

    loaded = store.load("version-test")
    assert loaded.schema_version == SCHEMA_VERSION


def test_load_missing_raises(store):
    with pytest.raises(SnapshotNotFoundError, match="workshot 'ghost' not found"):
        store.load("ghost")


def test_delete_missing_raises(store):
    with pytest.raises(SnapshotNotFoundError, match="workshot 'ghost' not found"):
        store.delete("ghost")


def test_save_rejects_other_schema_version(store):
    snap = new_snapshot("future")
    snap.schema_version = SCHEMA_VERSION + 1
    with pytest.raises(StorageError, match="schema version mismatch"):
        store.save(snap)
    assert not store.exists("future")


def test_old_schema_is_migrated_on_load(store):
    path = store.base_path / "old.json"
    path.write_text(
        json.dumps({"name": "old", "created_at": "2024-01-01T00:00:00Z", "working_dir": "/w"}),
        encoding="utf-8",
    )
    loaded = store.load("old")
    assert loaded.schema_version == SCHEMA_VERSION
    assert loaded.working_dir == "/w"


def test_corrupt_snapshot_raises_on_load(store):
    (store.base_path / "broken.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError, match="failed to unmarshal snapshot"):
        store.load("broken")


def test_index_records_saved_snapshots(store):
    snap = new_snapshot("indexed")
    snap.working_dir = "/w"
    snap.git_branch = "dev"
    store.save(snap)

    index = json.loads(store.index_path.read_text(encoding="utf-8"))
    assert index["version"] == 1
    assert index["snapshots"]["indexed"]["git_branch"] == "dev"
    assert index["snapshots"]["indexed"]["working_dir"] == "/w"


def test_list_rebuilds_missing_index(store):
    for name in ["a", "b"]:
        snap = new_snapshot(name)
        snap.working_dir = "/w"
        store.save(snap)
    store.index_path.unlink()

    names = sorted(meta.name for meta in store.list())
    assert names == ["a", "b"]
    assert store.index_path.is_file()


def test_rebuild_skips_corrupt_snapshots(store, capsys):
    snap = new_snapshot("good")
    snap.working_dir = "/w"
    store.save(snap)
    (store.base_path / "bad.json").write_text("[]", encoding="utf-8")
    store.index_path.write_text("garbage", encoding="utf-8")

    assert [meta.name for meta in store.list()] == ["good"]
    assert "skipping corrupted snapshot 'bad'" in capsys.readouterr().err


def test_saving_twice_keeps_one_entry(store):
    snap = new_snapshot("same")
    snap.working_dir = "/first"
    store.save(snap)
    snap.working_dir = "/second"
    store.save(snap)

    entries = store.list()
    assert [meta.working_dir for meta in entries] == ["/second"]
    assert list(store.base_path.glob("*.tmp")) == []


def test_metadata_round_trip_and_omits_empty_branch():
    meta = Metadata(
        name="m",
        created_at=datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc),
        working_dir="/w",
    )
    data = meta.to_dict()
    assert "git_branch" not in data
    assert Metadata.from_dict(data) == meta