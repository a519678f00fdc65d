from __future__ import annotations

import io
import zipfile
from dataclasses import FrozenInstanceError

import pytest

from artifactfs.classify import ArtifactKind
from artifactfs.errors import AlreadyExistsError, InvalidPathError, NotFoundError
from artifactfs.events import EventKind, FileEvent
from artifactfs.store import ArtifactStore


def _paths(store: ArtifactStore) -> list[str]:
    return sorted(r.path for r in store.list_files())


def _record_events(store: ArtifactStore) -> list[FileEvent]:
    events: list[FileEvent] = []
    for kind in EventKind:
        store.subscribe(kind, events.append)
    return events


# ---------------------------------------------------------------------------
# create / get
# ---------------------------------------------------------------------------


def test_create_then_get_round_trip(store):
    record = store.create_file("/a.txt", "hi")
    assert store.get_file("/a.txt").content == "hi"
    assert record.content_type is ArtifactKind.TEXT
    assert record.created_at == record.updated_at


def test_create_classifies_content_type(store):
    assert store.create_file("/docs/guide.md", "# hi").content_type is ArtifactKind.MARKDOWN


@pytest.mark.parametrize("bad", ["", "a.txt", "/a//b.txt", "/dir/"])
def test_create_rejects_malformed_paths(store, bad):
    with pytest.raises(InvalidPathError):
        store.create_file(bad, "x")
    assert store.version == 0


def test_create_existing_path_fails(store):
    store.create_file("/a.txt", "one")
    with pytest.raises(AlreadyExistsError):
        store.create_file("/a.txt", "two")
    assert store.get_file("/a.txt").content == "one"
    assert store.version == 1


def test_create_over_folder_fails(store):
    store.create_file("/src/a.ts", "")
    with pytest.raises(AlreadyExistsError, match="folder"):
        store.create_file("/src", "x")


def test_create_below_file_fails(store):
    store.create_file("/notes", "")
    with pytest.raises(AlreadyExistsError, match="parent /notes is a file"):
        store.create_file("/notes/today.md", "x")


def test_create_rejects_non_string_content(store):
    with pytest.raises(TypeError):
        store.create_file("/a.bin", b"bytes")


def test_get_missing_or_malformed_returns_none(store):
    assert store.get_file("/missing") is None
    assert store.get_file("not/a/path") is None
    assert store.get_file(None) is None


def test_read_file_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.read_file("/missing.txt")
    with pytest.raises(FileNotFoundError):
        store.read_file("/missing.txt")


def test_idempotent_read(src_store):
    assert src_store.get_file("/src/a.ts") == src_store.get_file("/src/a.ts")


def test_records_are_immutable(store):
    record = store.create_file("/a.txt", "hi")
    with pytest.raises(FrozenInstanceError):
        record.content = "changed"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def test_list_all(src_store):
    assert _paths(src_store) == ["/src/a.ts", "/src/b.ts", "/src2/c.ts"]


@pytest.mark.parametrize("prefix", ["/src", "/src/"])
def test_list_prefix_is_directory_aware(src_store, prefix):
    assert sorted(r.path for r in src_store.list_files(prefix)) == ["/src/a.ts", "/src/b.ts"]


def test_list_root_and_malformed(src_store):
    assert len(src_store.list_files("/")) == 3
    assert src_store.list_files("src") == []
    assert src_store.list_files("/nothing") == []


def test_folders_are_derived(src_store):
    src_store.create_file("/src/deep/x.ts", "")
    assert src_store.folders() == ["/src", "/src/deep", "/src2"]
    assert src_store.is_folder("/src/")
    assert not src_store.is_folder("/src/a.ts")
    assert src_store.kind_of("/src/a.ts") == "file"
    assert src_store.kind_of("/sr") is None


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


def test_update_changes_content_and_timestamp(store):
    created = store.create_file("/a.txt", "one")
    assert store.update_file("/a.txt", "two") is True
    updated = store.get_file("/a.txt")
    assert updated.content == "two"
    assert updated.updated_at > created.updated_at
    assert updated.created_at == created.created_at


def test_update_timestamp_advances_each_time(store):
    store.create_file("/a.txt", "0")
    stamps = []
    for i in range(5):
        store.update_file("/a.txt", str(i))
        stamps.append(store.get_file("/a.txt").updated_at)
    assert stamps == sorted(set(stamps))


def test_update_missing_returns_false(store):
    assert store.update_file("/missing.txt", "x") is False
    assert store.version == 0


def test_update_malformed_raises(store):
    with pytest.raises(InvalidPathError):
        store.update_file("missing.txt", "x")


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


def test_delete_single_file(src_store):
    assert src_store.delete_file("/src/a.ts") is True
    assert _paths(src_store) == ["/src/b.ts", "/src2/c.ts"]


def test_folder_delete_cascades_segment_aware(src_store):
    assert src_store.delete_file("/src") is True
    assert _paths(src_store) == ["/src2/c.ts"]


def test_folder_delete_trailing_slash(src_store):
    assert src_store.delete_file("/src/") is True
    assert _paths(src_store) == ["/src2/c.ts"]


def test_delete_missing_returns_false(src_store):
    version = src_store.version
    assert src_store.delete_file("/sr") is False
    assert src_store.version == version


def test_delete_root_is_invalid(src_store):
    with pytest.raises(InvalidPathError):
        src_store.delete_file("/")


def test_folder_delete_emits_one_event(src_store):
    events = _record_events(src_store)
    version = src_store.version
    src_store.delete_file("/src")
    assert events == [FileEvent(EventKind.DELETED, "/src", folder=True, version=version + 1)]
    assert src_store.version == version + 1


# ---------------------------------------------------------------------------
# rename
# ---------------------------------------------------------------------------


def test_rename_file(store):
    created = store.create_file("/x.txt", "body")
    assert store.rename_file("/x.txt", "/docs/x.md") is True
    assert store.get_file("/x.txt") is None
    moved = store.get_file("/docs/x.md")
    assert moved.content == "body"
    assert moved.created_at == created.created_at
    assert moved.updated_at == created.updated_at
    assert moved.content_type is ArtifactKind.MARKDOWN


def test_rename_no_overwrite(store):
    store.create_file("/x.txt", "x")
    store.create_file("/y.txt", "y")
    assert store.rename_file("/x.txt", "/y.txt") is False
    assert store.get_file("/x.txt").content == "x"
    assert store.get_file("/y.txt").content == "y"


def test_rename_missing_returns_false(store):
    assert store.rename_file("/nope.txt", "/other.txt") is False


def test_rename_validates_new_path_first(store):
    store.create_file("/x.txt", "x")
    with pytest.raises(InvalidPathError):
        store.rename_file("/x.txt", "relative.txt")
    assert store.get_file("/x.txt") is not None
    assert store.version == 1


def test_rename_rejects_trailing_slash_destination(store):
    store.create_file("/x.txt", "x")
    with pytest.raises(InvalidPathError):
        store.rename_file("/x.txt", "/y.txt/")
    assert _paths(store) == ["/x.txt"]
    assert store.version == 1


def test_rename_folder_source_may_have_trailing_slash(src_store):
    assert src_store.rename_file("/src/", "/lib") is True
    assert _paths(src_store) == ["/lib/a.ts", "/lib/b.ts", "/src2/c.ts"]


def test_rename_file_onto_folder_fails(src_store):
    src_store.create_file("/loose.ts", "")
    assert src_store.rename_file("/loose.ts", "/src") is False


def test_rename_file_below_itself(store):
    store.create_file("/a", "x")
    assert store.rename_file("/a", "/a/b") is True
    assert _paths(store) == ["/a/b"]


def test_subtree_rename(src_store):
    src_store.create_file("/src/deep/d.ts", "d")
    assert src_store.rename_file("/src", "/lib") is True
    assert _paths(src_store) == ["/lib/a.ts", "/lib/b.ts", "/lib/deep/d.ts", "/src2/c.ts"]
    assert src_store.list_files("/src") == []


def test_subtree_rename_is_atomic_on_collision(src_store):
    src_store.create_file("/lib/a.ts", "existing")
    before = {r.path: r for r in src_store.list_files()}
    version = src_store.version
    assert src_store.rename_file("/src", "/lib") is False
    after = {r.path: r for r in src_store.list_files()}
    assert after == before
    assert src_store.version == version


def test_subtree_rename_into_file_path_fails(src_store):
    src_store.create_file("/lib", "i am a file")
    assert src_store.rename_file("/src", "/lib/nested") is False
    assert src_store.rename_file("/src", "/lib") is False


def test_subtree_rename_into_itself_fails(src_store):
    assert src_store.rename_file("/src", "/src/inner") is False
    assert src_store.rename_file("/src", "/src") is False


def test_subtree_rename_emits_one_event(src_store):
    events = _record_events(src_store)
    src_store.rename_file("/src/", "/lib")
    assert [(e.kind, e.old_path, e.path, e.folder) for e in events] == [
        (EventKind.RENAMED, "/src", "/lib", True),
    ]


# ---------------------------------------------------------------------------
# version / events / re-entrancy
# ---------------------------------------------------------------------------


def test_version_monotonic(store):
    seen = [store.version]
    store.create_file("/a.txt", "a")
    seen.append(store.version)
    store.update_file("/a.txt", "b")
    seen.append(store.version)
    store.rename_file("/a.txt", "/b.txt")
    seen.append(store.version)
    store.delete_file("/b.txt")
    seen.append(store.version)
    assert seen == [0, 1, 2, 3, 4]


def test_version_unchanged_by_reads_and_failures(src_store):
    version = src_store.version
    src_store.get_file("/src/a.ts")
    src_store.list_files("/src")
    src_store.download_as_zip()
    src_store.update_file("/missing", "x")
    src_store.delete_file("/missing")
    src_store.rename_file("/missing", "/other")
    with pytest.raises(AlreadyExistsError):
        src_store.create_file("/src/a.ts", "")
    assert src_store.version == version


def test_create_event_order(store):
    calls: list[str] = []
    store.subscribe("fileCreated", lambda e: calls.append("first"))
    store.subscribe(EventKind.CREATED, lambda e: calls.append("second"))
    store.create_file("/a.txt", "")
    assert calls == ["first", "second"]


def test_event_payloads(store):
    events = _record_events(store)
    store.create_file("/a.txt", "")
    store.update_file("/a.txt", "x")
    store.rename_file("/a.txt", "/b.txt")
    store.delete_file("/b.txt")
    assert [(e.kind, e.path, e.old_path, e.version) for e in events] == [
        (EventKind.CREATED, "/a.txt", None, 1),
        (EventKind.UPDATED, "/a.txt", None, 2),
        (EventKind.RENAMED, "/b.txt", "/a.txt", 3),
        (EventKind.DELETED, "/b.txt", None, 4),
    ]


def test_handler_error_does_not_reach_caller(store):
    def boom(e: FileEvent) -> None:
        raise RuntimeError("boom")

    store.subscribe(EventKind.CREATED, boom)
    store.create_file("/a.txt", "fine")
    assert store.get_file("/a.txt").content == "fine"


def test_handler_may_mutate_store(store):
    def mirror(e: FileEvent) -> None:
        if not e.path.startswith("/mirror"):
            store.create_file("/mirror" + e.path, store.read_file(e.path))

    store.subscribe(EventKind.CREATED, mirror)
    store.create_file("/a.txt", "hi")
    assert _paths(store) == ["/a.txt", "/mirror/a.txt"]
    assert store.version == 2


def test_handler_deleting_during_folder_delete(src_store):
    def also_delete(e: FileEvent) -> None:
        if e.folder:
            src_store.delete_file("/src2")

    src_store.subscribe(EventKind.DELETED, also_delete)
    src_store.delete_file("/src")
    assert _paths(src_store) == []


def test_uniqueness_across_operations(store):
    store.create_file("/a/x.txt", "1")
    store.create_file("/b/x.txt", "2")
    store.rename_file("/a", "/c")
    store.rename_file("/b/x.txt", "/c/x.txt")
    store.rename_file("/b", "/c")
    paths = [r.path for r in store.list_files()]
    assert len(paths) == len(set(paths))


# ---------------------------------------------------------------------------
# archive
# ---------------------------------------------------------------------------


def test_download_as_zip(src_store):
    with zipfile.ZipFile(io.BytesIO(src_store.download_as_zip())) as zf:
        assert sorted(zf.namelist()) == ["src/a.ts", "src/b.ts", "src2/c.ts"]
        assert zf.read("src/a.ts").decode() == "export const a = 1;"


def test_dunder_helpers(src_store):
    assert len(src_store) == 3
    assert "/src/a.ts" in src_store
    assert "/src" not in src_store
    assert [r.path for r in src_store] == ["/src/a.ts", "/src/b.ts", "/src2/c.ts"]
