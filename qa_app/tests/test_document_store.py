from __future__ import annotations

"""Document store and upload directory tests."""

import json
from pathlib import Path

import pytest

from qa_app.rag.errors import StorageIOError
from qa_app.store.local import JsonFilePersistence, LocalDocumentStore, MemoryPersistence
from qa_app.store.memory import InMemoryDocumentStore
from qa_app.store.uploads import UploadDirectory, unique_filename


def test_memory_store_assigns_ids_in_insertion_order() -> None:
    store = InMemoryDocumentStore()

    first = store.add(name="a.txt", content="Alpha", size=5)
    second = store.add(name="b.txt", content="Beta", size=4)

    assert (first.id, second.id) == (1, 2)
    assert [document.name for document in store.list()] == ["a.txt", "b.txt"]
    assert len(store.list()) == 2


def test_memory_store_never_reuses_ids_after_delete() -> None:
    store = InMemoryDocumentStore()
    store.add(name="a.txt", content="Alpha", size=5)
    second = store.add(name="b.txt", content="Beta", size=4)

    store.delete(1)
    third = store.add(name="c.txt", content="Gamma", size=5)

    assert third.id == 3
    assert [document.id for document in store.list()] == [second.id, third.id]


def test_memory_store_delete_unknown_id_is_noop() -> None:
    store = InMemoryDocumentStore()
    store.add(name="a.txt", content="Alpha", size=5)

    assert store.delete(99) is None
    assert store.delete("1") is None
    assert [document.id for document in store.list()] == [1]


def test_memory_store_delete_removes_uploaded_file(tmp_path: Path) -> None:
    uploads = UploadDirectory(tmp_path)
    stored = uploads.save("notes.txt", b"Some notes")
    store = InMemoryDocumentStore(uploads=uploads)
    document = store.add(
        name="notes.txt",
        content="Some notes",
        size=10,
        filename=stored.filename,
        path=str(stored.path),
    )

    assert stored.path.exists()
    assert store.delete(document.id) == document
    assert not stored.path.exists()


def test_memory_store_delete_survives_file_errors(tmp_path: Path) -> None:
    class BrokenUploads(UploadDirectory):
        def remove(self, path):
            raise StorageIOError("disk on fire")

    store = InMemoryDocumentStore(uploads=BrokenUploads(tmp_path))
    document = store.add(name="a.txt", content="Alpha", size=5, path=str(tmp_path / "a.txt"))

    assert store.delete(document.id) == document
    assert store.list() == []


def test_upload_directory_writes_unique_names(tmp_path: Path) -> None:
    uploads = UploadDirectory(tmp_path / "nested" / "uploads")

    stored = uploads.save("report.md", b"# Report")

    assert stored.filename.startswith("file-")
    assert stored.filename.endswith(".md")
    assert stored.path.read_text(encoding="utf-8") == "# Report"
    assert uploads.remove(stored.path) is True
    assert uploads.remove(stored.path) is False
    assert uploads.remove(None) is False


def test_unique_filename_keeps_extension() -> None:
    assert unique_filename("archive.tar.gz").endswith(".gz")
    assert unique_filename("README").count(".") == 0


def test_upload_directory_write_failure_raises_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    uploads = UploadDirectory(blocker)

    with pytest.raises(StorageIOError):
        uploads.save("notes.txt", b"data")


def test_local_store_persists_every_mutation() -> None:
    persistence = MemoryPersistence()
    store = LocalDocumentStore(persistence)

    document = store.add("notes.txt", "Quarterly planning notes")

    saved = persistence.data["qa_app_documents"]
    assert saved[0]["id"] == document.id
    assert saved[0]["name"] == "notes.txt"
    assert saved[0]["size"] == len("Quarterly planning notes")
    assert "uploadedAt" in saved[0]

    store.delete(document.id)
    assert persistence.data["qa_app_documents"] == []


def test_local_store_delete_unknown_id_leaves_store_untouched() -> None:
    persistence = MemoryPersistence()
    store = LocalDocumentStore(persistence)
    store.add("notes.txt", "Quarterly planning notes")
    before = list(persistence.data["qa_app_documents"])

    assert store.delete("missing") is None
    assert persistence.data["qa_app_documents"] == before
    assert len(store.list()) == 1


def test_local_store_reloads_from_json_file(tmp_path: Path) -> None:
    path = tmp_path / "store" / "documents.json"
    store = LocalDocumentStore(JsonFilePersistence(path))
    first = store.add("a.txt", "Alpha content")
    store.add("b.txt", "Beta content")

    reloaded = LocalDocumentStore(JsonFilePersistence(path))

    assert [document.name for document in reloaded.list()] == ["a.txt", "b.txt"]
    assert reloaded.get(first.id).content == "Alpha content"
    assert reloaded.get(first.id).uploaded_at == first.uploaded_at


def test_json_persistence_keeps_other_keys(tmp_path: Path) -> None:
    path = tmp_path / "documents.json"
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    JsonFilePersistence(path).save([{"id": "x", "name": "a.txt", "content": "A", "size": 1}])

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["theme"] == "dark"
    assert data["qa_app_documents"][0]["id"] == "x"


def test_json_persistence_corrupt_file_loads_empty(tmp_path: Path) -> None:
    path = tmp_path / "documents.json"
    path.write_text("{not json", encoding="utf-8")

    assert JsonFilePersistence(path).load() == []
    assert LocalDocumentStore(JsonFilePersistence(path)).list() == []


def test_local_store_skips_malformed_records() -> None:
    persistence = MemoryPersistence(
        data={
            "qa_app_documents": [
                {"name": "no-id.txt", "content": "missing id"},
                {"id": "ok", "name": "ok.txt", "content": "fine", "uploadedAt": "2024-05-01T10:00:00Z"},
            ]
        }
    )

    store = LocalDocumentStore(persistence)

    assert [document.id for document in store.list()] == ["ok"]
    assert store.get("ok").size == 4
