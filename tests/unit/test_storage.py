"""Unit tests for local file storage."""

from pathlib import Path

import pytest

from backend.docqa.docs import storage as storage_module
from backend.docqa.docs.storage import LocalFileStorage, make_stored_filename


def test_make_stored_filename_replaces_whitespace() -> None:
    """Test stored names are <epoch-ms>-<token>-<name> with whitespace replaced."""
    stored = make_stored_filename("my annual  report.pdf", now_ms=1700000000000, token="ab12cd34")

    assert stored == "1700000000000-ab12cd34-my_annual_report.pdf"


def test_make_stored_filename_strips_directories() -> None:
    """Test path components in the uploaded name are dropped."""
    assert make_stored_filename("../../etc/passwd", now_ms=1, token="t") == "1-t-passwd"
    assert make_stored_filename("C:\\Users\\me\\notes.txt", now_ms=1, token="t") == "1-t-notes.txt"


def test_make_stored_filename_differs_within_one_millisecond() -> None:
    """Test the random token separates same-name uploads at the same instant."""
    names = {make_stored_filename("report.pdf", now_ms=1) for _ in range(50)}

    assert len(names) == 50
    assert all(name.startswith("1-") and name.endswith("-report.pdf") for name in names)


def test_repeated_saves_of_same_name_are_distinct(tmp_path: Path) -> None:
    """Test saving one filename many times keeps every upload's bytes."""
    storage = LocalFileStorage(tmp_path / "uploads")

    stored = [storage.save("report.pdf", f"upload {i}".encode()) for i in range(50)]

    assert len(set(stored)) == 50
    for i, name in enumerate(stored):
        assert storage.path_for(name).read_bytes() == f"upload {i}".encode()


def test_save_never_overwrites_existing_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test a name collision retries with a fresh token instead of overwriting."""
    storage = LocalFileStorage(tmp_path / "uploads")
    tokens = iter(["same", "same", "fresh"])

    def fixed_name(original_name: str) -> str:
        return make_stored_filename(original_name, now_ms=1, token=next(tokens))

    monkeypatch.setattr(storage_module, "make_stored_filename", fixed_name)

    first = storage.save("report.pdf", b"first")
    second = storage.save("report.pdf", b"second")

    assert first == "1-same-report.pdf"
    assert second == "1-fresh-report.pdf"
    assert storage.path_for(first).read_bytes() == b"first"
    assert storage.path_for(second).read_bytes() == b"second"


def test_save_and_delete(tmp_path: Path) -> None:
    """Test saved bytes land under the root and can be deleted."""
    storage = LocalFileStorage(tmp_path / "uploads")

    stored = storage.save("notes.txt", b"hello")
    path = storage.path_for(stored)

    assert path.parent == tmp_path / "uploads"
    assert path.read_bytes() == b"hello"

    assert storage.delete(stored) is True
    assert not path.exists()


def test_delete_missing_file_is_not_an_error(tmp_path: Path) -> None:
    """Test deleting an absent file returns False instead of raising."""
    storage = LocalFileStorage(tmp_path)

    assert storage.delete("123-missing.txt") is False


def test_path_for_rejects_traversal(tmp_path: Path) -> None:
    """Test stored names containing separators are rejected."""
    storage = LocalFileStorage(tmp_path)

    with pytest.raises(ValueError):
        storage.path_for("../outside.txt")
