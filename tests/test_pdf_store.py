from pathlib import Path

import pytest

from utils.pdf_store import PathOutsideStoreError, PdfStore

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\n\x00\xff\x10trailer\n%%EOF"


def test_save_then_read_returns_identical_bytes(tmp_path):
    store = PdfStore(tmp_path / "pdfs")
    path = store.save("notes.pdf", PDF_BYTES)
    assert Path(path).is_absolute()
    assert Path(path) == (tmp_path / "pdfs" / "notes.pdf").resolve()
    assert store.read(path) == PDF_BYTES


def test_save_creates_directory_and_overwrites(tmp_path):
    store = PdfStore(tmp_path / "nested" / "pdfs")
    first = store.save("notes.pdf", b"first")
    second = store.save("notes.pdf", b"second")
    assert first == second
    assert store.read(second) == b"second"
    assert sorted(p.name for p in (tmp_path / "nested" / "pdfs").iterdir()) == ["notes.pdf"]


def test_delete_removes_file(tmp_path):
    store = PdfStore(tmp_path / "pdfs")
    path = store.save("a.pdf", b"a")
    store.delete(path)
    assert not Path(path).exists()
    with pytest.raises(FileNotFoundError):
        store.read(path)
    with pytest.raises(FileNotFoundError):
        store.delete(path)


@pytest.mark.parametrize("name", ["", ".", "..", "../escape.pdf", "sub/dir.pdf"])
def test_save_rejects_names_leaving_the_directory(tmp_path, name):
    store = PdfStore(tmp_path / "pdfs")
    with pytest.raises(PathOutsideStoreError):
        store.save(name, b"x")
    assert not (tmp_path / "escape.pdf").exists()


def test_read_and_delete_refuse_paths_outside_the_directory(tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_bytes(b"secret")
    store = PdfStore(tmp_path / "pdfs")
    store.save("inside.pdf", b"x")
    sneaky = tmp_path / "pdfs" / ".." / "secret.txt"
    for path in (outside, sneaky, tmp_path / "pdfs"):
        with pytest.raises(PathOutsideStoreError):
            store.read(path)
        with pytest.raises(PathOutsideStoreError):
            store.delete(path)
    assert outside.read_bytes() == b"secret"
