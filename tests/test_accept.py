"""Tests for the accept filter and file collection."""
import pytest

from s3drop.models import MB, RejectionCode, UploadConfig
from s3drop.orchestrator.accept import AcceptFilter, FileCollector


@pytest.fixture
def accept_filter():
    return AcceptFilter(UploadConfig())


def test_accepts_valid_batch(accept_filter, make_png):
    files = [make_png(f"{i}.png") for i in range(5)]
    accepted, rejections = accept_filter.filter(files)
    assert accepted == files
    assert rejections == []


def test_too_many_files_rejects_whole_batch(accept_filter, make_png):
    files = [make_png(f"{i}.png") for i in range(6)]
    accepted, rejections = accept_filter.filter(files)
    assert accepted == []
    assert len(rejections) == 6
    assert {r.code for r in rejections} == {RejectionCode.TOO_MANY_FILES}
    assert rejections[0].message == "Too many files selected, max is 5"


def test_size_limit_is_inclusive(accept_filter, make_png):
    at_limit = make_png("limit.png", size=10 * MB)
    over = make_png("over.png", size=10 * MB + 1)
    accepted, rejections = accept_filter.filter([at_limit, over])
    assert accepted == [at_limit]
    assert [(r.filename, r.code) for r in rejections] == [("over.png", RejectionCode.FILE_TOO_LARGE)]
    assert rejections[0].message == "File size exceeds 10MB limit"


def test_invalid_type_rejected(accept_filter, make_png):
    doc = make_png("notes.pdf", content_type="application/pdf")
    unknown = make_png("blob", content_type="")
    ok = make_png("ok.webp", content_type="image/webp")
    accepted, rejections = accept_filter.filter([doc, ok, unknown])
    assert accepted == [ok]
    assert [r.code for r in rejections] == [RejectionCode.FILE_INVALID_TYPE] * 2


def test_custom_limits(make_png):
    accept_filter = AcceptFilter(UploadConfig(max_files=1, max_file_size=100))
    accepted, rejections = accept_filter.filter([make_png("a.png", 50), make_png("b.png", 50)])
    assert accepted == []
    assert rejections[0].message == "Too many files selected, max is 1"


def test_file_collector(tmp_path):
    (tmp_path / "b.png").write_bytes(b"png")
    (tmp_path / "a.jpg").write_bytes(b"jpg")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.gif").write_bytes(b"gif")

    files = FileCollector.collect_files([tmp_path])
    assert [f.name for f in files] == ["a.jpg", "b.png"]

    files = FileCollector.collect_files([tmp_path], recursive=True)
    assert [f.name for f in files] == ["a.jpg", "b.png", "c.gif"]


def test_file_collector_explicit_files(tmp_path):
    path = tmp_path / "one.png"
    path.write_bytes(b"1")
    files = FileCollector.collect_files([path])
    assert files[0].path == path
    assert files[0].content_type == "image/png"


def test_file_collector_missing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileCollector.collect_files([tmp_path / "missing.png"])
