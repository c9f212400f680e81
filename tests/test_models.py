"""Tests for s3drop models."""
import pytest

from s3drop.models import (
    MB,
    DeleteResult,
    EntryStatus,
    FileEntry,
    Notification,
    SelectedFile,
    UploadConfig,
    UploadResult,
)


class TestUploadResult:
    def test_ok_result(self):
        result = UploadResult.ok(entry_id="e1", filename="photo.png", key="abc123")
        assert result.success is True
        assert result.status == EntryStatus.UPLOADED
        assert result.key == "abc123"

    def test_fail_result(self):
        result = UploadResult.fail(entry_id="e1", filename="photo.png", error="Upload failed")
        assert result.success is False
        assert result.status == EntryStatus.UPLOAD_FAILED
        assert result.error == "Upload failed"
        assert result.key is None

    def test_immutable(self):
        result = UploadResult.ok("e1", "photo.png", "abc123")
        with pytest.raises(Exception):
            result.key = "xyz"


class TestDeleteResult:
    def test_ok(self):
        result = DeleteResult.ok("abc123", removed=1, message="File deleted successfully")
        assert result.success is True
        assert result.removed == 1

    def test_fail(self):
        result = DeleteResult.fail("abc123", "boom")
        assert result.success is False
        assert result.removed == 0
        assert result.error == "boom"


class TestSelectedFile:
    def test_from_path_guesses_type(self, tmp_path):
        path = tmp_path / "cat.jpg"
        path.write_bytes(b"x" * 10)
        f = SelectedFile.from_path(path)
        assert f.name == "cat.jpg"
        assert f.size == 10
        assert f.content_type == "image/jpeg"

    def test_from_path_unknown_type(self, tmp_path):
        path = tmp_path / "blob.unknownext"
        path.write_bytes(b"x")
        assert SelectedFile.from_path(path).content_type == ""

    def test_iter_chunks_from_bytes(self):
        f = SelectedFile.from_bytes("a.png", b"0123456789")
        assert list(f.iter_chunks(4)) == [b"0123", b"4567", b"89"]
        assert f.content_type == "image/png"

    def test_iter_chunks_from_path(self, tmp_path):
        path = tmp_path / "a.png"
        path.write_bytes(b"abcdef")
        f = SelectedFile.from_path(path)
        assert b"".join(f.iter_chunks(4)) == b"abcdef"

    def test_iter_chunks_without_payload(self):
        f = SelectedFile(name="ghost.png", size=1, content_type="image/png")
        with pytest.raises(ValueError):
            list(f.iter_chunks())


class TestFileEntry:
    def test_defaults(self):
        entry = FileEntry(file=SelectedFile.from_bytes("a.png", b"x"))
        assert entry.status == EntryStatus.QUEUED
        assert entry.progress == 0
        assert entry.key is None
        assert entry.deleting is False
        assert entry.in_flight is True
        assert entry.can_delete is False

    def test_ids_are_unique(self):
        f = SelectedFile.from_bytes("a.png", b"x")
        assert FileEntry(file=f).id != FileEntry(file=f).id

    def test_with_changes_keeps_identity(self):
        entry = FileEntry(file=SelectedFile.from_bytes("a.png", b"x"))
        updated = entry.with_changes(status=EntryStatus.UPLOADED, key="k", progress=100)
        assert updated.id == entry.id
        assert entry.status == EntryStatus.QUEUED
        assert updated.can_delete is True

    def test_cannot_delete_while_deleting(self):
        entry = FileEntry(
            file=SelectedFile.from_bytes("a.png", b"x"),
            key="k",
            status=EntryStatus.UPLOADED,
            deleting=True,
        )
        assert entry.can_delete is False


class TestUploadConfig:
    def test_default_config(self):
        config = UploadConfig()
        assert config.max_files == 5
        assert config.max_file_size == 10 * MB
        assert config.accept == ("image/*",)
        assert config.presign_endpoint == "/api/s3/upload"
        assert config.delete_endpoint == "/api/s3/delete"
        assert config.max_file_size_label == "10MB"

    def test_accepts_wildcard(self):
        config = UploadConfig()
        assert config.accepts_type("image/png") is True
        assert config.accepts_type("IMAGE/JPEG") is True
        assert config.accepts_type("image/svg+xml; charset=utf-8") is True
        assert config.accepts_type("video/mp4") is False
        assert config.accepts_type("imagefoo/png") is False
        assert config.accepts_type("") is False

    def test_accepts_exact(self):
        config = UploadConfig(accept=("image/png", "application/pdf"))
        assert config.accepts_type("application/pdf") is True
        assert config.accepts_type("image/jpeg") is False


def test_notification_levels():
    assert Notification.success("ok").level == "success"
    assert Notification.error("bad").level == "error"
