"""Core orchestrator - tracks entries and drives upload and delete sequences."""
import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..errors import DeleteError, PresignError, TransportError
from ..models import (
    DeleteResult,
    EntryStatus,
    FileEntry,
    Notification,
    Rejection,
    SelectedFile,
    UploadConfig,
    UploadResult,
)
from ..protocols import IAPIClient, IUploadTransport
from ..services.api_client import HTTPAPIClient
from ..services.transport import PresignedUploadTransport
from ..utils.events import EventEmitter, FileProgress
from .accept import AcceptFilter

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = (200, 204)


class UploadOrchestrator:
    """
    Orchestrates direct-to-storage uploads using injected services.

    Every accepted file becomes a FileEntry tracked by a stable id. Entries are
    immutable; each change replaces the record under its id, so concurrent
    upload tasks never touch each other's state.

    Usage:
        async with UploadOrchestrator("http://localhost:8000") as uploader:
            uploader.on_progress(lambda p: print(p.filename, p.percent))
            await uploader.select([SelectedFile.from_path(path)])
            results = await uploader.wait()

            entry = uploader.entries[0]
            if entry.can_delete:
                await uploader.remove(entry.id)
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        config: Optional[UploadConfig] = None,
        api_client: Optional[IAPIClient] = None,
        transport: Optional[IUploadTransport] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            api_url: Base URL of the presign/delete API (needed unless api_client is given)
            config: Acceptance policy and endpoint configuration
            api_client: Pre-built presign/delete client
            transport: Pre-built binary upload transport
        """
        self._api_url = api_url
        self._config = config or UploadConfig()
        self._api_client = api_client
        self._transport = transport
        self._owned: List = []

        self._filter = AcceptFilter(self._config)
        self._events = EventEmitter()
        self._entries: Dict[str, FileEntry] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._results: Dict[str, UploadResult] = {}

    async def __aenter__(self):
        """Build missing services."""
        if self._api_client is None:
            if not self._api_url:
                raise ValueError("Either api_url or api_client must be provided")
            self._api_client = HTTPAPIClient(self._api_url, self._config)
            self._owned.append(self._api_client)
        if self._transport is None:
            self._transport = PresignedUploadTransport(self._config)
            self._owned.append(self._transport)

        for service in self._owned:
            await service.__aenter__()
        return self

    async def __aexit__(self, *args):
        """Wait for in-flight uploads, then close owned services."""
        try:
            await self.wait()
        finally:
            for service in reversed(self._owned):
                await service.__aexit__(*args)
            self._owned.clear()

    # Event subscription methods
    def on_entry_added(self, callback: Callable[[FileEntry], None]):
        self._events.on("entry_added", callback)

    def on_entry_updated(self, callback: Callable[[FileEntry], None]):
        """Called after every replacement of an entry record."""
        self._events.on("entry_updated", callback)

    def on_entry_removed(self, callback: Callable[[FileEntry], None]):
        self._events.on("entry_removed", callback)

    def on_progress(self, callback: Callable[[FileProgress], None]):
        self._events.on("progress", callback)

    def on_upload_complete(self, callback: Callable[[UploadResult], None]):
        self._events.on("upload_complete", callback)

    def on_upload_fail(self, callback: Callable[[UploadResult], None]):
        self._events.on("upload_fail", callback)

    def on_delete_complete(self, callback: Callable[[DeleteResult], None]):
        self._events.on("delete_complete", callback)

    def on_delete_fail(self, callback: Callable[[DeleteResult], None]):
        self._events.on("delete_fail", callback)

    def on_rejected(self, callback: Callable[[Rejection], None]):
        self._events.on("rejected", callback)

    def on_notify(self, callback: Callable[[Notification], None]):
        """Called with every user-facing Notification."""
        self._events.on("notify", callback)

    # State
    @property
    def config(self) -> UploadConfig:
        return self._config

    @property
    def entries(self) -> List[FileEntry]:
        """Snapshot of tracked entries in selection order."""
        return list(self._entries.values())

    def get(self, entry_id: str) -> Optional[FileEntry]:
        return self._entries.get(entry_id)

    def find_by_key(self, key: str) -> List[FileEntry]:
        return [e for e in self._entries.values() if e.key == key]

    @property
    def results(self) -> List[UploadResult]:
        return list(self._results.values())

    async def _notify(self, notification: Notification):
        await self._events.emit("notify", notification)

    async def _update(self, entry_id: str, **changes) -> Optional[FileEntry]:
        """Replace the entry's record; returns None if it is no longer tracked."""
        current = self._entries.get(entry_id)
        if current is None:
            return None
        updated = current.with_changes(**changes)
        self._entries[entry_id] = updated
        await self._events.emit("entry_updated", updated)
        return updated

    async def _drop(self, entry_id: str) -> Optional[FileEntry]:
        removed = self._entries.pop(entry_id, None)
        self._tasks.pop(entry_id, None)
        self._results.pop(entry_id, None)
        if removed is not None:
            await self._events.emit("entry_removed", removed)
        return removed

    # Selection
    async def select(self, files: Sequence[SelectedFile]) -> List[FileEntry]:
        """
        Accept a batch of files and start uploading each one.

        Rejected files create no entries; they are reported one by one on the
        ``rejected`` event and summarised as one notification per reason.

        Returns:
            The entries created for accepted files
        """
        accepted, rejections = self._filter.filter(list(files))

        if rejections:
            logger.info(f"Rejected {len(rejections)} of {len(files)} selected file(s)")
            for rejection in rejections:
                await self._events.emit("rejected", rejection)
            seen = []
            for rejection in rejections:
                if rejection.code not in seen:
                    seen.append(rejection.code)
                    await self._notify(Notification.error(rejection.message))

        created = []
        for file in accepted:
            entry = FileEntry(file=file)
            self._entries[entry.id] = entry
            created.append(entry)
            await self._events.emit("entry_added", entry)

        for entry in created:
            self._tasks[entry.id] = asyncio.create_task(self._run_upload(entry.id))

        if created:
            logger.info(f"Accepted {len(created)} file(s), uploads started")
        return created

    # Upload sequence
    async def _run_upload(self, entry_id: str) -> UploadResult:
        entry = self._entries[entry_id]
        try:
            result = await self._upload(entry_id)
        except Exception as e:
            logger.exception(f"Unexpected error uploading {entry.filename}")
            result = await self._fail(entry_id, f"Unexpected error: {e}")
        if entry_id in self._entries:
            self._results[entry_id] = result
        return result

    @staticmethod
    def _untracked(entry_id: str, filename: str, key: Optional[str] = None) -> UploadResult:
        logger.debug(f"Entry for {filename} was removed during upload")
        return UploadResult.fail(entry_id, filename, "Entry removed", key=key)

    async def _upload(self, entry_id: str) -> UploadResult:
        entry = await self._update(entry_id, status=EntryStatus.REQUESTING)
        if entry is None:
            return self._untracked(entry_id, "")
        file = entry.file

        # 1. Presigned URL
        try:
            presigned = await self._api_client.presign(file.name, file.content_type, file.size)
        except PresignError as e:
            logger.warning(f"Presign failed for {file.name}: {e}")
            return await self._fail(entry_id, str(e))

        # 2. Direct upload
        if await self._update(entry_id, key=presigned.key, status=EntryStatus.UPLOADING) is None:
            return self._untracked(entry_id, file.name)

        async def on_progress(sent: int, total: int):
            await self._apply_progress(entry_id, sent, total)

        try:
            status_code = await self._transport.put(presigned.presigned_url, file, on_progress)
        except TransportError as e:
            logger.warning(str(e))
            return await self._fail(entry_id, str(e))

        if status_code not in SUCCESS_STATUS_CODES:
            return await self._fail(entry_id, f"Upload failed with status: {status_code}")

        # 3. Done
        done = await self._update(entry_id, status=EntryStatus.UPLOADED, progress=100, error=None)
        if done is None:
            return self._untracked(entry_id, file.name, presigned.key)
        result = UploadResult.ok(entry_id, file.name, presigned.key)
        logger.info(f"Uploaded {file.name} as {presigned.key}")
        await self._notify(Notification.success("File uploaded successfully"))
        await self._events.emit("upload_complete", result)
        return result

    async def _apply_progress(self, entry_id: str, sent: int, total: int):
        if total <= 0:
            return
        percent = min(int(sent * 100 / total + 0.5), 100)
        current = self._entries.get(entry_id)
        if current is None or current.status != EntryStatus.UPLOADING:
            return
        if percent <= current.progress:
            return
        await self._update(entry_id, progress=percent)
        await self._events.emit(
            "progress",
            FileProgress(
                entry_id=entry_id,
                filename=current.filename,
                bytes_uploaded=sent,
                total_bytes=total,
                percent=percent,
            ),
        )

    async def _fail(self, entry_id: str, error: str) -> UploadResult:
        entry = await self._update(
            entry_id,
            status=EntryStatus.UPLOAD_FAILED,
            progress=0,
            error=error,
        )
        if entry is None:
            return self._untracked(entry_id, "")
        result = UploadResult.fail(entry_id, entry.filename, error, key=entry.key)
        await self._notify(Notification.error(f"Upload failed: {entry.filename}"))
        await self._events.emit("upload_fail", result)
        return result

    async def wait(self) -> List[UploadResult]:
        """Wait for every upload started so far and return their results."""
        pending = [t for t in self._tasks.values() if not t.done()]
        if pending:
            await asyncio.gather(*pending)
        return self.results

    # Delete sequence
    async def remove(self, entry_id: str) -> DeleteResult:
        """
        Delete the stored object of an entry and drop the entry.

        Entries without a key, with an upload in flight or with a delete
        already pending are left untouched and no request is sent.

        Raises:
            KeyError: unknown entry_id
        """
        entry = self._entries.get(entry_id)
        if entry is None:
            raise KeyError(entry_id)

        if not entry.can_delete:
            return self._refuse(entry, entry.key)

        return await self._delete(entry.key, [entry_id])

    async def delete_key(self, key: str) -> DeleteResult:
        """
        Delete an object by key.

        Entries holding the key are dropped on success; with no such entry
        the request is still sent and the collection stays as it is. If any
        entry holding the key is still uploading or already being deleted,
        nothing is sent.
        """
        matches = self.find_by_key(key)
        for entry in matches:
            if not entry.can_delete:
                return self._refuse(entry, key)
        return await self._delete(key, [e.id for e in matches])

    @staticmethod
    def _refuse(entry: FileEntry, key: Optional[str]) -> DeleteResult:
        if entry.deleting:
            reason = "Delete already in progress"
        elif entry.in_flight:
            reason = "Upload still in progress"
        else:
            reason = "File has no storage key"
        logger.debug(f"Not deleting {entry.filename}: {reason}")
        return DeleteResult.fail(key, reason)

    async def _delete(self, key: str, entry_ids: List[str]) -> DeleteResult:
        for entry_id in entry_ids:
            await self._update(entry_id, deleting=True)

        try:
            message = await self._api_client.delete(key)
        except DeleteError as e:
            logger.warning(f"Delete failed for {key}: {e}")
            for entry_id in entry_ids:
                await self._update(entry_id, deleting=False)
            result = DeleteResult.fail(key, str(e))
            await self._notify(Notification.error("Failed to remove file from storage."))
            await self._events.emit("delete_fail", result)
            return result

        removed = 0
        for entry_id in entry_ids:
            await self._update(entry_id, deleting=False)
            if await self._drop(entry_id) is not None:
                removed += 1

        result = DeleteResult.ok(key, removed, message=message or None)
        logger.info(f"Deleted {key} ({removed} entry removed)")
        await self._notify(Notification.success("File removed successfully"))
        await self._events.emit("delete_complete", result)
        return result
