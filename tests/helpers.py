"""Test doubles shared across test modules."""
import asyncio
from typing import List, Optional, Sequence, Tuple

from s3drop.models import SelectedFile


class FakeTransport:
    """In-memory IUploadTransport with scripted progress and outcome."""

    def __init__(
        self,
        status: int = 200,
        steps: Optional[Sequence[Tuple[int, int]]] = None,
        error: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.status = status
        self.steps = steps
        self.error = error
        self.gate = gate
        self.calls: List[Tuple[str, SelectedFile]] = []
        self.active = 0
        self.max_active = 0

    async def put(self, url, file, progress_callback=None):
        self.calls.append((url, file))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            steps = self.steps if self.steps is not None else [(file.size, file.size)]
            for sent, total in steps:
                if progress_callback:
                    await progress_callback(sent, total)
            if self.error is not None:
                raise self.error
            return self.status
        finally:
            self.active -= 1


async def run_until(predicate, attempts: int = 200):
    """Yield to the event loop until predicate() holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")
