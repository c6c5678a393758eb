"""In-process stand-ins for Gemini and local storage."""

import asyncio
from typing import Iterable, Optional

from app.core.storage import LocalStorage, StorageError


class FakeTextGenerator:
    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate(self, payload, mode):
        self.calls.append((payload, mode))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.response


class FakeImageGenerator:
    """Returns deterministic bytes per prompt; fails for prompts containing a marker."""

    def __init__(self, fail_on: Iterable[str] = (), delay: float = 0.0):
        self.fail_on = list(fail_on)
        self.delay = delay
        self.prompts = []
        self.completed = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate_image(self, prompt: str) -> bytes:
        self.prompts.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if any(marker in prompt for marker in self.fail_on):
                raise RuntimeError("image service unavailable")
            return f"icon:{prompt}".encode("utf-8")
        finally:
            self.in_flight -= 1
            self.completed += 1


class MemoryStorage(LocalStorage):
    """Dict-backed storage; ``fail_reads``/``fail_writes`` simulate a broken backend."""

    def __init__(self, data: Optional[dict] = None, *, fail_reads=False, fail_writes=False):
        self.data = dict(data or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = 0

    async def get_item(self, key):
        if self.fail_reads:
            raise StorageError(f"Failed to read '{key}'")
        return self.data.get(key)

    async def set_item(self, key, value):
        if self.fail_writes:
            raise StorageError(f"Failed to write '{key}'")
        self.writes += 1
        self.data[key] = value

    async def remove_item(self, key):
        if self.fail_writes:
            raise StorageError(f"Failed to remove '{key}'")
        self.data.pop(key, None)
