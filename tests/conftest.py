from datetime import UTC, datetime

import pytest

from preview_worker.errors import CaptureError, CatalogError, EnrichmentError
from preview_worker.models import CaptureResult
from preview_worker.storage.memory import MemoryRetryStore

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


class FakeCatalog:
    def __init__(self, calls, records=None, fail=()):
        self.calls = calls
        self.records = records or []
        self.fail = set(fail)

    def _maybe_fail(self, op):
        if op in self.fail:
            raise CatalogError(f"{op}: 500")

    async def query(self):
        self._maybe_fail("query")
        return list(self.records)

    async def update_artifact(self, page_id, artifact):
        self.calls.append(("update_artifact", page_id))
        self._maybe_fail("update_artifact")

    async def update_name_and_description(self, page_id, name, description):
        self.calls.append(("update_name_and_description", page_id, name, description))
        self._maybe_fail("update_name_and_description")


class FakeCapturer:
    def __init__(self, calls, title="Example", meta="An example site", fail_urls=()):
        self.calls = calls
        self.title = title
        self.meta = meta
        self.fail_urls = set(fail_urls)

    async def capture(self, url):
        self.calls.append(("capture", url))
        if url in self.fail_urls:
            raise CaptureError(f"timeout on {url}")
        return CaptureResult(artifact=b"\xff\xd8jpeg", title=self.title, meta_description=self.meta)


class FakeDescriber:
    def __init__(self, calls, text="A bold single-page portfolio.", fail=False):
        self.calls = calls
        self.text = text
        self.fail = fail

    async def generate(self, title, meta_description, url):
        self.calls.append(("generate", title, meta_description, url))
        if self.fail:
            raise EnrichmentError("model overloaded")
        return self.text


class SpyStore(MemoryRetryStore):
    """Memory store that also logs mutating calls."""

    def __init__(self, calls, clock=lambda: NOW):
        super().__init__(clock=clock)
        self.calls = calls

    async def record_failure(self, record_id):
        self.calls.append(("record_failure", record_id))
        return await super().record_failure(record_id)

    async def clear_failure(self, record_id):
        self.calls.append(("clear_failure", record_id))
        await super().clear_failure(record_id)

    async def record_capture(self, record_id, at=None):
        self.calls.append(("record_capture", record_id))
        await super().record_capture(record_id, at)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def catalog(calls):
    return FakeCatalog(calls)


@pytest.fixture
def capturer(calls):
    return FakeCapturer(calls)


@pytest.fixture
def describer(calls):
    return FakeDescriber(calls)


@pytest.fixture
def store(calls):
    return SpyStore(calls)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay):
        sleeps.append(delay)

    return _sleep
