from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from core.errors import NotificationError, UploadError
from core.services import Services, get_services
from utils.store import SubmissionStore
from utils.workflow import SubmissionWorkflow


class FakeUploader:
    """Returns predictable URLs and records every call in order."""

    def __init__(self, fail_at: Optional[int] = None):
        self.fail_at = fail_at
        self.calls: List[bytes] = []

    async def upload(self, buffer: bytes, filename: Optional[str] = None) -> str:
        idx = len(self.calls)
        self.calls.append(buffer)
        if self.fail_at is not None and idx == self.fail_at:
            raise UploadError(f"remote rejected image {idx}")
        return f"https://res.cloudinary.com/demo/image/upload/shiv-fashion-mart/u{idx + 1}.jpg"

    async def close(self) -> None:
        pass


class FakeNotifier:
    def __init__(self, enabled: bool = True, fail_internal: bool = False):
        self.enabled = enabled
        self.fail_internal = fail_internal
        self.internal: List[dict] = []
        self.customer: List[dict] = []

    async def notify_internal(self, submission: dict) -> None:
        if self.fail_internal:
            raise NotificationError("relay refused connection")
        self.internal.append(submission)

    async def notify_customer(self, submission: dict) -> None:
        self.customer.append(submission)


class CountingStore:
    """Wraps a real store and counts inserts."""

    def __init__(self, inner: SubmissionStore):
        self.inner = inner
        self.insert_calls = 0

    def insert(self, *args, **kwargs) -> int:
        self.insert_calls += 1
        return self.inner.insert(*args, **kwargs)

    def list_all(self):
        return self.inner.list_all()


@pytest.fixture(scope="function")
def store(tmp_path) -> SubmissionStore:
    """A real SQLite-backed store in a temp directory."""
    s = SubmissionStore(url=f"sqlite:///{tmp_path / 'data' / 'submissions.db'}")
    s.initialize()
    yield s
    s.dispose()


@pytest.fixture(scope="function")
def counting_store(store) -> CountingStore:
    return CountingStore(store)


@pytest.fixture(scope="function")
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture(scope="function")
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture(scope="function")
def services(counting_store, uploader, notifier) -> Services:
    workflow = SubmissionWorkflow(counting_store, uploader, notifier)
    return Services(
        store=counting_store,
        uploader=uploader,
        notifier=notifier,
        workflow=workflow,
        submit_throttle=None,
        admin_secret="test-admin-secret",
        admin_allowlist_ips=[],
    )


@pytest.fixture(scope="function")
def client(services) -> TestClient:
    """TestClient with fake collaborators; startup hooks are not run."""
    from main import app

    app.dependency_overrides[get_services] = lambda: services
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
