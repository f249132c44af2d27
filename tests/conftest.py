import asyncio
from datetime import datetime, timedelta

import pytest

from remindly.core.app import RemindersApp
from remindly.datamodel import Notification, PermissionState
from remindly.storage.kv import KeyValueStore
from remindly.world.notifier import Notifier
from remindly.world.permission import PermissionHost


class FakeClock:
    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeLLMClient:
    def __init__(self, response_text: str = "{}", error: Exception | None = None, delay: float = 0.0):
        self.response_text = response_text
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def generate_json(self, prompt: str, schema: dict) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response_text


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False):
        self.sent: list[Notification] = []
        self.fail = fail

    async def send(self, notification: Notification) -> None:
        if self.fail:
            raise OSError("notification daemon unavailable")
        self.sent.append(notification)


class FakePermissionHost(PermissionHost):
    def __init__(self, state: PermissionState = PermissionState.UNSET, answer: PermissionState = PermissionState.GRANTED):
        self.state = state
        self.answer = answer
        self.requests = 0

    async def read(self) -> PermissionState:
        return self.state

    async def request(self) -> PermissionState:
        self.requests += 1
        self.state = self.answer
        return self.answer


class FailingKV:
    """Key-value backend whose writes always fail."""

    def __init__(self, stored: str | None = None):
        self.stored = stored

    async def get(self, key: str) -> str | None:
        return self.stored

    async def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 5, 12, 0))


@pytest.fixture
async def kv(tmp_path):
    store = KeyValueStore(str(tmp_path / "data" / "remindly.db"))
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_app(kv, clock, notifier):
    """Build and load a RemindersApp without starting the periodic task."""
    async def _make(
        permission: PermissionState = PermissionState.GRANTED,
        llm_client=None,
        host: PermissionHost | None = None,
    ) -> RemindersApp:
        app = RemindersApp(
            kv=kv,
            permission_host=host or FakePermissionHost(permission),
            notifier=notifier,
            llm_client=llm_client,
            now=clock,
        )
        await app.start(run_scheduler=False)
        return app
    return _make
