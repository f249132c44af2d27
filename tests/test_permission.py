import asyncio
import threading

import pytest

from remindly.datamodel import PermissionState
from remindly.events import Bus, E
from remindly.world.permission import PERMISSION_KEY, PermissionController, StoredPermissionHost

from conftest import FakePermissionHost


async def test_stored_host_starts_unset(kv):
    controller = PermissionController(StoredPermissionHost(kv, prompt=lambda: True))
    assert await controller.load() == PermissionState.UNSET


async def test_grant_is_persisted_and_read_back(kv):
    controller = PermissionController(StoredPermissionHost(kv, prompt=lambda: True))
    await controller.load()
    assert await controller.request() == PermissionState.GRANTED
    assert await kv.get(PERMISSION_KEY) == "granted"

    restarted = PermissionController(StoredPermissionHost(kv, prompt=lambda: False))
    assert await restarted.load() == PermissionState.GRANTED


async def test_denied_is_not_prompted_again(kv):
    prompts = []

    def prompt():
        prompts.append(1)
        return False

    controller = PermissionController(StoredPermissionHost(kv, prompt=prompt))
    await controller.load()
    assert await controller.request() == PermissionState.DENIED
    assert await controller.request() == PermissionState.DENIED
    assert len(prompts) == 1


async def test_unanswered_prompt_stays_unset(kv):
    controller = PermissionController(StoredPermissionHost(kv, prompt=lambda: None))
    await controller.load()
    assert await controller.request() == PermissionState.UNSET
    assert await kv.get(PERMISSION_KEY) is None


async def test_corrupt_stored_value_reads_as_unset(kv):
    await kv.set(PERMISSION_KEY, "maybe")
    controller = PermissionController(StoredPermissionHost(kv))
    assert await controller.load() == PermissionState.UNSET


async def test_failing_host_request_never_raises():
    class BrokenHost(FakePermissionHost):
        async def request(self):
            raise RuntimeError("no notification API")

    controller = PermissionController(BrokenHost())
    await controller.load()
    assert await controller.request() == PermissionState.UNSET


async def test_missing_host_resolves_to_denied():
    controller = PermissionController(None)
    assert await controller.load() == PermissionState.UNSET
    assert await controller.request() == PermissionState.DENIED


async def test_change_is_published_on_bus():
    bus = Bus()
    changes = []
    bus.on(E.PERMISSION_CHANGED)(lambda state: changes.append(state))
    controller = PermissionController(FakePermissionHost(answer=PermissionState.GRANTED), bus=bus)
    await controller.load()
    await controller.request()
    await controller.request()
    assert changes == [PermissionState.GRANTED]


async def test_prompt_runs_on_daemon_thread(kv):
    threads = []

    def prompt():
        threads.append(threading.current_thread())
        return True

    controller = PermissionController(StoredPermissionHost(kv, prompt=prompt))
    await controller.load()
    assert await controller.request() == PermissionState.GRANTED
    assert threads[0].daemon is True
    assert threads[0] is not threading.main_thread()


async def test_unanswered_prompt_can_be_cancelled(kv):
    started = threading.Event()
    release = threading.Event()

    def prompt():
        started.set()
        release.wait(5)
        return True

    controller = PermissionController(StoredPermissionHost(kv, prompt=prompt))
    await controller.load()
    pending = asyncio.create_task(controller.request())
    try:
        for _ in range(100):
            if started.is_set():
                break
            await asyncio.sleep(0.01)
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending
        assert controller.state == PermissionState.UNSET
    finally:
        release.set()
