"""Notification permission: unset -> granted | denied.

The host decides; this module only asks when the user explicitly requests it.
A denied permission is never re-prompted.
"""

import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from remindly.datamodel import PermissionState
from remindly.events import Bus, E
from remindly.logger import logger
from remindly.storage.kv import KeyValueStore

__all__ = ["PermissionHost", "StoredPermissionHost", "PermissionController", "console_prompt", "PERMISSION_KEY"]

PERMISSION_KEY = "notification_permission"

PromptFn = Callable[[], Optional[bool]]


def console_prompt() -> Optional[bool]:
    """Ask on the terminal. None when there is nobody to answer."""
    try:
        answer = input("Allow appointment reminder notifications? [y/N] ")
    except EOFError:
        return None
    return answer.strip().lower() in ("y", "yes")


async def _ask_in_daemon_thread(prompt: PromptFn) -> Optional[bool]:
    """Run a blocking prompt on a daemon thread, so an unanswered prompt does not hold up exit."""
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Optional[bool]] = loop.create_future()

    def _settle(answer: Optional[bool], error: Optional[Exception]) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(answer)

    def _target() -> None:
        answer, error = None, None
        try:
            answer = prompt()
        except Exception as e:
            error = e
        if not loop.is_closed():
            loop.call_soon_threadsafe(_settle, answer, error)

    threading.Thread(target=_target, name="permission-prompt", daemon=True).start()
    return await future


class PermissionHost(ABC):
    @abstractmethod
    async def read(self) -> PermissionState:
        pass

    @abstractmethod
    async def request(self) -> PermissionState:
        pass


class StoredPermissionHost(PermissionHost):
    """Host whose decision lives in the key-value store and is obtained through a prompt."""

    def __init__(self, kv: KeyValueStore, prompt: PromptFn = console_prompt) -> None:
        self.kv = kv
        self.prompt = prompt

    async def read(self) -> PermissionState:
        raw = await self.kv.get(PERMISSION_KEY)
        if raw is None:
            return PermissionState.UNSET
        return PermissionState(raw)

    async def request(self) -> PermissionState:
        answer = await _ask_in_daemon_thread(self.prompt)
        if answer is None:
            return PermissionState.UNSET
        state = PermissionState.GRANTED if answer else PermissionState.DENIED
        await self.kv.set(PERMISSION_KEY, state.value)
        return state


class PermissionController:
    def __init__(self, host: Optional[PermissionHost], bus: Optional[Bus] = None) -> None:
        self.host = host
        self.bus = bus
        self._state = PermissionState.UNSET

    @property
    def state(self) -> PermissionState:
        return self._state

    async def load(self) -> PermissionState:
        if self.host is None:
            logger.warning("No notification host available, permission stays unset")
            self._state = PermissionState.UNSET
            return self._state
        try:
            self._state = await self.host.read()
        except Exception as e:
            logger.warning(f"Failed to read notification permission, treating it as unset: {e}")
            self._state = PermissionState.UNSET
        logger.info(f"Notification permission: {self._state.value}")
        return self._state

    async def request(self) -> PermissionState:
        """User-initiated request. Never raises."""
        if self._state != PermissionState.UNSET:
            # granted needs no prompt; denied is host policy
            return self._state
        if self.host is None:
            logger.warning("Notification permission requested but no host is available")
            self._set(PermissionState.DENIED)
            return self._state

        try:
            new_state = await self.host.request()
        except Exception as e:
            logger.error(f"Notification permission request failed: {e}")
            new_state = PermissionState.UNSET
        self._set(new_state)
        return self._state

    def _set(self, state: PermissionState) -> None:
        if state == self._state:
            return
        logger.info(f"Notification permission changed: {self._state.value} -> {state.value}")
        self._state = state
        if self.bus is not None:
            self.bus.emit(E.PERMISSION_CHANGED, state=state)
