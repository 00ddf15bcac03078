"""
Pytest configuration and shared fixtures for the test suite.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from event_batcher.config import SdkConfig
from event_batcher.events.types import BatchAppData
from event_batcher.transport.interface import Transport


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> SdkConfig:
    """Create a test configuration."""
    return SdkConfig(
        write_key="test_write_key",
        host="https://events.example.test",
        batch_size=3,
        timeout_ms=500,
        base_delay_ms=0,
        retries=2,
        log_level="DEBUG",
    )


# ============================================================================
# Manual Timer Provider
# ============================================================================

class ManualTimerProvider:
    """
    Timer provider driven by the test.

    Timers never fire on their own; ``fire_all`` runs every armed callback.
    """

    def __init__(self):
        self.scheduled: List[int] = []           # delay_ms of every schedule_once call
        self.cancelled: List[int] = []           # handles passed to cancel
        self.active: Dict[int, Tuple[Callable[[], None], int]] = {}
        self._next_handle = 0

    def schedule_once(self, callback: Callable[[], None], delay_ms: int) -> int:
        self._next_handle += 1
        self.active[self._next_handle] = (callback, delay_ms)
        self.scheduled.append(delay_ms)
        return self._next_handle

    def cancel(self, handle: int) -> None:
        self.cancelled.append(handle)
        self.active.pop(handle, None)

    @property
    def armed_count(self) -> int:
        return len(self.active)

    def fire_all(self) -> None:
        """Fire every armed timer."""
        for handle, (callback, _) in list(self.active.items()):
            del self.active[handle]
            callback()


@pytest.fixture
def manual_timer() -> ManualTimerProvider:
    """Create a manually driven timer provider."""
    return ManualTimerProvider()


# ============================================================================
# Recording Executor
# ============================================================================

class RecordingExecutor:
    """
    Batch executor that records every call.

    Args:
        delay: Seconds each call takes
        fail_when: Predicate on the chunk; a matching chunk raises ``error``
        fail_times: Number of leading calls that raise ``error``
        error: Exception factory for failing calls
    """

    def __init__(
        self,
        delay: float = 0.0,
        fail_when: Optional[Callable[[list], bool]] = None,
        fail_times: int = 0,
        error: Callable[[], Exception] = lambda: RuntimeError("batch failed"),
    ):
        self.delay = delay
        self.fail_when = fail_when
        self.fail_times = fail_times
        self.error = error

        self.calls: List[list] = []
        self.collected: List[Any] = []
        self.active = 0
        self.max_active = 0

    async def __call__(self, batch: list) -> None:
        self.calls.append(list(batch))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)

            if self.fail_times > 0:
                self.fail_times -= 1
                raise self.error()

            if self.fail_when is not None and self.fail_when(batch):
                raise self.error()

            self.collected.extend(batch)
        finally:
            self.active -= 1


@pytest.fixture
def executor() -> RecordingExecutor:
    """Create a recording executor that always succeeds."""
    return RecordingExecutor()


# ============================================================================
# Recording Sleep
# ============================================================================

class RecordingSleep:
    """Replacement for asyncio.sleep that records delays and returns at once."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


# ============================================================================
# Fake Transport
# ============================================================================

class FakeTransport(Transport):
    """In-memory transport recording every delivered batch."""

    def __init__(self, executor: Optional[RecordingExecutor] = None):
        self.requests: List[BatchAppData] = []
        self.connected = False
        self.disconnected = False
        self._executor = executor

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnected = True

    async def issue_request(self, data: BatchAppData) -> None:
        self.requests.append(data)
        if self._executor is not None:
            await self._executor(data.batch)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
