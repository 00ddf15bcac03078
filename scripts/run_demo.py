#!/usr/bin/env python3
"""
Run a local demo of the batching queue.

Demonstrates:
1. Size-triggered batches
2. Idle-timeout batches
3. Retries with exponential backoff
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import List

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from event_batcher.cli import setup_logging
from event_batcher.config import SdkConfig
from event_batcher.events.types import BatchAppData, TrackData
from event_batcher.sdk import EventSdk
from event_batcher.transport.interface import Transport, TransportError


class ConsoleTransport(Transport):
    """Prints every batch instead of sending it, failing the first N requests."""

    def __init__(self, failures: int = 0, latency: float = 0.1):
        self.failures = failures
        self.latency = latency
        self.started = time.monotonic()
        self.delivered: List[BatchAppData] = []

    async def issue_request(self, data: BatchAppData) -> None:
        await asyncio.sleep(self.latency)
        elapsed = time.monotonic() - self.started

        if self.failures > 0:
            self.failures -= 1
            print(f"   [{elapsed:6.2f}s] ❌ request with {data.size} event(s) failed")
            raise TransportError("simulated outage", status_code=503)

        events = ", ".join(item.event for item in data.batch)
        print(f"   [{elapsed:6.2f}s] 📦 delivered {data.size} event(s): {events}")
        self.delivered.append(data)


class DemoRunner:
    """Runs the local demonstration."""

    def __init__(self, batch_size: int, timeout_ms: int):
        self.config = SdkConfig(
            write_key="demo",
            batch_size=batch_size,
            timeout_ms=timeout_ms,
            base_delay_ms=200,
            retries=3,
        )

    async def run(self):
        """Run all demo steps."""
        print("\n" + "="*70)
        print("🚀 EVENT BATCHER - LOCAL DEMO")
        print("="*70)
        print(f"   Batch size: {self.config.batch_size}")
        print(f"   Idle timeout: {self.config.timeout_ms} ms")

        await self.step_size_trigger()
        await self.step_timeout_trigger()
        await self.step_retries()

    async def step_size_trigger(self):
        """Step 1: Fill batches faster than the timeout."""
        print("\n" + "-"*70)
        print("📊 STEP 1: Size-triggered batches")
        print("-"*70)

        transport = ConsoleTransport()
        async with EventSdk(self.config, transport=transport) as sdk:
            for i in range(self.config.batch_size * 2 + 1):
                sdk.track(TrackData(user_id="demo-user", event=f"Event {i}"))

        print(f"   ✅ {len(transport.delivered)} request(s) sent")

    async def step_timeout_trigger(self):
        """Step 2: Let a partial batch go out on the idle timer."""
        print("\n" + "-"*70)
        print("⏱️  STEP 2: Idle-timeout batch")
        print("-"*70)

        transport = ConsoleTransport()
        sdk = EventSdk(self.config, transport=transport)
        sdk.track(TrackData(user_id="demo-user", event="Lonely event"))

        await asyncio.sleep(self.config.timeout_ms / 1000 + 0.5)
        print(f"   ✅ {len(transport.delivered)} request(s) sent without flushing")
        await sdk.close()

    async def step_retries(self):
        """Step 3: Recover from transient failures."""
        print("\n" + "-"*70)
        print("🔁 STEP 3: Retries with backoff")
        print("-"*70)

        transport = ConsoleTransport(failures=2)
        async with EventSdk(self.config, transport=transport) as sdk:
            sdk.track(TrackData(user_id="demo-user", event="Eventually delivered"))

        print("   ✅ delivered after 2 failed attempt(s)")


def main():
    parser = argparse.ArgumentParser(description="Run the event batcher demo")
    parser.add_argument(
        "--batch-size", "-n",
        type=int,
        default=5,
        help="Events per request"
    )
    parser.add_argument(
        "--timeout-ms", "-t",
        type=int,
        default=500,
        help="Idle timeout in milliseconds"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level"
    )

    args = parser.parse_args()
    setup_logging(args.log_level)

    runner = DemoRunner(args.batch_size, args.timeout_ms)
    asyncio.run(runner.run())


if __name__ == "__main__":
    main()
