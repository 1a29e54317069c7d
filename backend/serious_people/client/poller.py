"""Poller: cancellable fixed-interval polling as an explicit state machine.

States:
    idle -> polling -> ready       (first observation that satisfies is_done)
                    -> timed_out   (wall-clock timeout elapsed; caller offers "continue")
                    -> idle        (cancel())

Fetch failures (network errors, retryable API errors, a 404 before the plan
exists) are logged and treated as "not yet". Each fetch is bounded by the
remaining budget and raced against cancel(), which also wakes the sleeping
poller immediately, so no timer or task outlives it.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx
import structlog
from pydantic.alias_generators import to_camel

from serious_people.client.api_client import ApiError, SeriousPlanClient
from serious_people.core.config import get_settings
from serious_people.domain.plan_status import GenerationStatus, is_plan_settled

logger = structlog.get_logger(__name__)

# Result of a fetch that failed in a tolerated way ("not yet")
_NOT_YET = object()


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    READY = "ready"
    TIMED_OUT = "timed_out"


class Poller:
    """Polls ``fetch`` every ``interval`` seconds until ``is_done`` holds or ``timeout`` elapses."""

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Any]],
        is_done: Callable[[Any], bool],
        interval: float = 2.0,
        timeout: float = 120.0,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.fetch = fetch
        self.is_done = is_done
        self.interval = interval
        self.timeout = timeout

        self.state = PollState.IDLE
        self.last_result: Any = None
        self.attempts = 0
        self._cancelled = asyncio.Event()

    async def run(self) -> PollState:
        """Poll until ready, timed out or cancelled; returns the final state.

        Raises:
            RuntimeError: If this poller is already polling
        """
        if self.state == PollState.POLLING:
            raise RuntimeError("Poller is already running")

        self._cancelled.clear()
        self.state = PollState.POLLING
        self.attempts = 0
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        try:
            return await self._poll(loop, deadline)
        except BaseException:
            # Unexpected fetch errors and task cancellation leave the poller reusable
            self.state = PollState.IDLE
            raise

    async def _poll(self, loop: asyncio.AbstractEventLoop, deadline: float) -> PollState:
        while True:
            self.attempts += 1
            try:
                result = await self._fetch_once(deadline - loop.time())
            except asyncio.TimeoutError:
                return self._time_out()

            if result is not _NOT_YET:
                self.last_result = result
                if not self._cancelled.is_set() and self.is_done(result):
                    self.state = PollState.READY
                    return self.state

            if self._cancelled.is_set():
                self.state = PollState.IDLE
                return self.state

            remaining = deadline - loop.time()
            if remaining <= 0:
                return self._time_out()

            try:
                await asyncio.wait_for(self._cancelled.wait(), timeout=min(self.interval, remaining))
            except asyncio.TimeoutError:
                continue

            self.state = PollState.IDLE
            return self.state

    async def _fetch_once(self, remaining: float) -> Any:
        """Run one fetch bounded by the remaining budget and raced against cancel().

        Returns _NOT_YET when the fetch failed in a tolerated way or was cancelled.

        Raises:
            asyncio.TimeoutError: If the fetch outlives the remaining budget
        """
        fetch_task = asyncio.create_task(asyncio.wait_for(self.fetch(), timeout=max(remaining, 0)))
        cancel_task = asyncio.create_task(self._cancelled.wait())
        try:
            await asyncio.wait({fetch_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (fetch_task, cancel_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(fetch_task, cancel_task, return_exceptions=True)

        if fetch_task.cancelled():
            return _NOT_YET
        try:
            return fetch_task.result()
        except (ApiError, httpx.HTTPError) as exc:
            logger.info(
                "poll_fetch_failed",
                attempt=self.attempts,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return _NOT_YET

    def _time_out(self) -> PollState:
        logger.info("poll_timed_out", attempts=self.attempts, timeout_seconds=self.timeout)
        self.state = PollState.TIMED_OUT
        return self.state

    def cancel(self) -> None:
        """Stop polling; the running loop returns to idle without another fetch."""
        self._cancelled.set()
        if self.state != PollState.POLLING:
            self.state = PollState.IDLE


# ==================== HELPERS ====================


def plan_settled(plan: dict) -> bool:
    """True when the plan and every artifact are in a terminal status."""
    return is_plan_settled(plan["status"], [a["generationStatus"] for a in plan.get("artifacts", [])])


async def wait_for_plan(
    client: SeriousPlanClient,
    interval: float | None = None,
    timeout: float | None = None,
) -> Poller:
    """Poll the latest plan until it settles. Returns the finished Poller."""
    settings = get_settings()
    poller = Poller(
        fetch=client.get_latest_plan,
        is_done=plan_settled,
        interval=interval or settings.poll_interval_seconds,
        timeout=timeout or settings.poll_timeout_seconds,
    )
    await poller.run()
    return poller


async def wait_for_flag(
    client: SeriousPlanClient,
    flag: str,
    interval: float | None = None,
    timeout: float | None = None,
) -> Poller:
    """Poll the journey until completion flag ``flag`` (snake_case) is true."""
    settings = get_settings()
    key = to_camel(flag)
    poller = Poller(
        fetch=client.get_journey,
        is_done=lambda journey: bool(journey["state"].get(key)),
        interval=interval or settings.poll_interval_seconds,
        timeout=timeout or settings.poll_timeout_seconds,
    )
    await poller.run()
    return poller


def letter_settled(letter: dict) -> bool:
    """True once the coach letter is complete or errored."""
    return GenerationStatus(letter["status"]).is_terminal


async def wait_for_letter(
    client: SeriousPlanClient,
    interval: float | None = None,
    timeout: float | None = None,
) -> Poller:
    """Poll the coach letter until it settles. Returns the finished Poller."""
    settings = get_settings()
    poller = Poller(
        fetch=client.get_coach_letter,
        is_done=letter_settled,
        interval=interval or settings.poll_interval_seconds,
        timeout=timeout or settings.poll_timeout_seconds,
    )
    await poller.run()
    return poller
