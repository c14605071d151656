"""
Person Worker - Redis Queue to PostgreSQL Persistence

Drains person records from a Redis list and inserts each one into the
PostgreSQL persons table. Runs until SIGINT/SIGTERM.

Features:
- Destructive tail pop from the configured Redis list
- Pydantic decoding of the JSON wire format
- Outcome-based backoff: none after a save, short when the queue is empty,
  long after a decode or persist failure
- Graceful shutdown that interrupts backoff sleeps
- Structured logging

Failed items are dropped, not re-queued.

Usage:
    # Consumer mode (default)
    python -m apps.worker

    # For development/testing
    RUN_ONCE=true python -m apps.worker
"""

import asyncio
import enum
import logging
import signal
import sys
from dataclasses import dataclass
from typing import Optional, Protocol

from utils.config import settings
from utils.db import PersonGateway
from utils.logging import setup_logging
from utils.mq import RedisQueue
from utils.schemas import PersonRecord, decode_person

logger = logging.getLogger(__name__)

# Longest payload excerpt written to logs
_PAYLOAD_LOG_LIMIT = 512


class Outcome(enum.Enum):
    """Classification of a single loop iteration."""

    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class IterationResult:
    outcome: Outcome
    error: Optional[BaseException] = None
    payload: Optional[bytes] = None


class Queue(Protocol):
    async def pop(self) -> Optional[bytes]: ...


class Gateway(Protocol):
    async def ensure_schema(self) -> None: ...

    async def insert_person(self, person: PersonRecord) -> None: ...


def backoff_seconds(outcome: Outcome, empty_backoff: float, error_backoff: float) -> float:
    """
    Delay to apply before the next poll.

    Args:
        outcome: Result of the iteration that just finished
        empty_backoff: Delay after finding the queue empty
        error_backoff: Delay after a failed iteration

    Returns:
        Seconds to sleep (0 after a successful save)
    """
    if outcome is Outcome.SUCCESS:
        return 0.0
    if outcome is Outcome.EMPTY:
        return empty_backoff
    return error_backoff


def _excerpt(payload: Optional[bytes]) -> Optional[str]:
    if payload is None:
        return None
    text = payload.decode("utf-8", errors="replace")
    if len(text) > _PAYLOAD_LOG_LIMIT:
        return text[:_PAYLOAD_LOG_LIMIT] + "..."
    return text


class PersonWorker:
    """
    Long-running poll, decode, persist loop.

    Handles:
    - Schema provisioning before the first poll
    - Per-item error containment and backoff
    - Signal handling for graceful shutdown
    """

    def __init__(
        self,
        queue: Queue,
        gateway: Gateway,
        *,
        empty_backoff: Optional[float] = None,
        error_backoff: Optional[float] = None,
        run_once: bool = False,
    ) -> None:
        """
        Initialize person worker.

        Args:
            queue: Queue handle offering pop()
            gateway: Persistence gateway for the persons table
            empty_backoff: Seconds to wait when the queue is empty
            error_backoff: Seconds to wait after a failed item
            run_once: If True, stop after the first popped item (for testing)

        Raises:
            ValueError: If error_backoff is not longer than empty_backoff
        """
        self.queue = queue
        self.gateway = gateway
        self.empty_backoff = settings.EMPTY_BACKOFF_SECONDS if empty_backoff is None else empty_backoff
        self.error_backoff = settings.ERROR_BACKOFF_SECONDS if error_backoff is None else error_backoff
        self.run_once = run_once
        self.shutdown_event = asyncio.Event()
        self._processed_count = 0
        self._failed_count = 0

        if self.error_backoff <= self.empty_backoff:
            raise ValueError(
                f"error_backoff ({self.error_backoff}) must be longer than "
                f"empty_backoff ({self.empty_backoff})"
            )

        logger.info(
            "PersonWorker initialized",
            extra={
                "run_once": run_once,
                "empty_backoff": self.empty_backoff,
                "error_backoff": self.error_backoff,
            },
        )

    @property
    def processed_count(self) -> int:
        return self._processed_count

    @property
    def failed_count(self) -> int:
        return self._failed_count

    async def run_iteration(self) -> IterationResult:
        """
        Pop one item, decode it and persist it.

        Any failure is logged and reported as Outcome.ERROR; the item is
        not re-queued.

        Returns:
            Tagged result of the iteration
        """
        payload: Optional[bytes] = None
        try:
            payload = await self.queue.pop()
            if payload is None:
                return IterationResult(Outcome.EMPTY)

            excerpt = _excerpt(payload)
            logger.info("Processing person data: %s", excerpt, extra={"payload": excerpt})

            person = decode_person(payload)
            await self.gateway.insert_person(person)

        except Exception as e:
            self._failed_count += 1
            logger.error(
                "Error processing person data: %s",
                str(e),
                extra={"payload": _excerpt(payload), "error_type": type(e).__name__},
                exc_info=True,
            )
            return IterationResult(Outcome.ERROR, error=e, payload=payload)

        self._processed_count += 1
        logger.info(
            "Successfully saved person: %s %s",
            person.first_name,
            person.last_name,
        )
        return IterationResult(Outcome.SUCCESS, payload=payload)

    async def sleep(self, seconds: float) -> bool:
        """
        Wait for the given time unless shutdown is requested first.

        Returns:
            True if shutdown was requested during (or before) the wait
        """
        if seconds <= 0:
            return self.shutdown_event.is_set()

        try:
            await asyncio.wait_for(self.shutdown_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def request_shutdown(self) -> None:
        """Ask the loop to stop at its next check."""
        self.shutdown_event.set()

    def setup_signal_handlers(self) -> None:
        """
        Setup handlers for graceful shutdown on SIGINT/SIGTERM.

        Must be called from the running event loop; a signal also ends a
        pending backoff sleep.
        """
        loop = asyncio.get_running_loop()

        def signal_handler(signum: int) -> None:
            logger.info("Received signal %d, initiating graceful shutdown", signum)
            self.request_shutdown()

        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, signal_handler, signum)

    def remove_signal_handlers(self) -> None:
        """Restore default SIGINT/SIGTERM handling on the running loop."""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)

    async def run(self) -> None:
        """
        Ensure the schema exists, then poll until shutdown is requested.

        Raises:
            Exception: If schema provisioning fails; the loop is not entered
        """
        logger.info("PersonWorker started")

        await self.gateway.ensure_schema()

        while not self.shutdown_event.is_set():
            result = await self.run_iteration()

            if self.run_once and result.outcome is not Outcome.EMPTY:
                logger.info("RUN_ONCE mode: signaling shutdown after processing item")
                self.request_shutdown()
                break

            delay = backoff_seconds(result.outcome, self.empty_backoff, self.error_backoff)
            if delay:
                logger.debug("Backing off for %.1fs (outcome=%s)", delay, result.outcome.value)
                await self.sleep(delay)

        logger.info(
            "PersonWorker stopping (processed=%d, failed=%d)",
            self._processed_count,
            self._failed_count,
        )


async def main() -> None:
    """Main entry point for the person worker."""
    setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)
    logger.info("Starting %s (queue=%s)", settings.APP_NAME, settings.QUEUE_NAME)

    queue = RedisQueue()
    worker: Optional[PersonWorker] = None

    try:
        gateway = PersonGateway()
        await queue.connect()

        worker = PersonWorker(queue, gateway, run_once=settings.RUN_ONCE)
        worker.setup_signal_handlers()
        await worker.run()

    except Exception as e:
        logger.error("Worker failed: %s", str(e), exc_info=True)
        sys.exit(1)

    finally:
        if worker is not None:
            worker.remove_signal_handlers()
        await queue.close()


def cli() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
